import json
import re
from pathlib import Path

from ai_agent.config import settings
from ai_agent.pipeline.prompts.architecture_design import ARCHITECTURE_DESIGN
from ai_agent.pipeline.prompts.code_generation import BATCH_INSTRUCTIONS, CODE_GENERATION
from ai_agent.pipeline.prompts.context_builder import CONTEXT_BUILDER
from ai_agent.pipeline.prompts.intent_analysis import INTENT_ANALYSIS

BUILTIN_PROMPTS = {
    "intent_analysis": INTENT_ANALYSIS,
    "architecture_design": ARCHITECTURE_DESIGN,
    "code_generation": CODE_GENERATION,
    "batch_instructions": BATCH_INSTRUCTIONS,
    "context_builder": CONTEXT_BUILDER,
}


_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render(template: str, variables: dict[str, str]) -> str:
    """Replace ``{name}`` for every name in ``variables``; other braces stay as they are.

    Single pass: substituted values are never scanned for placeholders.
    """
    return _PLACEHOLDER.sub(lambda m: variables.get(m.group(1), m.group(0)), template)


class PromptLoader:
    """Loads prompt templates by name and fills in their variables.

    ``<prompts_dir>/<name>.md`` takes precedence over the built-in template
    of the same name.
    """

    def __init__(self, prompts_dir: str | Path | None = None):
        prompts_dir = prompts_dir if prompts_dir is not None else settings.prompts_dir
        self.prompts_dir = Path(prompts_dir) if prompts_dir else None
        self._cache: dict[str, str] = {}

    def _read(self, name: str) -> str:
        if self.prompts_dir:
            path = self.prompts_dir / f"{name}.md"
            if path.is_file():
                return path.read_text(encoding="utf-8")
        try:
            return BUILTIN_PROMPTS[name]
        except KeyError:
            raise ValueError(f"Unknown prompt template: {name}") from None

    def load(self, name: str, variables: dict[str, str] | None = None) -> str:
        variables = variables or {}
        cache_key = f"{name}-{json.dumps(variables, sort_keys=True)}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        content = render(self._read(name), variables)
        self._cache[cache_key] = content
        return content

    def clear_cache(self) -> None:
        self._cache.clear()
