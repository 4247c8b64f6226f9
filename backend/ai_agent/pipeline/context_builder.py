from ai_agent.config import settings
from ai_agent.pipeline.errors import MalformedOutputError
from ai_agent.pipeline.gateway import StreamCallback
from ai_agent.pipeline.prompts.context_builder import CURSORRULES_MARKER, START_PROMPT_MARKER
from ai_agent.pipeline.stage import StageContext, run_stage_call
from ai_agent.schemas.code import CursorContext, GeneratedCode
from ai_agent.schemas.project import ProjectArchitecture, ProjectInput, ProjectIntent


def parse_context_documents(stage: str, text: str) -> dict[str, str]:
    """Split the delimited response into the .cursorrules and START_PROMPT.md bodies."""
    rules_at = text.find(CURSORRULES_MARKER)
    prompt_at = text.find(START_PROMPT_MARKER)
    if rules_at == -1 or prompt_at == -1 or prompt_at < rules_at:
        raise MalformedOutputError(
            f"Context response is missing the {CURSORRULES_MARKER} / {START_PROMPT_MARKER} sections",
            excerpt=text,
            stage=stage,
        )
    return {
        "cursorrules": text[rules_at + len(CURSORRULES_MARKER):prompt_at].strip(),
        "start_prompt": text[prompt_at + len(START_PROMPT_MARKER):].strip(),
    }


def _architecture_summary(architecture: ProjectArchitecture) -> str:
    lines = [f"Template: {architecture.template}"]
    lines += [f"Page {page.path}: {page.name}" for page in architecture.pages]
    lines += [
        f"Component {component.name} ({component.type})" for component in architecture.components
    ]
    lines += [f"Route {route.method or 'GET'} {route.path}" for route in architecture.routes]
    enabled = {k: v for k, v in architecture.integrations.items() if v}
    if enabled:
        lines.append("Integrations: " + ", ".join(f"{k}={v}" for k, v in enabled.items()))
    return "\n".join(lines)


async def build_context(
    ctx: StageContext,
    intent: ProjectIntent,
    architecture: ProjectArchitecture,
    code: GeneratedCode,
    project_input: ProjectInput | None = None,
    *,
    model: str | None = None,
    on_stream: StreamCallback | None = None,
) -> CursorContext:
    """Write .cursorrules and START_PROMPT.md for the generated project in one call."""
    model = model or settings.model_map()["context"]
    files = "\n".join(f"- {f.path}" for f in code.files) or "- (none)"

    def build_prompt() -> str:
        return ctx.prompts.load("context_builder", {
            "intent": intent.model_dump_json(indent=2),
            "architecture": _architecture_summary(architecture),
            "files": files,
            "project_name": (project_input.project_name if project_input else None) or "MyApp",
            "description": project_input.description if project_input else intent.reasoning,
        })

    return await run_stage_call(
        ctx,
        stage="context",
        model=model,
        build_prompt=build_prompt,
        user_message="Generate the .cursorrules and START_PROMPT.md for this project.",
        max_tokens=settings.context_max_tokens,
        on_stream=on_stream,
        parse=parse_context_documents,
    )
