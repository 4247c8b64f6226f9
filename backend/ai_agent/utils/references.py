from pathlib import Path

from ai_agent.config import settings
from ai_agent.logging_config import logger

TEMPLATE_REFERENCE_UNAVAILABLE = "// Template reference not available"

DEFAULT_DESIGN_REFERENCE = """DESIGN: Modern SaaS aesthetic (Linear/Vercel inspired), shadcn/ui patterns,
consistent Tailwind spacing, dark mode ready, WCAG AA contrast, no generic filler copy."""


def load_template_reference(template_id: str, templates_dir: str | Path | None = None) -> str:
    """An example page from the template, to show the model the code style."""
    templates_dir = Path(templates_dir or settings.templates_dir)
    page_path = templates_dir / template_id / "app" / "page.tsx"
    try:
        content = page_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Could not load template reference %s: %s", page_path, e)
        return TEMPLATE_REFERENCE_UNAVAILABLE
    return f"Example page from {template_id} template:\n\n{content}"


def load_design_reference(path: str | Path | None = None) -> str:
    path = path or settings.design_reference_path
    if not path:
        return DEFAULT_DESIGN_REFERENCE
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Could not load design reference %s: %s", path, e)
        return DEFAULT_DESIGN_REFERENCE
