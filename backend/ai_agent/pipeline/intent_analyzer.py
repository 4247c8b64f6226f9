from ai_agent.config import settings
from ai_agent.pipeline.gateway import StreamCallback
from ai_agent.pipeline.stage import StageContext, run_stage_call
from ai_agent.schemas.project import ProjectInput, ProjectIntent
from ai_agent.templates.catalog import TEMPLATES, describe_integrations, get_template


def _extra_context(project_input: ProjectInput) -> str:
    lines = []
    if project_input.project_name:
        lines.append(f"Project name: {project_input.project_name}")
    if project_input.vision:
        lines.append(f"Vision: {project_input.vision}")
    if project_input.mission:
        lines.append(f"Mission: {project_input.mission}")
    return "\n".join(lines) or "none"


async def analyze_intent(
    ctx: StageContext,
    project_input: ProjectInput,
    *,
    model: str | None = None,
    on_stream: StreamCallback | None = None,
) -> ProjectIntent:
    """Classify the project description into a structured intent."""
    model = model or settings.model_map()["intent"]

    def build_prompt() -> str:
        return ctx.prompts.load("intent_analysis", {
            "templates": ", ".join(TEMPLATES),
            "integrations": describe_integrations(),
            "extra_context": _extra_context(project_input),
            "description": project_input.description,
        })

    intent = await run_stage_call(
        ctx,
        stage="intent",
        model=model,
        build_prompt=build_prompt,
        user_message=f"Analyze this project description: {project_input.description}",
        max_tokens=settings.intent_max_tokens,
        on_stream=on_stream,
    )

    if project_input.template and get_template(project_input.template):
        intent = intent.model_copy(update={"suggested_template": project_input.template})
    return intent
