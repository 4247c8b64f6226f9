import json

from ai_agent.config import settings
from ai_agent.pipeline.gateway import StreamCallback
from ai_agent.pipeline.stage import StageContext, run_stage_call
from ai_agent.schemas.project import ProjectArchitecture, ProjectIntent
from ai_agent.templates.catalog import select_template, validate_integrations


async def generate_architecture(
    ctx: StageContext,
    intent: ProjectIntent,
    *,
    model: str | None = None,
    on_stream: StreamCallback | None = None,
) -> ProjectArchitecture:
    """Design pages, components and routes for the analyzed intent.

    The integrations in the result are the intent's integrations filtered
    by what the selected template supports, not what the model returned.
    """
    model = model or settings.model_map()["architecture"]
    template = select_template(intent)
    integrations = validate_integrations(template, intent.integrations)

    def build_prompt() -> str:
        return ctx.prompts.load("architecture_design", {
            "template": template.id,
            "features": ", ".join(template.features),
            "supported_integrations": json.dumps(template.supported_integrations, indent=2),
            "intent": intent.model_dump_json(indent=2),
        })

    architecture = await run_stage_call(
        ctx,
        stage="architecture",
        model=model,
        build_prompt=build_prompt,
        user_message="Design the project architecture based on the intent analysis.",
        max_tokens=settings.architecture_max_tokens,
        on_stream=on_stream,
    )
    return architecture.model_copy(update={"integrations": integrations})
