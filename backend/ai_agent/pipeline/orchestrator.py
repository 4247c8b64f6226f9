import asyncio
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import ValidationError

from ai_agent.config import STAGES, settings
from ai_agent.dependencies import get_gateway
from ai_agent.logging_config import logger, set_run_id
from ai_agent.pipeline.architecture_generator import generate_architecture
from ai_agent.pipeline.code_generator import generate_code
from ai_agent.pipeline.context_builder import build_context
from ai_agent.pipeline.errors import AgentError, InputError
from ai_agent.pipeline.gateway import ModelGateway, StreamCallback
from ai_agent.pipeline.intent_analyzer import analyze_intent
from ai_agent.pipeline.prompt_loader import PromptLoader
from ai_agent.pipeline.stage import StageContext
from ai_agent.pipeline.token_tracker import TokenTracker
from ai_agent.schemas.pipeline import GenerateProjectResult, ProgressEvent
from ai_agent.schemas.project import ProjectInput
from ai_agent.utils.sse import sse_done, sse_error, sse_progress, sse_result

ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class GenerateProjectOptions:
    api_key: str | None = None
    model_tier: str | None = None
    models: dict[str, str] = field(default_factory=dict)
    stream: bool = False
    on_progress: ProgressCallback | None = None
    log_token_usage: bool = True
    gateway: ModelGateway | None = None
    prompts: PromptLoader | None = None


def coerce_input(project_input: ProjectInput | dict[str, Any]) -> ProjectInput:
    if isinstance(project_input, ProjectInput):
        return project_input
    try:
        return ProjectInput.model_validate(project_input)
    except ValidationError as e:
        issues = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        first = issues[0]["msg"] if issues else str(e)
        raise InputError(f"Invalid project input: {first}", context={"issues": issues}) from e


def _resolve_models(options: GenerateProjectOptions) -> dict[str, str]:
    unknown = set(options.models) - set(STAGES)
    if unknown:
        raise InputError(
            f"Unknown stage(s) in model overrides: {', '.join(sorted(unknown))}",
            context={"stages": list(STAGES)},
        )
    return {**settings.model_map(options.model_tier), **options.models}


async def generate_project(
    project_input: ProjectInput | dict[str, Any],
    options: GenerateProjectOptions | None = None,
) -> GenerateProjectResult:
    """Run intent -> architecture -> code -> context for one project description.

    Input problems raise ``InputError`` before any model call. A failing stage
    aborts the run; the error is tagged with the stage it came from.
    """
    options = options or GenerateProjectOptions()
    project_input = coerce_input(project_input)
    models = _resolve_models(options)

    gateway = options.gateway or get_gateway(options.api_key)

    run_id = set_run_id()
    ctx = StageContext(gateway=gateway, tracker=TokenTracker(), prompts=options.prompts or PromptLoader())
    logger.info("Starting generation run %s (%s)", run_id, ", ".join(f"{s}={m}" for s, m in models.items()))

    def emit(stage: str, event_type: str, **kwargs) -> None:
        if options.on_progress:
            options.on_progress(ProgressEvent(stage=stage, type=event_type, **kwargs))

    def stream_to(stage: str) -> StreamCallback | None:
        if not (options.stream and options.on_progress):
            return None

        def on_stream(chunk: str, accumulated: str) -> None:
            emit(stage, "chunk", chunk=chunk, accumulated=accumulated)

        return on_stream

    def on_batch(batch_number: int, total_batches: int, batch) -> None:
        emit("code", "chunk", message=f"batch {batch_number}/{total_batches}: {batch.description}")

    stage = "intent"
    try:
        emit("intent", "start", message="Analyzing project requirements...")
        intent = await analyze_intent(ctx, project_input, model=models["intent"], on_stream=stream_to("intent"))
        emit("intent", "complete", message=f"Detected {intent.category} project ({intent.complexity})")

        stage = "architecture"
        emit("architecture", "start", message="Designing project architecture...")
        architecture = await generate_architecture(
            ctx, intent, model=models["architecture"], on_stream=stream_to("architecture"),
        )
        emit(
            "architecture", "complete",
            message=f"Planned {len(architecture.pages)} pages, {len(architecture.components)} components",
        )

        stage = "code"
        emit("code", "start", message="Generating code...")
        code = await generate_code(
            ctx, architecture, project_input,
            model=models["code"], on_stream=stream_to("code"), on_batch=on_batch,
        )
        emit("code", "complete", message=f"Generated {len(code.files)} files")

        stage = "context"
        emit("context", "start", message="Writing project context...")
        context = await build_context(
            ctx, intent, architecture, code, project_input,
            model=models["context"], on_stream=stream_to("context"),
        )
        emit("context", "complete", message="Context files ready")
    except AgentError as e:
        e.stage = e.stage or stage
        logger.error("Generation failed: %s", e)
        raise

    token_usage = ctx.tracker.summary()
    if options.log_token_usage:
        logger.info("Generation run %s complete\n%s", run_id, ctx.tracker.export_metrics())

    return GenerateProjectResult(
        intent=intent,
        architecture=architecture,
        code=code,
        context=context,
        token_usage=token_usage,
    )


async def run_pipeline(
    project_input: ProjectInput | dict[str, Any],
    options: GenerateProjectOptions | None = None,
) -> AsyncGenerator[str, None]:
    """Run generate_project and yield SSE-formatted events: progress..., result or error, done."""
    options = options or GenerateProjectOptions()
    queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue()
    forward = options.on_progress

    def on_progress(event: ProgressEvent) -> None:
        queue.put_nowait(event)
        if forward:
            forward(event)

    task = asyncio.create_task(generate_project(project_input, replace(options, on_progress=on_progress)))
    task.add_done_callback(lambda _: queue.put_nowait(None))
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield sse_progress(event)

        try:
            result = task.result()
        except AgentError as e:
            yield sse_error(e.to_dict())
        except Exception as e:
            logger.exception("Generation run crashed")
            yield sse_error({"code": "internal_error", "message": str(e), "retryable": False})
        else:
            yield sse_result(result.model_dump(mode="json"))
        yield sse_done()
    finally:
        if not task.done():
            task.cancel()
