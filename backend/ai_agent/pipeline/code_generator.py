from collections.abc import Callable
from functools import partial

from ai_agent.config import settings
from ai_agent.logging_config import logger
from ai_agent.pipeline.batching import create_batches, estimate_file_count, summarize_previous_files
from ai_agent.pipeline.errors import AgentError, CodeGenerationError, InputError
from ai_agent.pipeline.gateway import StreamCallback
from ai_agent.pipeline.prompts.code_generation import PREVIOUS_FILES_HEADER
from ai_agent.pipeline.stage import StageContext, run_stage_call
from ai_agent.schemas.code import FileDefinition, GeneratedCode, IntegrationCode
from ai_agent.schemas.pipeline import GenerationBatch, PartialCode, PreviousFileRef
from ai_agent.schemas.project import ProjectArchitecture, ProjectInput
from ai_agent.utils.references import load_design_reference, load_template_reference

# (batch number, total batches, batch)
BatchCallback = Callable[[int, int, GenerationBatch], None]


def _reference_variables(architecture: ProjectArchitecture, project_input: ProjectInput | None) -> dict[str, str]:
    return {
        "project_name": (project_input.project_name if project_input else None) or "MyApp",
        "template_reference": load_template_reference(architecture.template),
        "design_reference": load_design_reference(),
    }


async def generate_code(
    ctx: StageContext,
    architecture: ProjectArchitecture,
    project_input: ProjectInput | None = None,
    *,
    model: str | None = None,
    on_stream: StreamCallback | None = None,
    on_batch: BatchCallback | None = None,
    resume_from: PartialCode | None = None,
    batch_size: int | None = None,
) -> GeneratedCode:
    """Generate source files for the architecture.

    Small architectures are generated in one call. Larger ones are split into
    batches generated one after another, each told which files earlier
    batches already produced. ``resume_from`` continues a chunked run that
    failed part way, from the partial result its error carried.
    """
    model = model or settings.model_map()["code"]
    batch_size = batch_size or settings.batch_size

    estimated_files = estimate_file_count(architecture)
    if estimated_files <= batch_size and resume_from is None:
        return await generate_single_batch(ctx, architecture, project_input, model=model, on_stream=on_stream)

    logger.info("Using chunked generation for %d files", estimated_files)
    return await generate_chunked(
        ctx,
        architecture,
        project_input,
        model=model,
        on_stream=on_stream,
        on_batch=on_batch,
        resume_from=resume_from,
        batch_size=batch_size,
    )


async def generate_single_batch(
    ctx: StageContext,
    architecture: ProjectArchitecture,
    project_input: ProjectInput | None,
    *,
    model: str,
    on_stream: StreamCallback | None = None,
) -> GeneratedCode:
    variables = _reference_variables(architecture, project_input)

    def build_prompt() -> str:
        return ctx.prompts.load("code_generation", {**variables, "architecture": architecture.model_dump_json(indent=2)})

    return await run_stage_call(
        ctx,
        stage="code",
        model=model,
        build_prompt=build_prompt,
        user_message="Generate the code files based on the architecture definition.",
        max_tokens=settings.batch_token_limit,
        on_stream=on_stream,
    )


def build_batch_prompt(
    ctx: StageContext,
    variables: dict[str, str],
    batch: GenerationBatch,
    batch_number: int,
    total_batches: int,
    previous_files: list[PreviousFileRef],
) -> str:
    base = ctx.prompts.load("code_generation", variables)
    instructions = ctx.prompts.load("batch_instructions", {
        "batch_number": str(batch_number),
        "total_batches": str(total_batches),
        "batch_description": batch.description,
    })
    prompt = f"{base}\n\n{instructions}"
    if previous_files:
        listing = "\n".join(f"- {ref.path}: {ref.description}" for ref in previous_files)
        prompt += f"\n\n{PREVIOUS_FILES_HEADER}\n{listing}"
    return prompt


async def generate_chunked(
    ctx: StageContext,
    architecture: ProjectArchitecture,
    project_input: ProjectInput | None,
    *,
    model: str,
    on_stream: StreamCallback | None = None,
    on_batch: BatchCallback | None = None,
    resume_from: PartialCode | None = None,
    batch_size: int | None = None,
) -> GeneratedCode:
    batches = create_batches(architecture, batch_size)
    total = len(batches)

    files: list[FileDefinition] = []
    integration_code: list[IntegrationCode] = []
    previous_files: list[PreviousFileRef] = []
    start = 0
    if resume_from is not None:
        if resume_from.total_batches != total:
            raise InputError(
                f"Partial result was planned as {resume_from.total_batches} batches, "
                f"this architecture plans {total}",
                stage="code",
            )
        files = list(resume_from.code.files)
        integration_code = list(resume_from.code.integration_code)
        previous_files = list(resume_from.previous_files)
        start = resume_from.completed_batches
        logger.info("Resuming chunked generation at batch %d/%d", start + 1, total)

    variables = _reference_variables(architecture, project_input)

    for index in range(start, total):
        batch = batches[index]
        batch_number = index + 1
        logger.info("Generating batch %d/%d: %s", batch_number, total, batch.description)
        if on_batch:
            on_batch(batch_number, total, batch)

        batch_architecture = ProjectArchitecture(
            template=architecture.template,
            pages=batch.pages,
            components=batch.components,
            routes=batch.routes,
            integrations=architecture.integrations,
        )
        batch_variables = {**variables, "architecture": batch_architecture.model_dump_json(indent=2)}
        known_files = list(previous_files)

        try:
            result = await run_stage_call(
                ctx,
                stage="code",
                model=model,
                build_prompt=partial(
                    build_batch_prompt, ctx, batch_variables, batch, batch_number, total, known_files,
                ),
                user_message=f"Generate batch {batch_number} of {total}. Only generate files for: {batch.description}",
                max_tokens=settings.batch_token_limit,
                on_stream=on_stream,
                label=f"code batch {batch_number}/{total}",
                batch=batch_number,
            )
        except AgentError as e:
            partial_code = PartialCode(
                completed_batches=index,
                total_batches=total,
                code=GeneratedCode(files=files, integration_code=integration_code),
                previous_files=previous_files,
            )
            logger.error("Chunked generation %s: %s", partial_code.status, e.message)
            raise CodeGenerationError(
                f"Code generation {partial_code.status} ({batch.description}): {e.message}",
                partial=partial_code,
                cause=e,
                total_batches=total,
                stage="code",
                batch=batch_number,
            ) from e

        files.extend(result.files)
        integration_code.extend(result.integration_code)
        previous_files.extend(summarize_previous_files(result.files))

    logger.info("Chunked generation complete: %d files generated", len(files))
    return GeneratedCode(files=files, integration_code=integration_code)
