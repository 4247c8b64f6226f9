from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from ai_agent.config import settings
from ai_agent.dependencies import GatewayFactory, get_gateway_factory
from ai_agent.logging_config import logger
from ai_agent.pipeline.errors import AgentError, InputError
from ai_agent.pipeline.orchestrator import (
    GenerateProjectOptions, coerce_input, generate_project, run_pipeline,
)
from ai_agent.schemas.pipeline import GenerateProjectResult, GenerateRequest
from ai_agent.schemas.project import ProjectInput

router = APIRouter(prefix="/api/v1/generate", tags=["generate"])


def status_for_error(error: AgentError) -> int:
    if isinstance(error, InputError):
        return 400
    if error.retryable:
        return 503
    return 502


def _error_response(error: AgentError) -> JSONResponse:
    return JSONResponse(status_code=status_for_error(error), content=error.to_dict())


def _prepare(
    data: GenerateRequest, gateway_factory: GatewayFactory, stream: bool = False,
) -> tuple[ProjectInput, GenerateProjectOptions]:
    project_input = coerce_input(data.model_dump(include={"description", "project_name", "template", "vision", "mission"}))
    settings.model_map(data.model_tier)
    options = GenerateProjectOptions(
        api_key=data.api_key,
        model_tier=data.model_tier,
        stream=stream,
        gateway=gateway_factory(data.api_key),
    )
    return project_input, options


@router.post("", response_model=GenerateProjectResult)
async def generate(data: GenerateRequest, gateway_factory: GatewayFactory = Depends(get_gateway_factory)):
    try:
        project_input, options = _prepare(data, gateway_factory)
        return await generate_project(project_input, options)
    except AgentError as e:
        logger.warning("Generate request failed: %s", e)
        return _error_response(e)


@router.post("/stream")
async def generate_stream(data: GenerateRequest, gateway_factory: GatewayFactory = Depends(get_gateway_factory)):
    try:
        project_input, options = _prepare(data, gateway_factory, stream=True)
    except AgentError as e:
        return _error_response(e)

    return StreamingResponse(run_pipeline(project_input, options), media_type="text/event-stream")
