from ai_agent.pipeline.code_generator import generate_code
from ai_agent.pipeline.errors import (
    AgentError, CodeGenerationError, InputError, MalformedOutputError, RetryExhaustedError,
    SchemaValidationError, ServiceError, TransientServiceError,
)
from ai_agent.pipeline.orchestrator import GenerateProjectOptions, generate_project, run_pipeline
from ai_agent.schemas.pipeline import GenerateProjectResult, PartialCode, ProgressEvent
from ai_agent.schemas.project import ProjectInput

__all__ = [
    "AgentError",
    "CodeGenerationError",
    "GenerateProjectOptions",
    "GenerateProjectResult",
    "InputError",
    "MalformedOutputError",
    "PartialCode",
    "ProgressEvent",
    "ProjectInput",
    "RetryExhaustedError",
    "SchemaValidationError",
    "ServiceError",
    "TransientServiceError",
    "generate_code",
    "generate_project",
    "run_pipeline",
]
