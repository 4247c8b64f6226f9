from typing import Any

from pydantic import BaseModel, ValidationError

from ai_agent.pipeline.errors import SchemaValidationError
from ai_agent.schemas.code import CursorContext, GeneratedCode
from ai_agent.schemas.project import ProjectArchitecture, ProjectIntent

STAGE_SCHEMAS: dict[str, type[BaseModel]] = {
    "intent": ProjectIntent,
    "architecture": ProjectArchitecture,
    "code": GeneratedCode,
    "context": CursorContext,
}


def validate(stage: str, data: Any) -> BaseModel:
    """Validate repaired model output against the stage's schema."""
    try:
        schema = STAGE_SCHEMAS[stage]
    except KeyError:
        raise ValueError(f"No schema registered for stage '{stage}'") from None

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        issues = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        summary = ", ".join(f"{issue['loc'] or '<root>'}: {issue['msg']}" for issue in issues[:10])
        raise SchemaValidationError(f"Invalid AI output: {summary}", issues=issues, stage=stage) from e
