from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

from ai_agent.schemas.code import CursorContext, GeneratedCode
from ai_agent.schemas.project import (
    ComponentDefinition, PageDefinition, ProjectArchitecture, ProjectIntent, RouteDefinition,
)

PipelineStage = Literal["intent", "architecture", "code", "context"]


class GenerationBatch(BaseModel):
    description: str = ""
    pages: list[PageDefinition] = []
    components: list[ComponentDefinition] = []
    routes: list[RouteDefinition] = []

    @property
    def item_count(self) -> int:
        return len(self.pages) + len(self.components) + len(self.routes)


class PreviousFileRef(BaseModel):
    path: str
    description: str


class RepairResult(BaseModel):
    success: bool
    data: Any = None
    repaired: bool = False
    repairs: list[str] = []
    error: str | None = None


class ProgressEvent(BaseModel):
    stage: PipelineStage
    type: Literal["start", "chunk", "complete"]
    message: str | None = None
    chunk: str | None = None
    accumulated: str | None = None


class TokenUsage(BaseModel):
    stage: PipelineStage
    model: str
    input_tokens: int
    output_tokens: int
    cost: float
    duration_ms: int = 0
    timestamp: datetime


class StageTotals(BaseModel):
    calls: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0


class TokenSummary(BaseModel):
    stages: dict[str, StageTotals] = {}
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost: float = 0.0
    calls: int = 0


class PartialCode(BaseModel):
    """State of a chunked code generation that stopped before its last batch."""

    completed_batches: int
    total_batches: int
    code: GeneratedCode
    previous_files: list[PreviousFileRef] = []

    @property
    def status(self) -> str:
        return f"stopped at batch {self.completed_batches + 1} of {self.total_batches}"


class GenerateProjectResult(BaseModel):
    intent: ProjectIntent
    architecture: ProjectArchitecture
    code: GeneratedCode
    context: CursorContext
    token_usage: TokenSummary | None = None


class GenerateRequest(BaseModel):
    description: str
    project_name: str | None = None
    template: str | None = None
    vision: str | None = None
    mission: str | None = None
    model_tier: str | None = None
    api_key: str | None = None
