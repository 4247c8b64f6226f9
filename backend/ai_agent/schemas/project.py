from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ai_agent.config import settings

CREATE_NEW = "create-new"

INTEGRATION_TYPES = ("auth", "payments", "cms", "search", "storage", "image_opt", "monitoring", "ai")


class ProjectInput(BaseModel):
    description: str
    project_name: str | None = None
    template: str | None = None
    vision: str | None = None
    mission: str | None = None

    model_config = {"frozen": True}

    @field_validator("description")
    @classmethod
    def check_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        if len(value) > settings.max_description_length:
            raise ValueError(f"Description must be at most {settings.max_description_length} characters")
        return value


class ProjectIntent(BaseModel):
    category: str
    suggested_template: str
    confidence: float = Field(ge=0, le=1)
    reasoning: str = ""
    complexity: Literal["simple", "moderate", "complex"]
    features: list[str] = []
    key_entities: list[str] = []
    integrations: dict[str, str | None] = {}


class PageDefinition(BaseModel):
    path: str
    name: str
    description: str = ""
    components: list[str] = []
    layout: str | None = None


class ComponentDefinition(BaseModel):
    name: str
    type: str
    description: str = ""
    props: dict[str, str] = {}
    template: str = CREATE_NEW  # "create-new" or the id of an existing component

    @property
    def is_new(self) -> bool:
        return self.template == CREATE_NEW


class RouteDefinition(BaseModel):
    path: str
    type: str = "page"  # "page", "api", ...
    method: str | None = None
    description: str = ""


class ProjectArchitecture(BaseModel):
    template: str
    pages: list[PageDefinition] = []
    components: list[ComponentDefinition] = []
    routes: list[RouteDefinition] = []
    integrations: dict[str, str | None] = {}
