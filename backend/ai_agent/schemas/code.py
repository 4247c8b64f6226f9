from pydantic import BaseModel, Field


class FileDefinition(BaseModel):
    path: str = Field(min_length=1)
    content: str
    overwrite: bool = True


class IntegrationCode(BaseModel):
    integration: str
    files: list[FileDefinition] = []


class GeneratedCode(BaseModel):
    files: list[FileDefinition] = []
    integration_code: list[IntegrationCode] = []


class CursorContext(BaseModel):
    cursorrules: str = Field(min_length=1)
    start_prompt: str = Field(min_length=1)
