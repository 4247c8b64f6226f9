"""
Shared fixtures: a scripted model gateway and canned stage outputs.
"""
import json
import os

import pytest

os.environ.setdefault("OPENAI_API_KEY", "test-api-key")

from ai_agent.config import settings
from ai_agent.pipeline.gateway import LLMRequest, LLMResponse, Usage
from ai_agent.pipeline.stage import StageContext
from ai_agent.schemas.project import ComponentDefinition, PageDefinition, ProjectArchitecture, RouteDefinition


class FakeGateway:
    """Returns scripted responses in order and records every request.

    A scripted item may be a string (returned as the response text), a dict or
    list (returned as JSON) or an exception instance (raised).
    """

    def __init__(self, responses=None, input_tokens: int = 100, output_tokens: int = 50):
        self.responses = list(responses or [])
        self.requests: list[LLMRequest] = []
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens

    def queue(self, *responses) -> "FakeGateway":
        self.responses.extend(responses)
        return self

    async def complete(self, request: LLMRequest, on_stream=None) -> LLMResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"No scripted response left for request #{len(self.requests)}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        text = response if isinstance(response, str) else json.dumps(response)

        if on_stream:
            accumulated = ""
            for i in range(0, len(text), 32):
                chunk = text[i:i + 32]
                accumulated += chunk
                on_stream(chunk, accumulated)

        return LLMResponse(
            id=f"fake-{len(self.requests)}",
            text=text,
            usage=Usage(input_tokens=self.input_tokens, output_tokens=self.output_tokens),
            model=request.model,
        )


INTENT = {
    "category": "saas",
    "suggested_template": "saas",
    "confidence": 0.9,
    "reasoning": "Subscription product for teams",
    "complexity": "moderate",
    "features": ["auth", "billing", "dashboard"],
    "key_entities": ["team", "invoice"],
    "integrations": {"auth": "clerk", "payments": "stripe", "cms": "contentful"},
}

CONTEXT_TEXT = """===CURSORRULES===
Use the App Router. Keep components in components/.
===START_PROMPT===
# Start here
The dashboard and billing pages were generated.
"""


def make_architecture(pages: int = 1, components_per_page: int = 0, api_routes: int = 0, **kwargs) -> ProjectArchitecture:
    """Pages P1..Pn, each referencing its own create-new components C1..Cm."""
    page_defs = []
    component_defs = []
    counter = 0
    for p in range(1, pages + 1):
        names = []
        for _ in range(components_per_page):
            counter += 1
            names.append(f"C{counter}")
            component_defs.append(ComponentDefinition(name=f"C{counter}", type="section"))
        page_defs.append(PageDefinition(path=f"/p{p}", name=f"P{p}", components=names))
    route_defs = [RouteDefinition(path=f"/api/r{r}", type="api", method="GET") for r in range(1, api_routes + 1)]
    return ProjectArchitecture(
        template=kwargs.pop("template", "saas"),
        pages=page_defs,
        components=component_defs,
        routes=route_defs,
        **kwargs,
    )


def code_response(*paths: str) -> dict:
    return {
        "files": [{"path": path, "content": f"// {path}\n", "overwrite": True} for path in paths],
        "integration_code": [],
    }


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(settings, "retry_base_delay", 0.0)
    monkeypatch.setattr(settings, "retry_max_delay", 0.0)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def ctx(gateway) -> StageContext:
    return StageContext(gateway=gateway)
