from collections.abc import Callable

from openai import AsyncOpenAI

from ai_agent.config import settings
from ai_agent.pipeline.errors import InputError
from ai_agent.pipeline.gateway import ModelGateway, OpenAIGateway

GatewayFactory = Callable[[str | None], ModelGateway]


def get_openai_client(api_key: str | None = None) -> AsyncOpenAI:
    api_key = api_key or settings.openai_api_key
    if not api_key:
        raise InputError("An API key is required. Set OPENAI_API_KEY or pass api_key.")
    # Retries happen in the pipeline, where errors are classified.
    kwargs: dict = {"api_key": api_key, "max_retries": 0}
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    return AsyncOpenAI(**kwargs)


def get_gateway(api_key: str | None = None) -> ModelGateway:
    return OpenAIGateway(get_openai_client(api_key), timeout=settings.request_timeout)


def get_gateway_factory() -> GatewayFactory:
    return get_gateway
