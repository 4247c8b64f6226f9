import asyncio
import time
from collections.abc import Callable
from typing import Protocol

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

from ai_agent.config import settings
from ai_agent.logging_config import logger
from ai_agent.pipeline.errors import handle_llm_error

# (chunk, accumulated text so far)
StreamCallback = Callable[[str, str], None]


class LLMRequest(BaseModel):
    model: str
    messages: list[dict[str, str]]
    system: str = ""
    temperature: float = 0.0
    max_output_tokens: int = 4096
    stream: bool = False


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class LLMResponse(BaseModel):
    id: str = ""
    text: str
    usage: Usage = Usage()
    model: str = ""
    duration_ms: int = 0


class ModelGateway(Protocol):
    async def complete(self, request: LLMRequest, on_stream: StreamCallback | None = None) -> LLMResponse:
        ...


class OpenAIGateway:
    """Chat-completions transport. Stateless; retrying is the caller's job."""

    def __init__(self, client: AsyncOpenAI, timeout: float | None = None):
        self.client = client
        self.timeout = settings.request_timeout if timeout is None else timeout

    def _build_kwargs(self, request: LLMRequest) -> dict:
        messages = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.extend(request.messages)
        return {
            "model": request.model,
            "messages": messages,
            "temperature": request.temperature,
            **settings.max_tokens_param(request.model, request.max_output_tokens),
        }

    async def complete(self, request: LLMRequest, on_stream: StreamCallback | None = None) -> LLMResponse:
        kwargs = self._build_kwargs(request)
        start = time.monotonic()
        logger.debug(
            "LLM request: model=%s, max_tokens=%d, system_len=%d, stream=%s",
            request.model, request.max_output_tokens, len(request.system), request.stream,
        )
        try:
            if request.stream and on_stream:
                response = await asyncio.wait_for(self._complete_streaming(kwargs, on_stream), self.timeout)
            else:
                response = await asyncio.wait_for(self._complete_once(kwargs), self.timeout)
        except (openai.OpenAIError, asyncio.TimeoutError) as e:
            raise handle_llm_error(e) from e

        response.model = response.model or request.model
        response.duration_ms = int((time.monotonic() - start) * 1000)
        return response

    async def _complete_once(self, kwargs: dict) -> LLMResponse:
        response = await self.client.chat.completions.create(**kwargs)
        text = (response.choices[0].message.content or "") if response.choices else ""
        usage = Usage()
        if response.usage:
            usage = Usage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
            )
        return LLMResponse(id=response.id, text=text, usage=usage, model=response.model)

    async def _complete_streaming(self, kwargs: dict, on_stream: StreamCallback) -> LLMResponse:
        stream = await self.client.chat.completions.create(
            **kwargs,
            stream=True,
            stream_options={"include_usage": True},
        )

        text = ""
        response_id = ""
        model = ""
        usage = Usage()
        async for chunk in stream:
            response_id = response_id or chunk.id
            model = model or chunk.model
            if chunk.usage:
                usage = Usage(
                    input_tokens=chunk.usage.prompt_tokens,
                    output_tokens=chunk.usage.completion_tokens,
                )
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                text += delta
                on_stream(delta, text)

        return LLMResponse(id=response_id, text=text, usage=usage, model=model)
