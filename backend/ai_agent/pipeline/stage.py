from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from ai_agent.logging_config import logger
from ai_agent.pipeline.errors import AgentError, MalformedOutputError
from ai_agent.pipeline.gateway import LLMRequest, ModelGateway, StreamCallback
from ai_agent.pipeline.json_repair import repair_and_parse_json
from ai_agent.pipeline.prompt_loader import PromptLoader
from ai_agent.pipeline.retry import with_retry
from ai_agent.pipeline.token_tracker import TokenTracker
from ai_agent.pipeline.validator import validate


@dataclass
class StageContext:
    """What every stage needs for one run: the gateway, the run's tracker and the prompts."""

    gateway: ModelGateway
    tracker: TokenTracker = field(default_factory=TokenTracker)
    prompts: PromptLoader = field(default_factory=PromptLoader)


def parse_json_output(stage: str, text: str) -> Any:
    result = repair_and_parse_json(text)
    if not result.success:
        raise MalformedOutputError(
            f"Failed to parse AI response: {result.error}",
            excerpt=text,
            repairs=result.repairs,
            stage=stage,
        )
    if result.repaired:
        logger.info("[%s] JSON repaired: %s", stage, ", ".join(result.repairs))
    return result.data


async def run_stage_call(
    ctx: StageContext,
    *,
    stage: str,
    model: str,
    build_prompt: Callable[[], str],
    user_message: str,
    max_tokens: int,
    on_stream: StreamCallback | None = None,
    parse: Callable[[str, str], Any] = parse_json_output,
    label: str | None = None,
    batch: int | None = None,
) -> BaseModel:
    """One model call for a stage: build prompt, call, parse/repair, validate.

    The whole sequence is retried on transient service errors; errors leave
    tagged with the stage (and batch) they came from.
    """
    label = label or f"{stage} stage"

    async def operation() -> BaseModel:
        request = LLMRequest(
            model=model,
            system=build_prompt(),
            messages=[{"role": "user", "content": user_message}],
            temperature=0.0,
            max_output_tokens=max_tokens,
            stream=on_stream is not None,
        )
        response = await ctx.gateway.complete(request, on_stream=on_stream)
        ctx.tracker.record(
            stage,
            model,
            response.usage.input_tokens,
            response.usage.output_tokens,
            response.duration_ms,
        )
        return validate(stage, parse(stage, response.text))

    try:
        return await with_retry(operation, label=label)
    except AgentError as e:
        e.stage = e.stage or stage
        if batch is not None and e.batch is None:
            e.batch = batch
        raise
