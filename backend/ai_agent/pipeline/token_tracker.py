from datetime import datetime, timezone

from ai_agent.logging_config import logger
from ai_agent.schemas.pipeline import StageTotals, TokenSummary, TokenUsage

# USD per 1M tokens: (input, output)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4o": (2.50, 10.00),
    "gpt-4.1-mini": (0.40, 1.60),
    "gpt-4.1": (2.00, 8.00),
    "claude-3-haiku-20240307": (0.25, 1.25),
    "claude-sonnet-4-20250514": (3.00, 15.00),
}
DEFAULT_PRICING = (2.50, 10.00)


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    pricing = MODEL_PRICING.get(model)
    if pricing is None:
        logger.debug("No pricing for model %s, using default", model)
        pricing = DEFAULT_PRICING
    input_price, output_price = pricing
    return (input_tokens * input_price + output_tokens * output_price) / 1_000_000


class TokenTracker:
    """Token usage and cost for one generation run.

    Create one per run and pass it to every stage; only the orchestrator
    reads it, once, after the last stage.
    """

    def __init__(self):
        self.records: list[TokenUsage] = []

    def record(
        self,
        stage: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
        duration_ms: int = 0,
    ) -> TokenUsage:
        usage = TokenUsage(
            stage=stage,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=estimate_cost(model, input_tokens, output_tokens),
            duration_ms=duration_ms,
            timestamp=datetime.now(timezone.utc),
        )
        self.records.append(usage)
        return usage

    def reset(self) -> None:
        self.records.clear()

    def summary(self) -> TokenSummary:
        summary = TokenSummary()
        for usage in self.records:
            totals = summary.stages.setdefault(usage.stage, StageTotals())
            totals.calls += 1
            totals.input_tokens += usage.input_tokens
            totals.output_tokens += usage.output_tokens
            totals.cost += usage.cost

            summary.calls += 1
            summary.total_input_tokens += usage.input_tokens
            summary.total_output_tokens += usage.output_tokens
            summary.total_cost += usage.cost
        return summary

    def export_metrics(self) -> str:
        summary = self.summary()
        lines = [
            "Token usage",
            f"{'stage':<14}{'calls':>6}{'input':>10}{'output':>10}{'cost':>11}",
        ]
        for stage, totals in summary.stages.items():
            lines.append(
                f"{stage:<14}{totals.calls:>6}{totals.input_tokens:>10}"
                f"{totals.output_tokens:>10}{'$' + format(totals.cost, '.4f'):>11}"
            )
        lines.append(
            f"{'total':<14}{summary.calls:>6}{summary.total_input_tokens:>10}"
            f"{summary.total_output_tokens:>10}{'$' + format(summary.total_cost, '.4f'):>11}"
        )
        return "\n".join(lines)
