import json
from typing import Any

from ai_agent.schemas.pipeline import ProgressEvent


def sse_event(event: str, data: Any) -> str:
    payload = json.dumps(data) if not isinstance(data, str) else data
    return f"event: {event}\ndata: {payload}\n\n"


def sse_progress(progress: ProgressEvent) -> str:
    return sse_event("progress", progress.model_dump(exclude_none=True))


def sse_result(result: dict) -> str:
    return sse_event("result", result)


def sse_error(error: dict | str) -> str:
    if isinstance(error, str):
        error = {"message": error}
    return sse_event("error", error)


def sse_done() -> str:
    return sse_event("done", {})
