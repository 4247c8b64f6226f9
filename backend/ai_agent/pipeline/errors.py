"""
Error taxonomy for the generation pipeline.

Whether an error is worth retrying is a property of its class: only
``TransientServiceError`` (and its subclasses) is retryable. Nothing in the
pipeline decides retryability by looking at error names or messages.
"""

import asyncio
from typing import Any

import openai


class AgentError(Exception):
    code = "agent_error"
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        stage: str | None = None,
        batch: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.stage = stage
        self.batch = batch
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "stage": self.stage,
        }
        if self.batch is not None:
            data["batch"] = self.batch
        if self.context:
            data["context"] = self.context
        return data

    def __str__(self) -> str:
        where = ""
        if self.stage:
            where = f"[{self.stage}" + (f" batch {self.batch}" if self.batch is not None else "") + "] "
        return f"{where}{self.message}"


class TransientServiceError(AgentError):
    """Rate limiting, timeouts, connection failures and 5xx responses."""

    code = "transient_service_error"
    retryable = True

    def __init__(self, message: str, *, status: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status


class RetryExhaustedError(TransientServiceError):
    code = "retry_exhausted"

    def __init__(self, message: str, *, attempts: int, last_error: TransientServiceError | None = None, **kwargs):
        status = last_error.status if last_error is not None else None
        super().__init__(message, status=status, **kwargs)
        self.attempts = attempts
        self.last_error = last_error
        self.context.setdefault("attempts", attempts)


class ServiceError(AgentError):
    """The model service rejected the request in a way retrying won't fix."""

    code = "service_error"

    def __init__(self, message: str, *, status: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status


class MalformedOutputError(AgentError):
    code = "malformed_output"

    def __init__(self, message: str, *, excerpt: str = "", repairs: list[str] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.excerpt = excerpt[:500]
        self.repairs = repairs or []
        self.context.setdefault("excerpt", self.excerpt)
        if self.repairs:
            self.context.setdefault("repairs", self.repairs)


class SchemaValidationError(AgentError):
    code = "validation_error"

    def __init__(self, message: str, *, issues: list[dict[str, Any]] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.issues = issues or []
        self.context.setdefault("issues", self.issues)


class InputError(AgentError):
    code = "input_error"


class CodeGenerationError(AgentError):
    """A batch of chunked code generation failed; carries what was built before it."""

    code = "code_generation_failed"

    def __init__(self, message: str, *, partial, cause: AgentError, total_batches: int, **kwargs):
        super().__init__(message, **kwargs)
        self.partial = partial
        self.cause = cause
        self.total_batches = total_batches
        self.context.setdefault("status", partial.status)
        self.context.setdefault("cause", cause.code)
        self.context.setdefault("files_generated", len(partial.code.files))
        for key, value in cause.context.items():
            self.context.setdefault(key, value)

    @property
    def retryable(self) -> bool:
        return self.cause.retryable


def handle_llm_error(error: Exception) -> AgentError:
    """Map an exception from the model service onto the pipeline's error classes."""
    if isinstance(error, AgentError):
        return error

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, openai.APITimeoutError)):
        return TransientServiceError("Model request timed out", context={"error": str(error)})

    if isinstance(error, openai.APIConnectionError):
        return TransientServiceError("Could not reach the model service", context={"error": str(error)})

    if isinstance(error, openai.APIStatusError):
        status = error.status_code
        if status == 429:
            return TransientServiceError(
                "Rate limit exceeded. Please try again in a few moments.",
                status=status, code="rate_limited", context={"error": str(error)},
            )
        if status >= 500:
            return TransientServiceError(
                "Model service is temporarily unavailable.",
                status=status, context={"error": str(error)},
            )
        if status == 401:
            message = "Invalid API key. Please check your OPENAI_API_KEY."
        elif status == 400:
            message = "Invalid request to the model service."
        else:
            message = f"API Error: {error.message}"
        return ServiceError(message, status=status, code=f"api_{status}", context={"error": str(error)})

    return ServiceError(f"Unexpected model service error: {error}", context={"error": str(error)})
