from pydantic import Field
from pydantic_settings import BaseSettings


# Models that require max_completion_tokens instead of max_tokens
_MAX_COMPLETION_TOKENS_MODELS = {"gpt-5.2", "gpt-5", "o1", "o3", "o3-mini", "o1-mini"}

STAGES = ("intent", "architecture", "code", "context")
MODEL_TIERS = ("fast", "balanced", "quality")


class Settings(BaseSettings):
    openai_api_key: str = ""
    openai_base_url: str | None = None
    fast_model: str = "gpt-4o-mini"
    quality_model: str = "gpt-4o"
    default_model_tier: str = "balanced"
    request_timeout: float = 120.0

    batch_size: int = Field(default=5, gt=0)
    batch_token_limit: int = 4096
    intent_max_tokens: int = 2048
    architecture_max_tokens: int = 4096
    context_max_tokens: int = 4096

    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    max_description_length: int = 10000
    prompts_dir: str | None = None
    templates_dir: str = "templates"
    design_reference_path: str | None = None

    log_level: str = "INFO"
    log_json: bool = False
    app_env: str = "development"
    cors_origins: str = "http://localhost:3000"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def max_tokens_param(self, model: str, n: int) -> dict:
        """Return the right max-tokens kwarg for the given model."""
        if model in _MAX_COMPLETION_TOKENS_MODELS:
            return {"max_completion_tokens": n}
        return {"max_tokens": n}

    def model_map(self, tier: str | None = None) -> dict[str, str]:
        """Per-stage model ids for a tier.

        fast: the fast model everywhere.
        balanced: the fast model except for code generation.
        quality: the quality model everywhere.
        """
        from ai_agent.pipeline.errors import InputError

        tier = tier or self.default_model_tier
        if tier == "fast":
            return {stage: self.fast_model for stage in STAGES}
        if tier == "balanced":
            models = {stage: self.fast_model for stage in STAGES}
            models["code"] = self.quality_model
            return models
        if tier == "quality":
            return {stage: self.quality_model for stage in STAGES}
        raise InputError(
            f"Unknown model tier '{tier}'. Expected one of: {', '.join(MODEL_TIERS)}",
            context={"model_tier": tier},
        )


settings = Settings()
