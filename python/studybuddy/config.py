"""Application settings loaded from environment variables.

Environment Configuration:
    STUDYBUDDY_ENV: Deployment environment (local | test | staging | prod)
    SEED_FIXTURES: Seed the in-memory store with sample rows at startup
    LOG_JSON: Emit JSON logs (false switches to the console renderer)
    LOG_LEVEL: Root log level name (DEBUG, INFO, WARNING, ERROR)

Completion backends (both optional, at least one unlocks AI features):
    OPENAI_API_KEY: Enables the OpenAI backend (tried first)
    GEMINI_API_KEY: Enables the Gemini backend (fallback)
    OPENAI_MODEL / GEMINI_MODEL: Model identifiers per backend
    LLM_TIMEOUT_S: Per-call timeout for backend requests
    LLM_MAX_TOKENS: Completion token cap per request

Note: With neither key set the app still starts; AI routes report
"unavailable" instead of failing at import or startup.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - Blank API keys are treated as unset
    - LLM_TIMEOUT_S and LLM_MAX_TOKENS must be >= 1
    """

    studybuddy_env: Environment = Field(default=Environment.LOCAL, alias="STUDYBUDDY_ENV")
    seed_fixtures: bool = Field(default=True, alias="SEED_FIXTURES")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Completion backend credentials (optional, independent)
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")

    openai_model: str = Field(default="gpt-4o", alias="OPENAI_MODEL")
    gemini_model: str = Field(default="gemini-1.5-pro", alias="GEMINI_MODEL")
    llm_timeout_s: int = Field(default=45, alias="LLM_TIMEOUT_S")
    llm_max_tokens: int = Field(default=2048, alias="LLM_MAX_TOKENS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("openai_api_key", "gemini_api_key", mode="before")
    @classmethod
    def blank_key_is_unset(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def validate_llm_limits(self) -> "Settings":
        """Reject non-positive LLM limits."""
        if self.llm_timeout_s < 1:
            raise ValueError("LLM_TIMEOUT_S must be >= 1")
        if self.llm_max_tokens < 1:
            raise ValueError("LLM_MAX_TOKENS must be >= 1")
        return self

    @property
    def enable_openai(self) -> bool:
        """Whether the OpenAI backend has a credential."""
        return self.openai_api_key is not None

    @property
    def enable_gemini(self) -> bool:
        """Whether the Gemini backend has a credential."""
        return self.gemini_api_key is not None


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
