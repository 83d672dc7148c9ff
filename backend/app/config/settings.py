"""
Application settings with validation and type safety
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field, validator
from typing import Optional


class Settings(BaseSettings):
    """
    Validated configuration settings for the analysis backend
    All settings can be overridden via environment variables
    """

    # PRIMARY PROVIDER (ANTHROPIC)
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for the primary inference provider"
    )

    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022",
        description="Claude model identifier used for primary analysis"
    )

    anthropic_max_tokens: int = Field(
        default=4000,
        ge=256,
        le=16000,
        description="Output token budget for primary analysis"
    )

    # SECONDARY PROVIDER (OPENAI)
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key for the secondary (failover) provider"
    )

    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier used for secondary analysis"
    )

    openai_max_tokens: int = Field(
        default=4000,
        ge=256,
        le=16000,
        description="Output token budget for secondary analysis"
    )

    # RETRY CONFIGURATION
    primary_max_attempts: int = Field(default=3, ge=1, le=10)
    primary_base_delay: float = Field(default=1.0, ge=0.0, le=30.0)
    primary_max_delay: float = Field(default=32.0, ge=0.0, le=120.0)

    secondary_max_attempts: int = Field(default=3, ge=1, le=10)
    secondary_base_delay: float = Field(default=1.0, ge=0.0, le=30.0)
    secondary_max_delay: float = Field(default=10.0, ge=0.0, le=120.0)

    # CIRCUIT BREAKER CONFIGURATION
    circuit_breaker_threshold: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Consecutive service-unavailable failures before circuit opens"
    )

    circuit_breaker_timeout: float = Field(
        default=60.0,
        ge=1.0,
        le=600.0,
        description="Seconds after opening before the circuit closes again"
    )

    # FALLBACK CONFIGURATION
    fallback_enabled: bool = Field(
        default=True,
        description="Fall back to the secondary provider / synthetic analysis on primary failure"
    )

    synthetic_fallback_enabled: bool = Field(
        default=True,
        description="Produce a degraded synthetic analysis when every provider failed"
    )

    # TIMEOUTS
    provider_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Timeout in seconds for a single provider call"
    )

    request_deadline: float = Field(
        default=300.0,
        gt=0,
        description="Overall deadline in seconds for one analysis request"
    )

    # DOCUMENT LIMITS
    max_document_chars: int = Field(default=200000, ge=1000)
    prompt_max_chars: int = Field(default=30000, ge=1000)

    storage_dir: str = Field(
        default="storage/uploads",
        description="Root directory the document extractor resolves storage keys against"
    )

    environment: str = Field(
        default="production",
        description="Deployment environment (development/staging/production/test)"
    )

    # LOGGING CONFIGURATION
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG/INFO/WARNING/ERROR)"
    )

    log_format: str = Field(
        default="json",
        description="Log format (json/text)"
    )

    # VALIDATION
    @validator("anthropic_api_key")
    def validate_anthropic_key(cls, v):
        """Ensure Anthropic API key has correct format when provided"""
        if v and not v.startswith("sk-ant-"):
            raise ValueError(
                "Invalid Anthropic API key format. "
                "Must start with 'sk-ant-'. "
                "Please check your API key at console.anthropic.com"
            )
        return v or None

    @validator("environment")
    def validate_environment(cls, v):
        """Ensure valid environment name"""
        valid_environments = {"development", "staging", "production", "test"}
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v

    @validator("log_level")
    def validate_log_level(cls, v):
        """Ensure valid log level"""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("log_format")
    def validate_log_format(cls, v):
        if v.lower() not in {"json", "text"}:
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()

    @property
    def primary_configured(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def secondary_configured(self) -> bool:
        return bool(self.openai_api_key)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

        # Allow extra fields for forward compatibility
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Return the process settings, loaded once from the environment"""
    return Settings()
