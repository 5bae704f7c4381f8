"""Application configuration settings using Pydantic."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, ValidationError

from app.utils.errors import ConfigurationError


class Settings(BaseSettings):
    """Application configuration settings."""

    # OpenAI Configuration
    openai_api_key: Optional[str] = Field(None, validation_alias="OPENAI_API_KEY")
    openai_model: str = Field("gpt-4o-mini", validation_alias="OPENAI_MODEL")
    openai_base_url: Optional[str] = Field(None, validation_alias="OPENAI_BASE_URL")
    openai_max_tokens: int = Field(2000, validation_alias="OPENAI_MAX_TOKENS")
    openai_timeout_seconds: float = Field(
        45.0, gt=0, validation_alias="OPENAI_TIMEOUT_SECONDS"
    )
    openai_max_retries: int = Field(1, ge=0, validation_alias="OPENAI_MAX_RETRIES")
    generation_malformed_retries: int = Field(
        1, ge=0, validation_alias="GENERATION_MALFORMED_RETRIES"
    )

    # API Configuration
    api_host: str = Field("0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(8000, validation_alias="API_PORT")
    debug: bool = Field(False, validation_alias="DEBUG")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # CORS Configuration
    allowed_origins: list[str] = Field(
        ["*"],
        validation_alias="ALLOWED_ORIGINS",
    )

    # Trusted Hosts Configuration
    trusted_hosts: list[str] = Field(["*"], validation_alias="TRUSTED_HOSTS")

    # Rate Limiting (problem generation only)
    rate_limit_per_minute: int = Field(10, validation_alias="RATE_LIMIT_PER_MINUTE")
    rate_limit_trust_proxy: bool = Field(False, validation_alias="RATE_LIMIT_TRUST_PROXY")

    # JWT Configuration (tokens are issued by the identity provider)
    jwt_secret_key: str = Field(..., validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", validation_alias="JWT_ALGORITHM")
    jwt_audience: Optional[str] = Field(None, validation_alias="JWT_AUDIENCE")
    jwt_issuer: Optional[str] = Field(None, validation_alias="JWT_ISSUER")

    # MongoDB Configuration
    mongodb_uri: str = Field("mongodb://localhost:27017", validation_alias="MONGODB_URI")
    mongodb_db_name: str = Field("interview-platform", validation_alias="MONGODB_DB_NAME")
    mongodb_timeout_ms: int = Field(5000, validation_alias="MONGODB_TIMEOUT_MS")

    class Config:
        """Pydantic configuration to load from .env file."""

        env_file = ".env"
        case_sensitive = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        s = Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        # Raise a helpful message in logs for missing required envs
        raise ConfigurationError(f"Configuration error: {e}") from e
    return s
