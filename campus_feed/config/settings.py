"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="campus-feed", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=5000, description="API port")

    # LLM backend (OpenAI-compatible HTTP API)
    llm_api_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    llm_api_key: str | None = Field(default=None, description="API key for the LLM")
    llm_timeout_seconds: float = Field(
        default=30.0, description="Timeout for a single LLM request"
    )
    moderation_model: str = Field(
        default="gpt-4.1-nano", description="Chat model used for toxicity checks"
    )
    moderation_temperature: float = Field(
        default=0.1, description="Sampling temperature for toxicity checks"
    )
    classification_model: str = Field(
        default="gpt-4.1-nano", description="Chat model used for classification"
    )
    classification_temperature: float = Field(
        default=0.3, description="Sampling temperature for classification"
    )
    image_model: str = Field(
        default="gpt-image-1", description="Image model used for memes"
    )
    image_size: str = Field(default="1024x1024", description="Generated image size")

    # Submissions
    meme_command_prefix: str = Field(
        default="/meme ", description="Raw-text prefix that triggers meme generation"
    )
    max_submission_length: int = Field(
        default=5000, description="Maximum length of submitted post/comment text"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=False, description="Include caller info"
    )
    log_to_file: bool = Field(default=False, description="Also write JSON log files")
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths to exclude from request logging",
    )

    # CORS
    cors_origins: list[str] = Field(default=["*"], description="CORS origins")
    cors_allow_credentials: bool = Field(default=True, description="Allow credentials")
    cors_allow_methods: list[str] = Field(default=["*"], description="Allowed methods")
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed headers")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def llm_configured(self) -> bool:
        """Check if an API key for the LLM backend is present."""
        return bool(self.llm_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
