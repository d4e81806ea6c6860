"""
Application settings and configuration management.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from vidprobe import __version__

_DEFAULT_SCRAPE_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="vidprobe")
    app_version: str = Field(default=__version__)
    log_level: str = Field(default="INFO")

    # Credentials (empty string means "not configured")
    youtube_api_key: str = Field(default="")
    rapidapi_key: str = Field(default="")
    rapidapi_key_tiktok: str = Field(default="")

    # HTTP
    request_timeout: float = Field(default=10.0)
    scrape_user_agent: str = Field(default=_DEFAULT_SCRAPE_USER_AGENT)
    instagram_oembed_url: str = Field(default="https://api.instagram.com/oembed/")

    @field_validator("youtube_api_key", "rapidapi_key", "rapidapi_key_tiktok")
    @classmethod
    def strip_credential(cls, v: str) -> str:
        """Treat whitespace-only credentials as unset."""
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        """Keep per-call timeouts within a sane bound."""
        if not 1.0 <= v <= 60.0:
            raise ValueError(f"request_timeout must be between 1 and 60 seconds, got {v}")
        return v

    @staticmethod
    def has_credential(value: str) -> bool:
        """Check whether a credential value is configured."""
        return bool(value)

    @property
    def configured_credentials(self) -> dict[str, bool]:
        """Map each credential setting to whether it is configured."""
        return {
            "youtube_api_key": self.has_credential(self.youtube_api_key),
            "rapidapi_key": self.has_credential(self.rapidapi_key),
            "rapidapi_key_tiktok": self.has_credential(self.rapidapi_key_tiktok),
        }

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "frozen": True,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
