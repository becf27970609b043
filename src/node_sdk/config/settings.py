"""Configuration and settings management using pydantic-settings."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Node pack settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="NODEPACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    # HTTP settings
    http_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds applied to every outgoing request",
    )
    user_agent: str = Field(
        default="saas-nodepack",
        description="User-Agent sent to vendors that require one",
    )

    # Identity reported to vendors when registering devices and webhooks
    device_identifier: str = Field(
        default="saas-nodepack",
        description="Device name/identifier reported during Bitwarden token exchange",
    )
    webhook_tag_prefix: str = Field(
        default="nodepack",
        description="Prefix for webhook tags generated on registration",
    )

    # Vendor endpoints
    bitwarden_cloud_api_url: str = Field(default="https://api.bitwarden.com")
    bitwarden_cloud_identity_url: str = Field(
        default="https://identity.bitwarden.com/connect/token"
    )
    phantombuster_api_url: str = Field(default="https://api.phantombuster.com/api/v2")
    typeform_api_url: str = Field(default="https://api.typeform.com")
    formstack_api_url: str = Field(default="https://www.formstack.com/api/v2")

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        """Validate that the request timeout is positive."""
        if v <= 0:
            raise ValueError("http_timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
