"""Configuration loading for the ERPNext bridge.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
- Produce the core ConnectionConfig handed to the ERPNext adapter
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from erpnext_mcp.core.models import ConnectionConfig


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ERPNext connection
    erpnext_url: str = Field(
        default="",
        description="ERPNext base URL (required)",
    )
    erpnext_api_key: str = Field(
        default="",
        description="ERPNext API key for token authentication",
    )
    erpnext_api_secret: str = Field(
        default="",
        description="ERPNext API secret for token authentication",
    )
    erpnext_debug: bool = Field(
        default=False,
        description="Log every ERPNext request and response",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for each ERPNext request in seconds",
    )

    # MCP server
    server_name: str = Field(
        default="erpnext-server-extended",
        description="Server name reported to MCP clients",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("erpnext_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL."""
        return v.strip().rstrip("/")

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure request timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    def connection_config(self) -> ConnectionConfig:
        """Build the ConnectionConfig for the ERPNext adapter."""
        return ConnectionConfig(
            base_url=self.erpnext_url,
            api_key=self.erpnext_api_key or None,
            api_secret=self.erpnext_api_secret or None,
            timeout_seconds=self.request_timeout_seconds,
            debug=self.erpnext_debug,
        )


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
