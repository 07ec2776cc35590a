"""Configuration management for the Productboard MCP server."""

from datetime import datetime
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.productboard.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Productboard API
    productboard_api_token: str | None = Field(
        default=None,
        description="Productboard API token. Generate at: "
        "Workspace settings -> Integrations -> Public API -> Access token",
        validation_alias=AliasChoices("productboard_api_token", "productboard_token"),
    )
    productboard_api_url: str = Field(
        default=DEFAULT_API_URL, description="Base URL of the Productboard REST API"
    )
    api_timeout: float = Field(default=30.0, description="Per-request timeout in seconds")

    # Permission discovery
    probe_delay_seconds: float = Field(
        default=0.1,
        description="Pause between permission probes to stay under the API rate limit",
    )
    permission_cache_ttl_seconds: int = Field(
        default=3600,
        description="How long a discovered permission model is reused before re-probing. "
        "Set to 0 to probe on every lookup.",
    )
    permission_discovery_timeout: float = Field(
        default=120.0,
        description="Upper bound in seconds for a full discovery run",
    )

    # MCP Server Configuration
    mcp_server_name: str = Field(default="productboard-mcp", description="MCP server name")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / ".productboard-mcp" / "logs",
        description="Directory for log files",
    )

    @field_validator("productboard_api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate that the API URL is HTTPS and strip any trailing slash."""
        if not v.startswith("https://"):
            raise ValueError("Productboard API URL must start with https://")
        return v.rstrip("/")

    @field_validator("probe_delay_seconds", "api_timeout", "permission_discovery_timeout")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Reject negative durations."""
        if v < 0:
            raise ValueError("Durations must not be negative")
        return v

    def get_log_file(self, component_name: str = "mcp_server") -> Path:
        """Get a log file path for a specific component.

        Creates log files with the format: {component_name}_{date}.log
        e.g., mcp_server_2024-01-15.log

        Args:
            component_name: Name of the component

        Returns:
            Path to the log file
        """
        date_str = datetime.now().strftime("%Y-%m-%d")
        # Sanitize component name for filesystem
        safe_name = "".join(c if c.isalnum() or c in "_-" else "_" for c in component_name)
        return self.log_dir / f"{safe_name}_{date_str}.log"


# Global settings instance
settings = Settings()
