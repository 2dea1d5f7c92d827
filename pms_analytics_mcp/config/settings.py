"""
Settings and configuration management for the PMS Analytics MCP server.

Provides environment-based configuration management using Pydantic settings
for storage locations, HTTP client behaviour, sync policy and logging.
"""

from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Configuration settings for the PMS Analytics MCP server.

    Uses environment variables with PMS_ prefix for configuration.
    """

    # Identity / Storage Configuration
    user_id: str = Field(
        "local", description="User the connection list and synced records belong to"
    )
    storage_dir: str | None = Field(
        None,
        description="Directory for connection lists and synced records "
        "(defaults to ~/.pms_analytics_mcp)",
    )
    persist_synced_records: bool = Field(
        True, description="Persist normalized records after every successful sync"
    )

    # Client Configuration
    request_timeout: float = Field(
        10.0,
        description="Timeout in seconds for health checks and resource fetches",
        ge=1.0,
        le=300.0,
    )
    user_agent: str = Field(
        "PMS-Analytics-MCP/0.1 (httpx)", description="User-Agent sent to PMS vendors"
    )

    # Sync Configuration
    sync_window_days: int = Field(
        30, description="Days before/after today requested for dated resources", ge=1
    )
    guest_fetch_limit: int = Field(
        1000, description="Maximum guests requested per sync", ge=1, le=10000
    )
    parallel_connection_sync: bool = Field(
        False, description="Sync several connections concurrently instead of in turn"
    )
    demo_data_fallback: bool = Field(
        True,
        description="Serve the demonstration dataset when no connection has data",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format string",
    )
    enable_structured_logging: bool = Field(
        True, description="Enable structured logging with JSON format"
    )

    model_config = ConfigDict(
        env_file=".env", env_prefix="PMS_", case_sensitive=False, extra="ignore"
    )

    def get_client_config(self) -> dict[str, Any]:
        """
        Get HTTP client configuration dictionary.

        Returns:
            Dictionary containing client configuration
        """
        return {
            "timeout": self.request_timeout,
            "user_agent": self.user_agent,
        }

    def get_sync_config(self) -> dict[str, Any]:
        """
        Get sync policy configuration dictionary.

        Returns:
            Dictionary containing sync configuration
        """
        return {
            "window_days": self.sync_window_days,
            "guest_limit": self.guest_fetch_limit,
            "parallel": self.parallel_connection_sync,
            "demo_fallback": self.demo_data_fallback,
            "persist_records": self.persist_synced_records,
        }

    def get_storage_path(self) -> Path:
        """Directory holding connection lists and record files."""
        if self.storage_dir:
            return Path(self.storage_dir).expanduser()
        return Path.home() / ".pms_analytics_mcp"

    def validate_required_settings(self) -> list[str]:
        """
        Validate that all required settings are present.

        Returns:
            List of missing settings (empty if all present)
        """
        missing = []

        if not self.user_id or not self.user_id.strip():
            missing.append("PMS_USER_ID")

        if self.log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            missing.append("PMS_LOG_LEVEL")

        return missing


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
