"""
Main entry point for the PMS Analytics MCP server.

This module sets up the FastMCP server with all necessary tools and configuration
for aggregating data from hotel property management systems.
"""

import asyncio
import json
import logging
import sys
from typing import Any

from fastmcp import FastMCP

from pms_analytics_mcp.adapters.registry import get_adapter_registry
from pms_analytics_mcp.config.settings import Settings, get_settings
from pms_analytics_mcp.resources.health_check import (
    collect_health_checks,
    register_health_resources,
)
from pms_analytics_mcp.tools.analytics_tools import register_analytics_tools
from pms_analytics_mcp.tools.connection_tools import register_connection_tools
from pms_analytics_mcp.tools.sync_tools import register_sync_tools
from pms_analytics_mcp.utils.exceptions import ConfigurationError, StorageError
from pms_analytics_mcp.utils.service_factory import get_connection_registry

VERSION = "0.1.0"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_LOG_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add extra fields if present
        for key, value in record.__dict__.items():
            if key not in _RESERVED_LOG_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(settings: Settings) -> None:
    """Setup logging configuration."""
    if settings.enable_structured_logging:
        # Structured JSON logging, on stderr so stdio transport stays clean
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        logging.root.handlers = [handler]
    else:
        # Standard logging
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper()),
            format=settings.log_format,
            stream=sys.stderr,
        )

    logging.getLogger().setLevel(getattr(logging, settings.log_level.upper()))


logger = logging.getLogger(__name__)

# Initialize FastMCP app
app = FastMCP(
    name="pms-analytics-mcp",
    version=VERSION,
)


@app.tool()
async def health_check() -> dict[str, Any]:
    """
    Perform a health check of the MCP server and its dependencies.

    Returns:
        Dictionary containing health status information including configuration,
        storage and connection states
    """
    return collect_health_checks(VERSION)


@app.tool()
async def get_server_info() -> dict[str, Any]:
    """
    Get server information and configuration details.

    Returns:
        Dictionary containing server information
    """
    current_settings = get_settings()
    return {
        "name": app.name,
        "version": VERSION,
        "description": "MCP server aggregating hotel PMS data into one analytics view",
        "user_id": current_settings.user_id,
        "storage_path": str(current_settings.get_storage_path()),
        "supported_vendors": get_adapter_registry().list_vendors(),
        "client": current_settings.get_client_config(),
        "sync": current_settings.get_sync_config(),
    }


async def initialize_server() -> None:
    """Initialize server components."""
    current_settings = get_settings()
    logger.info("Initializing PMS Analytics MCP server...")
    logger.info(f"Version: {VERSION}")

    # Validate configuration
    missing_settings = current_settings.validate_required_settings()
    if missing_settings:
        error_msg = f"Invalid or missing settings: {', '.join(missing_settings)}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    logger.info("Configuration validated successfully")

    # Load the stored connection list
    try:
        registry = get_connection_registry(current_settings)
    except StorageError as e:
        raise ConfigurationError(f"Cannot load connection list: {e}") from e

    logger.info(
        "Connection registry loaded",
        extra={
            "connections": len(registry),
            "connected": len(registry.connected()),
        },
    )

    # Register MCP tools
    logger.info("Registering MCP tools...")
    try:
        register_connection_tools(app)
        logger.info("Connection tools registered successfully")

        register_sync_tools(app)
        logger.info("Sync tools registered successfully")

        register_analytics_tools(app)
        logger.info("Analytics tools registered successfully")

        register_health_resources(app)
        logger.info("Health check resources registered successfully")
    except Exception as e:
        logger.error(f"Failed to register tools: {e}")
        raise

    logger.info("Server initialization completed successfully")


async def main() -> None:
    """Main entry point for the MCP server."""
    try:
        # Setup logging first
        setup_logging(get_settings())

        # Initialize server components
        await initialize_server()

        # Run the FastMCP server
        logger.info("Starting FastMCP server...")
        await app.run_async()

    except KeyboardInterrupt:
        logger.info("Server shutdown requested")

    except ConfigurationError as e:
        logger.error(f"Server startup failed: {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Unexpected server error: {e}", exc_info=True)
        sys.exit(1)

    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
