"""
Health check resources for the PMS Analytics MCP server.

Provides MCP resources for monitoring and health checking the server, its
configuration, its storage and the state of the registered PMS connections.
"""

import asyncio
import logging
import os
from collections import Counter
from typing import Any

from fastmcp import FastMCP

from pms_analytics_mcp.adapters.registry import get_adapter_registry
from pms_analytics_mcp.config.settings import get_settings
from pms_analytics_mcp.models.common import ConnectionStatus
from pms_analytics_mcp.utils.exceptions import PMSAnalyticsError
from pms_analytics_mcp.utils.service_factory import get_connection_registry

logger = logging.getLogger(__name__)


def _storage_check(path) -> dict[str, Any]:
    if path.exists():
        writable = os.access(path, os.W_OK)
    else:
        # Created on first write; the nearest existing parent must be writable
        parent = path.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        writable = os.access(parent, os.W_OK)
    return {"path": str(path), "exists": path.exists(), "writable": writable}


def collect_health_checks(version: str = "unknown") -> dict[str, Any]:
    """
    Gather server health information.

    Returns:
        Dictionary with overall status and the individual checks
    """
    try:
        current_settings = get_settings()
        missing_settings = current_settings.validate_required_settings()

        checks: dict[str, Any] = {
            "mcp_server": True,
            "configuration": not missing_settings,
            "storage": _storage_check(current_settings.get_storage_path()),
            "vendors": get_adapter_registry().list_vendors(),
            "version": version,
        }
        if missing_settings:
            checks["missing_settings"] = missing_settings

        try:
            registry = get_connection_registry()
            by_status = Counter(conn.status for conn in registry)
            checks["connections"] = {
                "total": len(registry),
                **{
                    status.value: by_status.get(status.value, 0)
                    for status in ConnectionStatus
                },
            }
        except PMSAnalyticsError as e:
            logger.warning(f"Connection registry health check failed: {e}")
            checks["connections"] = {"status": "error", "error": str(e)}

        has_errors = (
            not checks["configuration"]
            or not checks["storage"]["writable"]
            or checks["connections"].get("status") == "error"
        )
        status = "unhealthy" if has_errors else "healthy"

        return {
            "status": status,
            "checks": checks,
            "timestamp": asyncio.get_event_loop().time(),
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
            "timestamp": asyncio.get_event_loop().time(),
        }


def register_health_resources(app: FastMCP):
    """
    Register all health check resources with the FastMCP app.

    Args:
        app: FastMCP application instance
    """
    version = getattr(app, "version", None) or "unknown"

    @app.resource("health://status")
    async def health_status() -> dict[str, Any]:
        """
        Health check resource that provides detailed status information.

        Returns:
            Dictionary containing health status and detailed checks
        """
        return collect_health_checks(version)

    @app.resource("health://ready")
    async def readiness_check() -> dict[str, Any]:
        """
        Readiness check resource that indicates if the service is ready to serve requests.

        Returns:
            Dictionary indicating readiness status
        """
        try:
            current_settings = get_settings()
            missing_settings = current_settings.validate_required_settings()
            if missing_settings:
                return {
                    "status": "not_ready",
                    "reason": "Invalid configuration",
                    "missing_settings": missing_settings,
                }

            registry = get_connection_registry()
            return {
                "status": "ready",
                "details": {
                    "connections": len(registry),
                    "connected": len(registry.connected()),
                    "version": version,
                },
            }

        except PMSAnalyticsError as e:
            logger.error(f"Readiness check failed: {e}")
            return {"status": "not_ready", "error": str(e)}

    @app.resource("health://live")
    async def liveness_check() -> dict[str, Any]:
        """
        Liveness check resource that indicates if the service is alive.

        Returns:
            Dictionary indicating liveness status
        """
        return {
            "status": "alive",
            "timestamp": asyncio.get_event_loop().time(),
            "version": version,
        }

    logger.info("Health check resources registered")
