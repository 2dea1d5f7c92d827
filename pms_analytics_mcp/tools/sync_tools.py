"""
Synchronization tools for PMS Analytics MCP.
"""

from typing import Any

from fastmcp import FastMCP

from pms_analytics_mcp.utils.exceptions import SyncError
from pms_analytics_mcp.utils.service_factory import get_sync_service
from pms_analytics_mcp.utils.validators import validate_connection_id


def register_sync_tools(app: FastMCP):
    """Register the sync MCP tools."""

    @app.tool()
    async def sync_connection(connection_id: str) -> dict[str, Any]:
        """
        Sync one PMS connection and store its records.

        Args:
            connection_id: Connection to sync

        Returns:
            Dictionary containing the sync outcome and record counts
        """
        validate_connection_id(connection_id)

        try:
            result = await get_sync_service().sync_connection(connection_id)
        except SyncError as e:
            return {
                "success": False,
                "error": e.message,
                "connection_id": connection_id,
                "status": "error",
            }

        return {"success": True, **result.model_dump()}

    @app.tool()
    async def sync_all_connections(
        connection_ids: list[str] | None = None, parallel: bool | None = None
    ) -> dict[str, Any]:
        """
        Sync several PMS connections, skipping the ones that fail.

        Args:
            connection_ids: Connections to sync (defaults to all)
            parallel: Sync concurrently (defaults to PMS_PARALLEL_CONNECTION_SYNC)

        Returns:
            Dictionary containing per-connection results and warnings
        """
        if connection_ids:
            for connection_id in connection_ids:
                validate_connection_id(connection_id)

        aggregate = await get_sync_service().sync_all(
            connection_ids=connection_ids, parallel=parallel
        )

        return {
            "success": not aggregate.warnings,
            "synced_connections": aggregate.synced_connections,
            "results": [result.model_dump() for result in aggregate.results],
            "warnings": aggregate.warnings,
            "record_counts": aggregate.data.counts(),
        }
