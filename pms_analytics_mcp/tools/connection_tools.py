"""
Connection management tools for PMS Analytics MCP.

Provides MCP tools for listing, adding, removing and testing the PMS
connections kept in the connection registry.
"""

from typing import Any

from fastmcp import FastMCP

from pms_analytics_mcp.adapters.registry import get_adapter_registry
from pms_analytics_mcp.auth.headers import build_auth_headers, secret_names
from pms_analytics_mcp.models.common import ConnectionStatus
from pms_analytics_mcp.utils.exceptions import ValidationError
from pms_analytics_mcp.utils.service_factory import (
    get_connection_registry,
    get_sync_service,
)
from pms_analytics_mcp.utils.validators import validate_connection_id


def register_connection_tools(app: FastMCP):
    """Register all connection-related MCP tools."""

    @app.tool()
    async def list_connections(status: str | None = None) -> dict[str, Any]:
        """
        List configured PMS connections.

        Args:
            status: Only return connections in this status (connected,
                disconnected, error, syncing)

        Returns:
            Dictionary containing the connections and their count
        """
        if status is not None:
            try:
                status = ConnectionStatus(status.lower()).value
            except ValueError as e:
                valid = ", ".join(s.value for s in ConnectionStatus)
                raise ValidationError(
                    f"Invalid status '{status}'. Must be one of: {valid}"
                ) from e

        registry = get_connection_registry()
        connections = registry.list_connections(status)

        return {
            "success": True,
            "connections": [conn.model_dump(by_alias=True) for conn in connections],
            "total_count": len(connections),
            "connected_count": len(registry.connected()),
            "supported_vendors": get_adapter_registry().describe(),
        }

    @app.tool()
    async def add_connection(
        name: str,
        api_endpoint: str,
        pms_type: str = "custom",
        auth_type: str = "api_key",
        sync_frequency: str = "hourly",
    ) -> dict[str, Any]:
        """
        Register a new PMS connection.

        Args:
            name: Display name of the connection
            api_endpoint: Base URL of the vendor API
            pms_type: Vendor (opera, fidelio, protel, mews, cloudbeds, rms, custom)
            auth_type: Authentication scheme (api_key, oauth, basic_auth)
            sync_frequency: Expected sync cadence (real_time, hourly, daily, manual)

        Returns:
            Dictionary containing the created connection and the secrets it
            needs
        """
        registry = get_connection_registry()
        connection = await registry.add(
            {
                "name": name,
                "apiEndpoint": api_endpoint,
                "type": pms_type.lower(),
                "authType": auth_type.lower(),
                "syncFrequency": sync_frequency.lower(),
            }
        )

        return {
            "success": True,
            "connection": connection.model_dump(by_alias=True),
            "required_secrets": secret_names(connection),
        }

    @app.tool()
    async def remove_connection(
        connection_id: str, purge_records: bool = False
    ) -> dict[str, Any]:
        """
        Remove a PMS connection.

        Args:
            connection_id: Connection to remove
            purge_records: Also delete the records synced from it

        Returns:
            Dictionary telling whether a connection was removed
        """
        validate_connection_id(connection_id)

        removed = await get_connection_registry().remove(
            connection_id, purge_records=purge_records
        )

        if removed:
            return {
                "success": True,
                "connection_id": connection_id,
                "records_purged": purge_records,
            }
        else:
            return {
                "success": False,
                "error": f"Connection not found: {connection_id}",
                "connection_id": connection_id,
            }

    @app.tool()
    async def test_connection(connection_id: str) -> dict[str, Any]:
        """
        Call the health endpoint of a PMS connection.

        Args:
            connection_id: Connection to test

        Returns:
            Dictionary containing the health check outcome
        """
        validate_connection_id(connection_id)

        registry = get_connection_registry()
        connection = registry.get(connection_id)
        healthy = await get_sync_service().test_connection(connection)

        return {
            "success": True,
            "connection_id": connection_id,
            "healthy": healthy,
            "api_endpoint": connection.api_endpoint,
        }

    @app.tool()
    async def get_connection_secrets(connection_id: str) -> dict[str, Any]:
        """
        Describe the secrets and Authorization header of a connection.

        Header values carry ``{{name}}`` placeholders; real credentials are
        injected by a secret-resolving proxy and never stored here.

        Args:
            connection_id: Connection to describe

        Returns:
            Dictionary containing the secret names and header template
        """
        validate_connection_id(connection_id)

        connection = get_connection_registry().get(connection_id)

        return {
            "success": True,
            "connection_id": connection_id,
            "auth_type": connection.auth_type,
            "required_secrets": secret_names(connection),
            "headers": build_auth_headers(connection),
        }
