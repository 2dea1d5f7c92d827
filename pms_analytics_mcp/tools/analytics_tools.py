"""
Analytics tools for PMS Analytics MCP.

Provides the dashboard summary and raw access to the aggregated canonical
records of every connected PMS.
"""

from typing import Any

from fastmcp import FastMCP

from pms_analytics_mcp.services.analytics import build_dashboard_summary
from pms_analytics_mcp.utils.exceptions import ValidationError
from pms_analytics_mcp.utils.service_factory import (
    get_connection_registry,
    get_record_store,
    get_sync_service,
)
from pms_analytics_mcp.utils.validators import (
    validate_connection_id,
    validate_date_string,
    validate_limit,
    validate_resource_type,
)


def register_analytics_tools(app: FastMCP):
    """Register the analytics MCP tools."""

    @app.tool()
    async def get_dashboard_summary(today: str | None = None) -> dict[str, Any]:
        """
        Compute dashboard KPIs across all connected PMS systems.

        Falls back to the demonstration dataset when no connection returns
        data.

        Args:
            today: Reference day in YYYY-MM-DD format (defaults to today)

        Returns:
            Dictionary containing the KPIs, trends and fetch warnings
        """
        reference_day = validate_date_string(today) if today else None

        aggregate = await get_sync_service().get_dashboard_data()
        summary = build_dashboard_summary(
            aggregate.data,
            get_connection_registry().list_connections(),
            today=reference_day,
            is_demo=aggregate.is_demo,
        )

        return {
            "success": True,
            "summary": summary,
            "warnings": aggregate.warnings,
        }

    @app.tool()
    async def get_pms_data(
        resource: str,
        connection_id: str | None = None,
        source: str = "live",
        limit: int = 100,
    ) -> dict[str, Any]:
        """
        Get canonical records of one resource.

        Args:
            resource: reservations, guests, rooms, revenue or occupancy
            connection_id: Only records from this connection
            source: "live" to fetch from connected systems, "stored" to read
                previously synced records
            limit: Maximum records to return (1-1000)

        Returns:
            Dictionary containing the records and their total count
        """
        resource_type = validate_resource_type(resource)
        validate_limit(limit)
        if connection_id is not None:
            validate_connection_id(connection_id)
        if source not in ("live", "stored"):
            raise ValidationError("source must be 'live' or 'stored'")

        if source == "stored":
            records = await get_record_store().list_records(
                resource_type.value, connection_id=connection_id
            )
            return {
                "success": True,
                "resource": resource_type.value,
                "source": source,
                "records": records[:limit],
                "total_count": len(records),
                "is_demo": False,
            }

        aggregate = await get_sync_service().get_dashboard_data()
        data = aggregate.data
        if connection_id is not None:
            data = data.for_connection(connection_id)
        records = data.records(resource_type)

        return {
            "success": True,
            "resource": resource_type.value,
            "source": source,
            "records": [record.model_dump(by_alias=True) for record in records[:limit]],
            "total_count": len(records),
            "is_demo": aggregate.is_demo,
            "warnings": aggregate.warnings,
        }
