"""PMS vendor adapters: endpoint map, status mapping and field normalization."""

from pms_analytics_mcp.adapters.base import VendorAdapter
from pms_analytics_mcp.adapters.endpoints import get_endpoint, get_resource_params
from pms_analytics_mcp.adapters.registry import (
    AdapterRegistry,
    get_adapter_registry,
)
from pms_analytics_mcp.adapters.status import map_reservation_status, map_room_status

__all__ = [
    "AdapterRegistry",
    "VendorAdapter",
    "get_adapter_registry",
    "get_endpoint",
    "get_resource_params",
    "map_reservation_status",
    "map_room_status",
]
