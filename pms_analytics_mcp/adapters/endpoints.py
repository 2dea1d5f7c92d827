"""
Vendor endpoint map and per-resource query parameters.

Maps (vendor, resource type) to the relative URL path appended to a
connection's API endpoint. Unknown vendors and unknown resources fall back to
``/{resource_type}`` instead of raising.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from pms_analytics_mcp.models.common import PMSType, ResourceType

GENERIC_ENDPOINTS: dict[str, str] = {
    "reservations": "/reservations",
    "guests": "/guests",
    "rooms": "/rooms",
    "revenue": "/revenue",
    "occupancy": "/occupancy",
}

VENDOR_ENDPOINTS: dict[str, dict[str, str]] = {
    PMSType.OPERA.value: {
        "reservations": "/reservations",
        "guests": "/profiles",
        "rooms": "/rooms",
        "revenue": "/revenue",
        "occupancy": "/occupancy",
    },
    PMSType.MEWS.value: {
        "reservations": "/api/connector/v1/reservations/getAll",
        "guests": "/api/connector/v1/customers/getAll",
        "rooms": "/api/connector/v1/spaces/getAll",
        "revenue": "/api/connector/v1/accountingItems/getAll",
        "occupancy": "/api/connector/v1/reports/getOccupancy",
    },
    PMSType.FIDELIO.value: {
        "reservations": "/fidelio/v1/reservations",
        "guests": "/fidelio/v1/guests",
        "rooms": "/fidelio/v1/rooms",
        "revenue": "/fidelio/v1/revenue",
        "occupancy": "/fidelio/v1/occupancy",
    },
    PMSType.PROTEL.value: {
        "reservations": "/pms/v1/reservations",
        "guests": "/pms/v1/guests",
        "rooms": "/pms/v1/rooms",
        "revenue": "/pms/v1/revenue",
        "occupancy": "/pms/v1/occupancy",
    },
    PMSType.CLOUDBEDS.value: {
        "reservations": "/api/v1.1/getReservations",
        "guests": "/api/v1.1/getGuests",
        "rooms": "/api/v1.1/getRooms",
        "revenue": "/api/v1.1/getRevenue",
        "occupancy": "/api/v1.1/getOccupancy",
    },
    PMSType.RMS.value: {
        "reservations": "/api/reservations",
        "guests": "/api/guests",
        "rooms": "/api/rooms",
        "revenue": "/api/revenue",
        "occupancy": "/api/occupancy",
    },
    PMSType.CUSTOM.value: dict(GENERIC_ENDPOINTS),
}

HEALTH_ENDPOINT = "/health"


def _value(item: Any) -> str:
    return item.value if hasattr(item, "value") else str(item)


def get_endpoint(pms_type: PMSType | str, resource_type: ResourceType | str) -> str:
    """
    Look up the relative path of a resource for a vendor.

    Args:
        pms_type: Vendor type
        resource_type: Resource name (reservations, guests, ...)

    Returns:
        Relative URL path starting with ``/``
    """
    resource = _value(resource_type)
    endpoints = VENDOR_ENDPOINTS.get(_value(pms_type), GENERIC_ENDPOINTS)
    return endpoints.get(resource) or f"/{resource}"


def get_resource_params(
    resource_type: ResourceType | str,
    now: datetime | None = None,
    window_days: int = 30,
    guest_limit: int = 1000,
) -> dict[str, Any]:
    """
    Build the query parameters sent with a resource fetch.

    Reservations span the window on both sides of ``now``; revenue and
    occupancy only look back. Guests are paged by ``guest_limit``.
    """
    now = now or datetime.now(UTC)
    window = timedelta(days=window_days)
    resource = _value(resource_type)

    if resource == ResourceType.RESERVATIONS.value:
        return {
            "from": (now - window).isoformat(),
            "to": (now + window).isoformat(),
        }
    if resource == ResourceType.GUESTS.value:
        return {"limit": guest_limit, "active": "true"}
    if resource == ResourceType.REVENUE.value:
        return {
            "from": (now - window).isoformat(),
            "to": now.isoformat(),
            "groupBy": "day",
        }
    if resource == ResourceType.OCCUPANCY.value:
        return {
            "from": (now - window).isoformat(),
            "to": now.isoformat(),
        }
    return {}
