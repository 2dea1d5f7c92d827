"""
Status mapping for vendor reservation and room states.

Vendors describe the same lifecycle with different vocabularies
("CheckedIn", "IN_HOUSE", "Started", "Dirty", ...). Both mappers lower-case
the raw value and test plain substrings in a fixed priority order, so the
result is a best-effort heuristic rather than an authoritative mapping. The
vendor type is accepted for future per-vendor overrides but does not change
the decision today.
"""

from typing import Any

from pms_analytics_mcp.models.common import PMSType, ReservationStatus, RoomStatus


def map_reservation_status(
    status: Any, pms_type: PMSType | str | None = None
) -> str:
    """
    Collapse a vendor reservation status into a ReservationStatus value.

    Args:
        status: Raw status text from the vendor payload
        pms_type: Vendor the status came from (unused by the heuristic)

    Returns:
        Canonical reservation status value, ``confirmed`` when unrecognized
    """
    if not status or not isinstance(status, str):
        return ReservationStatus.CONFIRMED.value

    status_lower = status.lower()

    if "confirm" in status_lower or "booked" in status_lower:
        return ReservationStatus.CONFIRMED.value
    if "check" in status_lower and "in" in status_lower:
        return ReservationStatus.CHECKED_IN.value
    if "check" in status_lower and "out" in status_lower:
        return ReservationStatus.CHECKED_OUT.value
    if "cancel" in status_lower:
        return ReservationStatus.CANCELLED.value
    if "no" in status_lower and "show" in status_lower:
        return ReservationStatus.NO_SHOW.value

    return ReservationStatus.CONFIRMED.value


def map_room_status(status: Any, pms_type: PMSType | str | None = None) -> str:
    """
    Collapse a vendor housekeeping/room status into a RoomStatus value.

    Args:
        status: Raw status text from the vendor payload
        pms_type: Vendor the status came from (unused by the heuristic)

    Returns:
        Canonical room status value, ``available`` when unrecognized
    """
    if not status or not isinstance(status, str):
        return RoomStatus.AVAILABLE.value

    status_lower = status.lower()

    if "available" in status_lower or "clean" in status_lower:
        return RoomStatus.AVAILABLE.value
    if "occupied" in status_lower or "dirty" in status_lower:
        return RoomStatus.OCCUPIED.value
    if "maintenance" in status_lower or "repair" in status_lower:
        return RoomStatus.MAINTENANCE.value
    if "out" in status_lower or "order" in status_lower:
        return RoomStatus.OUT_OF_ORDER.value

    return RoomStatus.AVAILABLE.value
