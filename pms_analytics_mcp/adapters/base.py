"""
Vendor adapter interface.

A VendorAdapter turns raw decoded vendor responses into canonical records.
Each canonical attribute is resolved from a tuple of candidate field names
tried in priority order; vendors differ only in those alias tables and in a
few nested shapes, so concrete adapters are mostly declarative.

Normalization never raises on malformed input: non-list bodies yield an empty
list, non-dict items are skipped, unparsable numbers fall back to defaults
and missing identifiers stay ``None``.
"""

import logging
from abc import ABC
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, ClassVar

from pms_analytics_mcp.adapters.endpoints import get_endpoint
from pms_analytics_mcp.adapters.status import map_reservation_status, map_room_status
from pms_analytics_mcp.models.common import PMSType, ResourceType
from pms_analytics_mcp.models.records import (
    CanonicalRecord,
    Guest,
    OccupancyData,
    Reservation,
    RevenueData,
    Room,
)

logger = logging.getLogger(__name__)

FieldAliases = dict[str, tuple[str, ...]]

_FALSE_STRINGS = {"", "false", "no", "n", "0", "none", "null"}

# Allowed drift between a vendor occupancy rate and occupied/total, in points
OCCUPANCY_RATE_TOLERANCE = 1.0


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(UTC).isoformat()


def lookup(item: dict[str, Any], path: str) -> Any:
    """Read a possibly dotted field path (``TotalAmount.Value``) from a record."""
    current: Any = item
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def pick(item: dict[str, Any], aliases: Iterable[str], default: Any = None) -> Any:
    """Return the first present, non-empty value among ``aliases``."""
    for alias in aliases:
        value = lookup(item, alias)
        if value is not None and value != "":
            return value
    return default


def as_text(value: Any, default: str | None = None) -> str | None:
    if value is None or value == "":
        return default
    if isinstance(value, (dict, list)):
        return default
    return str(value)


def as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


class VendorAdapter(ABC):
    """
    Base adapter shared by every PMS vendor.

    Subclasses set ``pms_type`` and override the alias tables; the generic
    snake_case/camelCase tables below are used by vendors without a
    dedicated shape.
    """

    pms_type: ClassVar[PMSType] = PMSType.CUSTOM
    display_name: ClassVar[str] = "Custom API"

    RESERVATION_FIELDS: ClassVar[FieldAliases] = {
        "id": ("id", "reservation_id"),
        "guest_id": ("guest_id", "guestId"),
        "room_number": ("room_number", "roomNumber"),
        "check_in": ("check_in", "checkIn"),
        "check_out": ("check_out", "checkOut"),
        "status": ("status",),
        "total_amount": ("total_amount", "totalAmount"),
        "currency": ("currency",),
        "source": ("source",),
        "created_at": ("created_at", "createdAt"),
        "updated_at": ("updated_at", "updatedAt"),
    }

    GUEST_FIELDS: ClassVar[FieldAliases] = {
        "id": ("id", "guest_id"),
        "first_name": ("first_name", "firstName"),
        "last_name": ("last_name", "lastName"),
        "email": ("email",),
        "phone": ("phone",),
        "nationality": ("nationality",),
        "vip_status": ("vip_status", "vipStatus"),
        "total_stays": ("total_stays", "totalStays"),
        "total_spent": ("total_spent", "totalSpent"),
        "last_stay": ("last_stay", "lastStay"),
    }

    ROOM_FIELDS: ClassVar[FieldAliases] = {
        "id": ("id", "room_id", "Id"),
        "number": ("number", "room_number", "Number"),
        "type": ("type", "room_type", "Type"),
        "status": ("status", "Status"),
        "floor": ("floor", "Floor"),
        "capacity": ("capacity", "Capacity"),
        "rate": ("rate", "Rate"),
    }

    REVENUE_FIELDS: ClassVar[FieldAliases] = {
        "date": ("date", "Date"),
        "room_revenue": ("room_revenue", "roomRevenue", "RoomRevenue"),
        "fb_revenue": ("fb_revenue", "fbRevenue", "FBRevenue"),
        "other_revenue": ("other_revenue", "otherRevenue", "OtherRevenue"),
        "total_revenue": ("total_revenue", "totalRevenue", "TotalRevenue"),
        "currency": ("currency", "Currency"),
    }

    OCCUPANCY_FIELDS: ClassVar[FieldAliases] = {
        "date": ("date", "Date"),
        "total_rooms": ("total_rooms", "totalRooms", "TotalRooms"),
        "occupied_rooms": ("occupied_rooms", "occupiedRooms", "OccupiedRooms"),
        "occupancy_rate": ("occupancy_rate", "occupancyRate", "OccupancyRate"),
        "adr": ("adr", "ADR"),
        "revpar": ("revpar", "RevPAR"),
    }

    def __init__(self, clock: Callable[[], str] | None = None) -> None:
        self._clock = clock or utc_timestamp

    def endpoint(self, resource_type: ResourceType | str) -> str:
        """Relative path of a resource for this vendor."""
        return get_endpoint(self.pms_type, resource_type)

    def normalize(
        self, resource_type: ResourceType | str, raw: Any
    ) -> list[CanonicalRecord]:
        """Dispatch to the normalizer of one resource type."""
        normalizers: dict[str, Callable[[Any], list]] = {
            ResourceType.RESERVATIONS.value: self.normalize_reservations,
            ResourceType.GUESTS.value: self.normalize_guests,
            ResourceType.ROOMS.value: self.normalize_rooms,
            ResourceType.REVENUE.value: self.normalize_revenue,
            ResourceType.OCCUPANCY.value: self.normalize_occupancy,
        }
        return normalizers[ResourceType(resource_type).value](raw)

    @staticmethod
    def _items(raw: Any) -> list[dict[str, Any]]:
        if not isinstance(raw, (list, tuple)):
            return []
        return [item for item in raw if isinstance(item, dict)]

    # Reservations

    def normalize_reservations(self, raw: Any) -> list[Reservation]:
        now = self._clock()
        return [self.reservation_from(item, now) for item in self._items(raw)]

    def reservation_from(self, item: dict[str, Any], now: str) -> Reservation:
        fields = self.RESERVATION_FIELDS
        return Reservation(
            id=as_text(pick(item, fields["id"])),
            guest_id=as_text(pick(item, fields["guest_id"])),
            room_number=as_text(pick(item, fields["room_number"])),
            check_in=as_text(pick(item, fields["check_in"])),
            check_out=as_text(pick(item, fields["check_out"])),
            status=map_reservation_status(
                pick(item, fields["status"]), self.pms_type
            ),
            total_amount=as_float(pick(item, fields["total_amount"])),
            currency=as_text(pick(item, fields["currency"]), "USD"),
            source=as_text(pick(item, fields["source"]), "Direct"),
            created_at=as_text(pick(item, fields["created_at"]), now),
            updated_at=as_text(pick(item, fields["updated_at"]), now),
        )

    # Guests

    def normalize_guests(self, raw: Any) -> list[Guest]:
        now = self._clock()
        return [self.guest_from(item, now) for item in self._items(raw)]

    def vip_flag(self, item: dict[str, Any]) -> bool:
        return as_flag(pick(item, self.GUEST_FIELDS["vip_status"], False))

    def guest_from(self, item: dict[str, Any], now: str) -> Guest:
        fields = self.GUEST_FIELDS
        return Guest(
            id=as_text(pick(item, fields["id"])),
            first_name=as_text(pick(item, fields["first_name"])),
            last_name=as_text(pick(item, fields["last_name"])),
            email=as_text(pick(item, fields["email"])),
            phone=as_text(pick(item, fields["phone"])),
            nationality=as_text(pick(item, fields["nationality"]), "Unknown"),
            vip_status=self.vip_flag(item),
            total_stays=as_int(pick(item, fields["total_stays"])),
            total_spent=as_float(pick(item, fields["total_spent"])),
            last_stay=as_text(pick(item, fields["last_stay"]), now),
        )

    # Rooms

    def normalize_rooms(self, raw: Any) -> list[Room]:
        return [self.room_from(item) for item in self._items(raw)]

    def room_from(self, item: dict[str, Any]) -> Room:
        fields = self.ROOM_FIELDS
        return Room(
            id=as_text(pick(item, fields["id"])),
            number=as_text(pick(item, fields["number"])),
            type=as_text(pick(item, fields["type"])),
            status=map_room_status(pick(item, fields["status"]), self.pms_type),
            floor=as_int(pick(item, fields["floor"]), 1),
            capacity=as_int(pick(item, fields["capacity"]), 2),
            rate=as_float(pick(item, fields["rate"])),
        )

    # Revenue

    def normalize_revenue(self, raw: Any) -> list[RevenueData]:
        return [self.revenue_from(item) for item in self._items(raw)]

    def revenue_from(self, item: dict[str, Any]) -> RevenueData:
        fields = self.REVENUE_FIELDS
        room = as_float(pick(item, fields["room_revenue"]))
        fb = as_float(pick(item, fields["fb_revenue"]))
        other = as_float(pick(item, fields["other_revenue"]))
        total = as_float(pick(item, fields["total_revenue"]))
        day = as_text(pick(item, fields["date"]))

        components = round(room + fb + other, 2)
        if components and abs(components - total) > 0.01:
            if total:
                logger.warning(
                    "Revenue total does not match its components, using the sum",
                    extra={
                        "pms_type": self.pms_type.value,
                        "date": day,
                        "reported_total": total,
                        "component_total": components,
                    },
                )
            total = components

        return RevenueData(
            date=day,
            room_revenue=room,
            fb_revenue=fb,
            other_revenue=other,
            total_revenue=total,
            currency=as_text(pick(item, fields["currency"]), "USD"),
        )

    # Occupancy

    def normalize_occupancy(self, raw: Any) -> list[OccupancyData]:
        return [self.occupancy_from(item) for item in self._items(raw)]

    def occupancy_from(self, item: dict[str, Any]) -> OccupancyData:
        fields = self.OCCUPANCY_FIELDS
        total_rooms = as_int(pick(item, fields["total_rooms"]))
        occupied = as_int(pick(item, fields["occupied_rooms"]))
        rate = as_float(pick(item, fields["occupancy_rate"]))
        day = as_text(pick(item, fields["date"]))

        if total_rooms > 0:
            derived = round(occupied / total_rooms * 100, 2)
            if abs(derived - rate) > OCCUPANCY_RATE_TOLERANCE:
                if rate:
                    logger.warning(
                        "Occupancy rate inconsistent with room counts, recomputing",
                        extra={
                            "pms_type": self.pms_type.value,
                            "date": day,
                            "reported_rate": rate,
                            "derived_rate": derived,
                        },
                    )
                rate = derived

        return OccupancyData(
            date=day,
            total_rooms=total_rooms,
            occupied_rooms=occupied,
            occupancy_rate=rate,
            adr=as_float(pick(item, fields["adr"])),
            revpar=as_float(pick(item, fields["revpar"])),
        )
