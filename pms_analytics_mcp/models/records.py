"""
Canonical record models produced by the vendor adapters.

Every vendor response is normalized into these shapes. Records are immutable
snapshots tagged with the connection they came from; the composite
``record_key`` is the single namespacing policy used both for in-memory
aggregation and for persistence.
"""

from collections import Counter
from typing import Any

from pydantic import Field

from pms_analytics_mcp.models.common import (
    FrozenPMSModel,
    PMSBaseModel,
    ReservationStatus,
    ResourceType,
    RoomStatus,
)


class CanonicalRecord(FrozenPMSModel):
    """Base class for normalized PMS records."""

    connection_id: str | None = Field(None, alias="connectionId")

    def key_value(self) -> str | None:
        """Identifier the composite key is built from."""
        return getattr(self, "id", None)

    @property
    def record_key(self) -> str | None:
        """Composite key ``{connectionId}_{id}``; None when the record has no id."""
        value = self.key_value()
        if value is None or value == "":
            return None
        if self.connection_id:
            return f"{self.connection_id}_{value}"
        return str(value)


class Reservation(CanonicalRecord):
    """Normalized reservation."""

    id: str | None = None
    guest_id: str | None = Field(None, alias="guestId")
    room_number: str | None = Field(None, alias="roomNumber")
    check_in: str | None = Field(None, alias="checkIn")
    check_out: str | None = Field(None, alias="checkOut")
    status: ReservationStatus = ReservationStatus.CONFIRMED
    total_amount: float = Field(0.0, alias="totalAmount")
    currency: str = "USD"
    source: str = "Direct"
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")


class Guest(CanonicalRecord):
    """Normalized guest profile."""

    id: str | None = None
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str | None = None
    phone: str | None = None
    nationality: str = "Unknown"
    vip_status: bool = Field(False, alias="vipStatus")
    total_stays: int = Field(0, alias="totalStays")
    total_spent: float = Field(0.0, alias="totalSpent")
    last_stay: str | None = Field(None, alias="lastStay")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Room(CanonicalRecord):
    """Normalized room inventory entry."""

    id: str | None = None
    number: str | None = None
    type: str | None = None
    status: RoomStatus = RoomStatus.AVAILABLE
    floor: int = 1
    capacity: int = 2
    rate: float = 0.0


class RevenueData(CanonicalRecord):
    """Revenue for one day."""

    date: str | None = None
    room_revenue: float = Field(0.0, alias="roomRevenue")
    fb_revenue: float = Field(0.0, alias="fbRevenue")
    other_revenue: float = Field(0.0, alias="otherRevenue")
    total_revenue: float = Field(0.0, alias="totalRevenue")
    currency: str = "USD"

    def key_value(self) -> str | None:
        return self.date

    @property
    def component_total(self) -> float:
        return self.room_revenue + self.fb_revenue + self.other_revenue


class OccupancyData(CanonicalRecord):
    """Occupancy statistics for one day."""

    date: str | None = None
    total_rooms: int = Field(0, alias="totalRooms")
    occupied_rooms: int = Field(0, alias="occupiedRooms")
    occupancy_rate: float = Field(0.0, alias="occupancyRate")
    adr: float = 0.0
    revpar: float = 0.0

    def key_value(self) -> str | None:
        return self.date


class PMSData(PMSBaseModel):
    """The five record collections for one or more connections."""

    reservations: list[Reservation] = Field(default_factory=list)
    guests: list[Guest] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    revenue: list[RevenueData] = Field(default_factory=list)
    occupancy: list[OccupancyData] = Field(default_factory=list)

    def records(self, resource_type: ResourceType | str) -> list[CanonicalRecord]:
        """Records for one resource type."""
        return list(getattr(self, ResourceType(resource_type).value))

    def counts(self) -> dict[str, int]:
        return {
            resource.value: len(getattr(self, resource.value))
            for resource in ResourceType
        }

    def is_empty(self) -> bool:
        return not any(self.counts().values())

    def tag(self, connection_id: str) -> "PMSData":
        """Return a copy where every record carries ``connection_id``."""
        tagged: dict[str, Any] = {}
        for resource in ResourceType:
            tagged[resource.value] = [
                record.model_copy(update={"connection_id": connection_id})
                for record in getattr(self, resource.value)
            ]
        return PMSData(**tagged)

    def merge(self, *others: "PMSData") -> "PMSData":
        """Concatenate the collections of several datasets."""
        merged: dict[str, list] = {
            resource.value: list(getattr(self, resource.value))
            for resource in ResourceType
        }
        for other in others:
            for resource in ResourceType:
                merged[resource.value].extend(getattr(other, resource.value))
        return PMSData(**merged)

    def for_connection(self, connection_id: str) -> "PMSData":
        """Subset of records that came from one connection."""
        return PMSData(
            **{
                resource.value: [
                    record
                    for record in getattr(self, resource.value)
                    if record.connection_id == connection_id
                ]
                for resource in ResourceType
            }
        )

    def find_guest(self, reservation: Reservation) -> Guest | None:
        """Resolve the weak guest reference of a reservation."""
        if not reservation.guest_id:
            return None
        for guest in self.guests:
            if (
                guest.id == reservation.guest_id
                and guest.connection_id == reservation.connection_id
            ):
                return guest
        return None

    def reservation_status_counts(self) -> dict[str, int]:
        return dict(Counter(r.status for r in self.reservations))

    def room_status_counts(self) -> dict[str, int]:
        return dict(Counter(r.status for r in self.rooms))
