"""
Concrete vendor adapters.

Opera and Mews publish their own PascalCase shapes; the remaining vendors
are served by the generic snake_case/camelCase tables and differ only in
their endpoint paths.
"""

from typing import Any, ClassVar

from pms_analytics_mcp.adapters.base import FieldAliases, VendorAdapter, lookup
from pms_analytics_mcp.models.common import PMSType


class GenericAdapter(VendorAdapter):
    """Adapter for custom APIs following the canonical field names."""

    pms_type = PMSType.CUSTOM
    display_name = "Custom API"


class OperaAdapter(VendorAdapter):
    """Oracle Opera (profiles instead of guests, PascalCase fields)."""

    pms_type = PMSType.OPERA
    display_name = "Oracle Opera"

    RESERVATION_FIELDS: ClassVar[FieldAliases] = {
        "id": ("ReservationId", "id"),
        "guest_id": ("ProfileId", "guest_id"),
        "room_number": ("RoomNumber", "room_number"),
        "check_in": ("ArrivalDate", "check_in"),
        "check_out": ("DepartureDate", "check_out"),
        "status": ("ReservationStatus", "status"),
        "total_amount": ("TotalAmount", "total_amount"),
        "currency": ("Currency", "currency"),
        "source": ("Source", "source"),
        "created_at": ("CreatedDate", "created_at"),
        "updated_at": ("ModifiedDate", "updated_at"),
    }

    GUEST_FIELDS: ClassVar[FieldAliases] = {
        "id": ("ProfileId", "id"),
        "first_name": ("FirstName", "first_name"),
        "last_name": ("LastName", "last_name"),
        "email": ("EmailAddress", "email"),
        "phone": ("PhoneNumber", "phone"),
        "nationality": ("Nationality", "nationality"),
        "vip_status": ("VipStatus",),
        "total_stays": ("TotalStays",),
        "total_spent": ("TotalRevenue",),
        "last_stay": ("LastStayDate",),
    }


class MewsAdapter(VendorAdapter):
    """Mews Commander connector API (Utc timestamps, nested amounts)."""

    pms_type = PMSType.MEWS
    display_name = "Mews Commander"

    RESERVATION_FIELDS: ClassVar[FieldAliases] = {
        "id": ("Id", "id"),
        "guest_id": ("CustomerId", "customer_id"),
        "room_number": ("AssignedSpaceNumber", "room_number"),
        "check_in": ("StartUtc", "check_in"),
        "check_out": ("EndUtc", "check_out"),
        "status": ("State", "status"),
        "total_amount": ("TotalAmount.Value", "total_amount"),
        "currency": ("TotalAmount.Currency", "currency"),
        "source": ("Origin", "source"),
        "created_at": ("CreatedUtc", "created_at"),
        "updated_at": ("UpdatedUtc", "updated_at"),
    }

    GUEST_FIELDS: ClassVar[FieldAliases] = {
        "id": ("Id", "id"),
        "first_name": ("FirstName", "first_name"),
        "last_name": ("LastName", "last_name"),
        "email": ("Email", "email"),
        "phone": ("Phone", "phone"),
        "nationality": ("NationalityCode", "nationality"),
        "vip_status": ("Classifications",),
        "total_stays": ("TotalStays",),
        "total_spent": ("TotalSpent",),
        "last_stay": ("LastStay",),
    }

    def vip_flag(self, item: dict[str, Any]) -> bool:
        classifications = lookup(item, "Classifications")
        if not isinstance(classifications, (list, tuple)):
            return False
        return "Vip" in classifications


class FidelioAdapter(GenericAdapter):
    pms_type = PMSType.FIDELIO
    display_name = "Fidelio Suite8"


class ProtelAdapter(GenericAdapter):
    pms_type = PMSType.PROTEL
    display_name = "Protel Air"


class CloudbedsAdapter(GenericAdapter):
    pms_type = PMSType.CLOUDBEDS
    display_name = "Cloudbeds"


class RMSAdapter(GenericAdapter):
    pms_type = PMSType.RMS
    display_name = "RMS Cloud"


BUILTIN_ADAPTERS: tuple[type[VendorAdapter], ...] = (
    OperaAdapter,
    MewsAdapter,
    FidelioAdapter,
    ProtelAdapter,
    CloudbedsAdapter,
    RMSAdapter,
    GenericAdapter,
)
