"""
Common data models for the PMS Analytics MCP server.

Provides the base model and the enumerations shared by connections and the
canonical record types produced by the vendor adapters.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PMSBaseModel(BaseModel):
    """Base model for all PMS Analytics entities."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
        validate_default=True,
    )


class PMSType(str, Enum):
    """Supported property management system vendors."""

    OPERA = "opera"
    FIDELIO = "fidelio"
    PROTEL = "protel"
    MEWS = "mews"
    CLOUDBEDS = "cloudbeds"
    RMS = "rms"
    CUSTOM = "custom"


class ConnectionStatus(str, Enum):
    """Lifecycle status of a PMS connection."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    SYNCING = "syncing"


class AuthType(str, Enum):
    """Authentication scheme used by a PMS connection."""

    API_KEY = "api_key"
    OAUTH = "oauth"
    BASIC_AUTH = "basic_auth"


class SyncFrequency(str, Enum):
    """How often a connection is expected to be synchronized."""

    REAL_TIME = "real_time"
    HOURLY = "hourly"
    DAILY = "daily"
    MANUAL = "manual"


class ReservationStatus(str, Enum):
    """Canonical reservation status."""

    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class RoomStatus(str, Enum):
    """Canonical room status."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"


class ResourceType(str, Enum):
    """Resources fetched from every PMS during a sync."""

    RESERVATIONS = "reservations"
    GUESTS = "guests"
    ROOMS = "rooms"
    REVENUE = "revenue"
    OCCUPANCY = "occupancy"


class FrozenPMSModel(PMSBaseModel):
    """Immutable snapshot; changes go through model_copy(update=...)."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)
