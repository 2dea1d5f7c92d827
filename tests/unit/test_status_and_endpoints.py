"""
Unit tests for the status mapper and the vendor endpoint map.
"""

from datetime import UTC, datetime

import pytest

from pms_analytics_mcp.adapters.endpoints import (
    VENDOR_ENDPOINTS,
    get_endpoint,
    get_resource_params,
)
from pms_analytics_mcp.adapters.status import map_reservation_status, map_room_status
from pms_analytics_mcp.models.common import (
    PMSType,
    ReservationStatus,
    ResourceType,
    RoomStatus,
)


class TestReservationStatus:
    """Test suite for reservation status mapping."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Confirmed", "confirmed"),
            ("BOOKED", "confirmed"),
            ("CheckedIn", "checked_in"),
            ("CHECKED_IN", "checked_in"),
            ("Checked Out", "checked_out"),
            ("Cancelled", "cancelled"),
            ("CANCELED", "cancelled"),
            ("No Show", "no_show"),
            ("NOSHOW", "no_show"),
        ],
    )
    def test_vendor_vocabulary(self, raw, expected):
        assert map_reservation_status(raw, PMSType.OPERA) == expected

    @pytest.mark.parametrize("raw", ["", None, 42, "Started", "Optional"])
    def test_unrecognized_defaults_to_confirmed(self, raw):
        assert map_reservation_status(raw) == "confirmed"

    def test_canonical_values_map_to_themselves(self):
        for status in ReservationStatus:
            assert map_reservation_status(status.value) == status.value

    def test_vendor_does_not_change_decision(self):
        assert map_reservation_status("CheckedIn", "mews") == map_reservation_status(
            "CheckedIn", "opera"
        )


class TestRoomStatus:
    """Test suite for room status mapping."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Clean", "available"),
            ("Inspected Available", "available"),
            ("Dirty", "occupied"),
            ("OCCUPIED", "occupied"),
            ("Under Repair", "maintenance"),
            ("Maintenance", "maintenance"),
            ("OUT_OF_ORDER", "out_of_order"),
            ("Out of Service", "out_of_order"),
        ],
    )
    def test_vendor_vocabulary(self, raw, expected):
        assert map_room_status(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, 3.5, "Inspected"])
    def test_unrecognized_defaults_to_available(self, raw):
        assert map_room_status(raw) == "available"

    def test_canonical_values_map_to_themselves(self):
        for status in RoomStatus:
            assert map_room_status(status.value) == status.value


class TestEndpointMap:
    """Test suite for vendor endpoint lookup."""

    def test_opera_guests_are_profiles(self):
        assert get_endpoint(PMSType.OPERA, ResourceType.GUESTS) == "/profiles"

    def test_mews_connector_paths(self):
        assert (
            get_endpoint("mews", "reservations")
            == "/api/connector/v1/reservations/getAll"
        )
        assert get_endpoint("mews", "occupancy") == "/api/connector/v1/reports/getOccupancy"

    def test_cloudbeds_paths(self):
        assert get_endpoint("cloudbeds", "rooms") == "/api/v1.1/getRooms"

    def test_unknown_vendor_falls_back_to_generic(self):
        assert get_endpoint("acme", "rooms") == "/rooms"

    def test_unknown_resource_falls_back_to_resource_name(self):
        assert get_endpoint("opera", "folios") == "/folios"

    def test_every_vendor_maps_every_resource(self):
        for pms_type in PMSType:
            endpoints = VENDOR_ENDPOINTS[pms_type.value]
            for resource in ResourceType:
                assert endpoints[resource.value].startswith("/")


class TestResourceParams:
    """Test suite for per-resource query parameters."""

    @pytest.fixture
    def now(self) -> datetime:
        return datetime(2024, 1, 16, 12, 0, tzinfo=UTC)

    def test_reservations_span_both_sides(self, now):
        params = get_resource_params("reservations", now=now, window_days=30)

        assert params["from"].startswith("2023-12-17")
        assert params["to"].startswith("2024-02-15")

    def test_guests_are_limited_and_active(self, now):
        params = get_resource_params("guests", now=now, guest_limit=250)

        assert params == {"limit": 250, "active": "true"}

    def test_revenue_looks_back_grouped_by_day(self, now):
        params = get_resource_params(ResourceType.REVENUE, now=now, window_days=7)

        assert params["from"].startswith("2024-01-09")
        assert params["to"].startswith("2024-01-16")
        assert params["groupBy"] == "day"

    def test_occupancy_looks_back(self, now):
        params = get_resource_params("occupancy", now=now)

        assert set(params) == {"from", "to"}

    def test_rooms_have_no_params(self, now):
        assert get_resource_params("rooms", now=now) == {}
