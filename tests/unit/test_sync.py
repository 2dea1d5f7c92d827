"""
Unit tests for PMSSyncService.

Two mock vendors are served from one MockTransport keyed by host so a
healthy and a failing connection can be synced side by side.
"""

from unittest.mock import AsyncMock, patch

import pytest

from pms_analytics_mcp.models.records import PMSData, Room
from pms_analytics_mcp.services.sync import PMSSyncService, storage_record
from pms_analytics_mcp.utils.exceptions import (
    ConnectionNotFoundError,
    StorageError,
    SyncError,
)

OPERA_HOST = "opera.example.com"
MEWS_HOST = "mews.example.com"

OPERA_ROUTES = {
    (OPERA_HOST, "/api/health"): {"status": "ok"},
    (OPERA_HOST, "/api/reservations"): [
        {"ReservationId": "R1", "ProfileId": "P1", "ReservationStatus": "CHECKED_IN"},
        {"ProfileId": "P2"},
    ],
    (OPERA_HOST, "/api/profiles"): [{"ProfileId": "P1", "FirstName": "Ana"}],
    (OPERA_HOST, "/api/rooms"): [{"id": "101", "number": "101", "status": "Dirty"}],
    (OPERA_HOST, "/api/revenue"): [
        {"date": "2024-01-16", "roomRevenue": 100, "fbRevenue": 20, "otherRevenue": 5}
    ],
    (OPERA_HOST, "/api/occupancy"): [
        {"date": "2024-01-16", "totalRooms": 10, "occupiedRooms": 4}
    ],
}

MEWS_ROUTES = {
    (MEWS_HOST, "/health"): 503,
}


@pytest.fixture
def opera(make_connection):
    return make_connection(
        id="conn_opera",
        name="Opera Hotel",
        type="opera",
        status="disconnected",
        apiEndpoint=f"https://{OPERA_HOST}/api",
    )


@pytest.fixture
def mews(make_connection):
    return make_connection(
        id="conn_mews",
        name="Mews Hotel",
        type="mews",
        status="disconnected",
        apiEndpoint=f"https://{MEWS_HOST}",
    )


@pytest.fixture
def service(registry, record_store, settings, json_transport, opera, mews):
    registry.replace_all([opera, mews])
    transport = json_transport({**OPERA_ROUTES, **MEWS_ROUTES})
    return PMSSyncService(
        registry, record_store=record_store, settings=settings, transport=transport
    )


class TestStorageRecord:
    """Test suite for the persisted record shape."""

    def test_composite_id_and_metadata(self):
        room = Room(id="101", number="101", connection_id="c1")

        stored = storage_record(room, "u1", "2024-01-16T00:00:00+00:00")

        assert stored["id"] == "c1_101"
        assert stored["originalId"] == "101"
        assert stored["connectionId"] == "c1"
        assert stored["userId"] == "u1"
        assert stored["syncedAt"] == "2024-01-16T00:00:00+00:00"
        assert stored["number"] == "101"

    def test_record_without_identifier_is_skipped(self):
        assert storage_record(Room(connection_id="c1"), "u1", "now") is None


class TestFetchConnectionData:
    """Test suite for concurrent resource fetching."""

    @pytest.mark.asyncio
    async def test_fetches_all_resources_and_tags_records(self, service, opera):
        data = await service.fetch_connection_data(opera)

        assert data.counts() == {
            "reservations": 2,
            "guests": 1,
            "rooms": 1,
            "revenue": 1,
            "occupancy": 1,
        }
        assert {record.connection_id for record in data.reservations} == {"conn_opera"}
        assert data.reservations[0].record_key == "conn_opera_R1"
        assert data.revenue[0].total_revenue == 125
        assert data.occupancy[0].occupancy_rate == 40.0

    @pytest.mark.asyncio
    async def test_any_failing_resource_raises_sync_error(self, service, mews):
        with pytest.raises(SyncError) as exc_info:
            await service.fetch_connection_data(mews)

        assert exc_info.value.connection_id == "conn_mews"


class TestSyncConnection:
    """Test suite for the single connection lifecycle."""

    @pytest.mark.asyncio
    async def test_successful_sync(self, service, registry, record_store):
        result = await service.sync_connection("conn_opera")

        assert result.success is True
        assert result.status == "connected"
        assert result.record_counts["reservations"] == 2
        assert result.skipped_records == 1
        assert result.stored_counts["reservations"] == 1

        connection = registry.get("conn_opera")
        assert connection.status == "connected"
        assert connection.last_sync == result.last_sync

        [stored] = await record_store.list_records("reservations")
        assert stored["id"] == "conn_opera_R1"
        assert stored["userId"] == "tester"
        assert stored["status"] == "checked_in"

    @pytest.mark.asyncio
    async def test_status_is_syncing_during_fetch(self, service, registry, opera):
        seen = []

        async def fetch(connection, now=None):
            seen.append(registry.get(connection.id).status)
            return PMSData()

        with patch.object(service, "fetch_connection_data", side_effect=fetch):
            await service.sync_connection("conn_opera")

        assert seen == ["syncing"]

    @pytest.mark.asyncio
    async def test_failed_health_check_marks_error(self, service, registry):
        with pytest.raises(SyncError):
            await service.sync_connection("conn_mews")

        connection = registry.get("conn_mews")
        assert connection.status == "error"
        assert connection.last_sync is not None

    @pytest.mark.asyncio
    async def test_storage_failure_marks_error(self, service, registry, record_store):
        record_store.create_many = AsyncMock(side_effect=StorageError("disk full"))

        with pytest.raises(SyncError, match="disk full"):
            await service.sync_connection("conn_opera")

        assert registry.get("conn_opera").status == "error"

    @pytest.mark.asyncio
    async def test_unsaved_syncing_status_still_ends_in_error(self, service, registry):
        with patch.object(registry.store, "set", side_effect=StorageError("disk full")):
            with pytest.raises(SyncError, match="disk full"):
                await service.sync_connection("conn_opera")

        connection = registry.get("conn_opera")
        assert connection.status == "error"
        assert connection.last_sync is not None

    @pytest.mark.asyncio
    async def test_unsaved_connected_status_marks_error(self, service, registry):
        original_set = registry.store.set

        def refuse_connected(key, value):
            if '"status":"connected"' in value:
                raise StorageError("disk full")
            original_set(key, value)

        with patch.object(registry.store, "set", side_effect=refuse_connected):
            with pytest.raises(SyncError):
                await service.sync_connection("conn_opera")

        assert registry.get("conn_opera").status == "error"
        saved = registry.parse_json(registry.store.get(registry.storage_key))
        assert {conn.id: conn.status for conn in saved}["conn_opera"] == "error"

    @pytest.mark.asyncio
    async def test_persistence_can_be_disabled(self, service, record_store):
        service.settings.persist_synced_records = False

        result = await service.sync_connection("conn_opera")

        assert result.stored_counts == {}
        assert await record_store.list_records("rooms") == []

    @pytest.mark.asyncio
    async def test_unknown_connection(self, service):
        with pytest.raises(ConnectionNotFoundError):
            await service.sync_connection("conn_missing")


class TestSyncAll:
    """Test suite for multi-connection sync."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("parallel", [False, True])
    async def test_one_failure_does_not_abort_others(self, service, registry, parallel):
        aggregate = await service.sync_all(parallel=parallel)

        assert aggregate.synced_connections == ["conn_opera"]
        assert len(aggregate.warnings) == 1
        assert aggregate.warnings[0].startswith("Mews Hotel:")
        assert aggregate.data.counts()["reservations"] == 2
        assert {r.connection_id for r in aggregate.data.rooms} == {"conn_opera"}
        assert aggregate.is_demo is False

        assert registry.get("conn_opera").status == "connected"
        assert registry.get("conn_mews").status == "error"

        failed = next(r for r in aggregate.results if not r.success)
        assert failed.status == "error"
        assert "Health check failed" in failed.error

    @pytest.mark.asyncio
    async def test_subset_of_connections(self, service, registry):
        aggregate = await service.sync_all(["conn_opera"])

        assert [r.connection_id for r in aggregate.results] == ["conn_opera"]
        assert registry.get("conn_mews").status == "disconnected"

    @pytest.mark.asyncio
    async def test_unknown_id_becomes_warning(self, service):
        aggregate = await service.sync_all(["conn_missing", "conn_opera"])

        assert aggregate.synced_connections == ["conn_opera"]
        assert "conn_missing" in aggregate.warnings[0]

    @pytest.mark.asyncio
    async def test_failing_store_never_leaves_connections_syncing(
        self, service, registry
    ):
        with patch.object(registry.store, "set", side_effect=StorageError("disk full")):
            aggregate = await service.sync_all()

        assert len(aggregate.warnings) == 2
        assert {conn.status for conn in registry} == {"error"}
        assert all(result.status == "error" for result in aggregate.results)


class TestDashboardData:
    """Test suite for live aggregation with demo fallback."""

    @pytest.mark.asyncio
    async def test_demo_data_when_nothing_connected(self, service):
        aggregate = await service.get_dashboard_data()

        assert aggregate.is_demo is True
        assert aggregate.data.counts() == {
            "reservations": 5,
            "guests": 5,
            "rooms": 12,
            "revenue": 7,
            "occupancy": 7,
        }

    @pytest.mark.asyncio
    async def test_live_data_from_connected_connections(self, service, registry):
        await registry.update_status("conn_opera", "connected")

        aggregate = await service.get_dashboard_data()

        assert aggregate.is_demo is False
        assert aggregate.warnings == []
        assert aggregate.data.counts()["guests"] == 1

    @pytest.mark.asyncio
    async def test_failed_connection_marked_error_then_demo(self, service, registry):
        await registry.update_status("conn_mews", "connected")

        aggregate = await service.get_dashboard_data()

        assert registry.get("conn_mews").status == "error"
        assert len(aggregate.warnings) == 1
        assert aggregate.is_demo is True

    @pytest.mark.asyncio
    async def test_fallback_can_be_disabled(self, service):
        service.settings.demo_data_fallback = False

        aggregate = await service.get_dashboard_data()

        assert aggregate.is_demo is False
        assert aggregate.data.is_empty()
