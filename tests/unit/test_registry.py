"""
Unit tests for ConnectionRegistry.

Covers creation rules, persistence round-trips and in-place status updates.
"""

import json
from unittest.mock import patch

import pytest

from pms_analytics_mcp.models.common import ConnectionStatus
from pms_analytics_mcp.services.registry import ConnectionRegistry
from pms_analytics_mcp.services.storage import MemoryKeyValueStore
from pms_analytics_mcp.utils.exceptions import (
    ConnectionNotFoundError,
    StorageError,
    ValidationError,
)


class TestConnectionRegistry:
    """Test suite for ConnectionRegistry functionality."""

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_disconnected_status(self, registry):
        connection = await registry.add(
            {
                "name": "  Downtown  ",
                "type": "mews",
                "apiEndpoint": "https://api.mews.com/",
                "authType": "oauth",
                "status": "connected",
            }
        )

        assert connection.id.startswith("conn_")
        assert connection.name == "Downtown"
        assert connection.status == "disconnected"
        assert connection.last_sync is None
        assert connection.api_endpoint == "https://api.mews.com"
        assert connection.auth_type == "oauth"
        assert connection.id in registry

    @pytest.mark.asyncio
    async def test_add_accepts_snake_case_fields(self, registry):
        connection = await registry.add(
            {"name": "Hotel", "api_endpoint": "http://pms.local", "sync_frequency": "daily"}
        )

        assert connection.api_endpoint == "http://pms.local"
        assert connection.sync_frequency == "daily"
        assert connection.type == "custom"

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, registry):
        first = await registry.add({"name": "A", "apiEndpoint": "https://a.example.com"})
        second = await registry.add({"name": "A", "apiEndpoint": "https://a.example.com"})

        assert first.id != second.id
        assert len(registry) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            {"name": "No endpoint"},
            {"name": "Blank", "apiEndpoint": "   "},
            {"apiEndpoint": "https://a.example.com"},
            {"name": "", "apiEndpoint": "https://a.example.com"},
            {"name": "Relative", "apiEndpoint": "/api"},
            {"name": "Bad vendor", "apiEndpoint": "https://a.example.com", "type": "acme"},
            {"name": "Bad auth", "apiEndpoint": "https://a.example.com", "authType": "jwt"},
        ],
    )
    async def test_add_rejects_invalid_input_without_state_change(self, registry, data):
        with pytest.raises(ValidationError):
            await registry.add(data)

        assert len(registry) == 0
        assert registry.store.get(registry.storage_key) is None

    @pytest.mark.asyncio
    async def test_add_rolls_back_when_store_fails(self, registry):
        with patch.object(registry.store, "set", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                await registry.add({"name": "A", "apiEndpoint": "https://a.example.com"})

        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_persistence_round_trip(self, registry):
        added = await registry.add(
            {"name": "A", "type": "opera", "apiEndpoint": "https://a.example.com"}
        )
        await registry.update_status(added.id, "connected", touch_last_sync=True)

        stored = json.loads(registry.store.get("pms_connections_tester"))
        assert stored[0]["apiEndpoint"] == "https://a.example.com"
        assert stored[0]["status"] == "connected"
        assert stored[0]["lastSync"] is not None

        reloaded = ConnectionRegistry(registry.store, user_id="tester")
        connections = reloaded.load()

        assert connections == registry.list_connections()

    def test_load_missing_key_gives_empty_list(self):
        registry = ConnectionRegistry(MemoryKeyValueStore(), user_id="nobody")

        assert registry.load() == []

    def test_load_invalid_payload_raises_storage_error(self):
        store = MemoryKeyValueStore({"pms_connections_u": '[{"id": 1}]'})

        with pytest.raises(StorageError):
            ConnectionRegistry(store, user_id="u").load()

    @pytest.mark.asyncio
    async def test_dump_and_load_json(self, registry, make_connection):
        registry.replace_all([make_connection(id="c1"), make_connection(id="c2")])
        payload = registry.dump_json()

        other = ConnectionRegistry(MemoryKeyValueStore(), user_id="other")
        other.load_json(payload)

        assert [conn.id for conn in other] == ["c1", "c2"]
        assert other.store.get("pms_connections_other") == payload

    def test_replace_all_rejects_duplicate_ids(self, registry, make_connection):
        with pytest.raises(ValidationError):
            registry.replace_all([make_connection(id="c1"), make_connection(id="c1")])

    @pytest.mark.asyncio
    async def test_remove_unknown_id_is_a_no_op(self, registry, make_connection):
        registry.replace_all([make_connection(id="c1")])

        assert await registry.remove("missing") is False
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_remove_keeps_records_by_default(
        self, registry, record_store, make_connection
    ):
        registry.replace_all([make_connection(id="c1")])
        await record_store.create_many("rooms", [{"id": "c1_1", "connectionId": "c1"}])

        assert await registry.remove("c1") is True

        assert "c1" not in registry
        assert len(await record_store.list_records("rooms")) == 1

    @pytest.mark.asyncio
    async def test_remove_with_purge_deletes_records(
        self, registry, record_store, make_connection
    ):
        registry.replace_all([make_connection(id="c1")])
        await record_store.create_many("rooms", [{"id": "c1_1", "connectionId": "c1"}])

        await registry.remove("c1", purge_records=True)

        assert await record_store.list_records("rooms") == []

    @pytest.mark.asyncio
    async def test_update_status_replaces_only_that_connection(
        self, registry, make_connection
    ):
        registry.replace_all(
            [
                make_connection(id="c1", status="disconnected"),
                make_connection(id="c2", status="disconnected"),
            ]
        )

        updated = await registry.update_status("c1", ConnectionStatus.SYNCING)

        assert updated.status == "syncing"
        assert updated.last_sync is None
        assert registry.get("c2").status == "disconnected"
        assert [conn.id for conn in registry] == ["c1", "c2"]

    @pytest.mark.asyncio
    async def test_update_status_unknown_connection(self, registry):
        with pytest.raises(ConnectionNotFoundError):
            await registry.update_status("missing", "error")

    @pytest.mark.asyncio
    async def test_update_status_rolls_back_when_store_fails(
        self, registry, make_connection
    ):
        registry.replace_all([make_connection(id="c1", status="disconnected")])

        with patch.object(registry.store, "set", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                await registry.update_status("c1", ConnectionStatus.SYNCING)

        assert registry.get("c1").status == "disconnected"

    @pytest.mark.asyncio
    async def test_update_status_can_keep_status_when_store_fails(
        self, registry, make_connection
    ):
        registry.replace_all([make_connection(id="c1", status="syncing")])

        with patch.object(registry.store, "set", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                await registry.update_status(
                    "c1", ConnectionStatus.ERROR, keep_on_failure=True
                )

        assert registry.get("c1").status == "error"

    @pytest.mark.asyncio
    async def test_remove_restores_connection_when_store_fails(
        self, registry, make_connection
    ):
        registry.replace_all([make_connection(id="c1"), make_connection(id="c2")])

        with patch.object(registry.store, "set", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                await registry.remove("c1")

        assert [conn.id for conn in registry] == ["c1", "c2"]

    def test_list_filters_by_status(self, registry, make_connection):
        registry.replace_all(
            [
                make_connection(id="c1", status="connected"),
                make_connection(id="c2", status="error"),
            ]
        )

        assert [conn.id for conn in registry.connected()] == ["c1"]
        assert [conn.id for conn in registry.list_connections("error")] == ["c2"]
        assert len(registry.list_connections()) == 2
