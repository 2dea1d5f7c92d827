"""
Connection registry.

Owns the list of configured PMS connections for one user. Every mutation
goes through a method here (add, remove, update_status), each entry is
replaced in place by id under a lock, and the list is written back to the
key-value store after every change.
"""

import asyncio
import json
import logging
import uuid
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from pms_analytics_mcp.models.common import ConnectionStatus
from pms_analytics_mcp.models.connection import Connection
from pms_analytics_mcp.services.storage import (
    KeyValueStore,
    RecordStore,
    connections_key,
)
from pms_analytics_mcp.utils.exceptions import (
    ConnectionNotFoundError,
    StorageError,
    ValidationError,
)
from pms_analytics_mcp.utils.validators import (
    validate_endpoint_url,
    validate_required_fields,
)

logger = logging.getLogger(__name__)

_connection_list = TypeAdapter(list[Connection])

# snake_case input keys accepted alongside the stored aliases
_FIELD_SYNONYMS = {
    "api_endpoint": "apiEndpoint",
    "auth_type": "authType",
    "sync_frequency": "syncFrequency",
    "last_sync": "lastSync",
}


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _new_connection_id() -> str:
    return f"conn_{uuid.uuid4().hex[:12]}"


class ConnectionRegistry:
    """In-memory registry of PMS connections backed by a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        user_id: str = "local",
        record_store: RecordStore | None = None,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.record_store = record_store
        self._connections: dict[str, Connection] = {}
        self._lock = asyncio.Lock()

    @property
    def storage_key(self) -> str:
        return connections_key(self.user_id)

    # Persistence

    @staticmethod
    def parse_json(payload: str) -> list[Connection]:
        """Parse a serialized connection list."""
        try:
            return _connection_list.validate_json(payload)
        except PydanticValidationError as e:
            raise StorageError(f"Stored connection list is invalid: {e}") from e

    def dump_json(self) -> str:
        """Serialize the connection list by alias."""
        payload = _connection_list.dump_json(self.list_connections(), by_alias=True)
        return payload.decode("utf-8")

    def load(self) -> list[Connection]:
        """
        Load the connection list from the store.

        Returns:
            Loaded connections (empty when nothing was stored yet)

        Raises:
            StorageError: If the stored list cannot be read or parsed
        """
        payload = self.store.get(self.storage_key)
        connections = self.parse_json(payload) if payload else []
        self._connections = {conn.id: conn for conn in connections}
        logger.info(
            f"Loaded {len(connections)} PMS connections",
            extra={"user_id": self.user_id},
        )
        return connections

    def load_json(self, payload: str) -> list[Connection]:
        """Replace the registry with a serialized list and persist it."""
        connections = self.parse_json(payload)
        self.replace_all(connections)
        return connections

    def _save(self) -> None:
        self.store.set(self.storage_key, self.dump_json())

    async def _persist(self) -> None:
        payload = self.dump_json()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.store.set, self.storage_key, payload)

    # Queries

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def find(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def get(self, connection_id: str) -> Connection:
        """Connection by id; raises ConnectionNotFoundError when unknown."""
        connection = self._connections.get(connection_id)
        if connection is None:
            raise ConnectionNotFoundError(connection_id)
        return connection

    def list_connections(
        self, status: ConnectionStatus | str | None = None
    ) -> list[Connection]:
        connections = list(self._connections.values())
        if status is None:
            return connections
        wanted = ConnectionStatus(status).value
        return [conn for conn in connections if conn.status == wanted]

    def connected(self) -> list[Connection]:
        return self.list_connections(ConnectionStatus.CONNECTED)

    # Mutations

    async def add(self, data: dict[str, Any]) -> Connection:
        """
        Register a new connection.

        Args:
            data: Connection fields; ``name`` and ``apiEndpoint`` (or
                ``api_endpoint``) are required

        Returns:
            The created connection with a fresh id and ``disconnected`` status

        Raises:
            ValidationError: If required fields are missing or invalid
        """
        fields = {_FIELD_SYNONYMS.get(key, key): value for key, value in data.items()}
        validate_required_fields(fields, ["name", "apiEndpoint"])
        fields["apiEndpoint"] = validate_endpoint_url(str(fields["apiEndpoint"]))
        fields["name"] = str(fields["name"]).strip()

        async with self._lock:
            connection_id = _new_connection_id()
            while connection_id in self._connections:
                connection_id = _new_connection_id()

            fields.update(
                id=connection_id,
                status=ConnectionStatus.DISCONNECTED.value,
                lastSync=None,
            )
            try:
                connection = Connection.model_validate(fields)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid connection: {e.errors()[0].get('msg', e)}",
                    details={"errors": json.loads(e.json())},
                ) from e

            self._connections[connection.id] = connection
            try:
                await self._persist()
            except StorageError:
                del self._connections[connection.id]
                raise

        logger.info(
            f"Added PMS connection {connection.name}",
            extra={"connection_id": connection.id, "pms_type": connection.type},
        )
        return connection

    async def remove(self, connection_id: str, purge_records: bool = False) -> bool:
        """
        Remove a connection; unknown ids are a no-op.

        Args:
            connection_id: Connection to remove
            purge_records: Also delete the records previously synced from it

        Returns:
            True when a connection was removed
        """
        async with self._lock:
            previous = dict(self._connections)
            removed = self._connections.pop(connection_id, None)
            if removed is not None:
                try:
                    await self._persist()
                except StorageError:
                    self._connections = previous
                    raise

        if removed is None:
            logger.debug(f"Remove ignored, unknown connection {connection_id}")
            return False

        logger.info(
            f"Removed PMS connection {removed.name}",
            extra={"connection_id": connection_id},
        )

        if purge_records and self.record_store is not None:
            deleted = await self.record_store.delete_connection_records(connection_id)
            logger.info(
                f"Purged {deleted} synced records",
                extra={"connection_id": connection_id},
            )
        return True

    async def update_status(
        self,
        connection_id: str,
        status: ConnectionStatus | str,
        touch_last_sync: bool = False,
        keep_on_failure: bool = False,
    ) -> Connection:
        """
        Replace one connection's status in place.

        Args:
            connection_id: Connection to update
            status: New lifecycle status
            touch_last_sync: Also set ``last_sync`` to now
            keep_on_failure: Keep the new status in memory even when it
                cannot be saved (the StorageError is still raised)

        Raises:
            ConnectionNotFoundError: If the connection does not exist
            StorageError: If the updated list cannot be saved
        """
        async with self._lock:
            current = self.get(connection_id)
            update: dict[str, Any] = {"status": ConnectionStatus(status).value}
            if touch_last_sync:
                update["last_sync"] = _now()
            updated = current.model_copy(update=update)
            self._connections[connection_id] = updated
            try:
                await self._persist()
            except StorageError:
                if not keep_on_failure:
                    self._connections[connection_id] = current
                raise

        logger.debug(
            f"Connection {connection_id} status {current.status} -> {updated.status}",
            extra={"connection_id": connection_id},
        )
        return updated

    def replace_all(self, connections: list[Connection]) -> None:
        """Replace the whole list (used when importing a saved list)."""
        ids = [conn.id for conn in connections]
        if len(ids) != len(set(ids)):
            raise ValidationError("Connection ids must be unique")
        previous = self._connections
        self._connections = {conn.id: conn for conn in connections}
        try:
            self._save()
        except StorageError:
            self._connections = previous
            raise
