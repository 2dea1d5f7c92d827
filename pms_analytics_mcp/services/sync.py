"""
Sync orchestrator.

Drives one connection through its sync lifecycle (syncing, health check,
concurrent fetch of the five resources, batched persistence, connected or
error) and aggregates several connections into one dataset where a single
connection failing never aborts the others.
"""

import asyncio
import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import Field

from pms_analytics_mcp.adapters.registry import AdapterRegistry, get_adapter_registry
from pms_analytics_mcp.auth.headers import SecretResolver
from pms_analytics_mcp.clients.base_client import PMSApiClient
from pms_analytics_mcp.config.settings import Settings
from pms_analytics_mcp.models.common import (
    ConnectionStatus,
    PMSBaseModel,
    ResourceType,
)
from pms_analytics_mcp.models.connection import Connection
from pms_analytics_mcp.models.records import CanonicalRecord, PMSData
from pms_analytics_mcp.services.demo_data import build_demo_data
from pms_analytics_mcp.services.registry import ConnectionRegistry
from pms_analytics_mcp.services.storage import RecordStore
from pms_analytics_mcp.utils.exceptions import (
    PMSAnalyticsError,
    StorageError,
    SyncError,
)

logger = logging.getLogger(__name__)


class SyncResult(PMSBaseModel):
    """Outcome of syncing one connection."""

    connection_id: str
    connection_name: str | None = None
    success: bool
    status: ConnectionStatus
    record_counts: dict[str, int] = Field(default_factory=dict)
    stored_counts: dict[str, int] = Field(default_factory=dict)
    skipped_records: int = 0
    error: str | None = None
    last_sync: str | None = None
    duration_ms: float | None = None


class AggregateResult(PMSBaseModel):
    """Merged data of several connections plus per-connection warnings."""

    data: PMSData = Field(default_factory=PMSData)
    warnings: list[str] = Field(default_factory=list)
    results: list[SyncResult] = Field(default_factory=list)
    is_demo: bool = False

    @property
    def synced_connections(self) -> list[str]:
        return [result.connection_id for result in self.results if result.success]


def storage_record(
    record: CanonicalRecord, user_id: str, synced_at: str
) -> dict[str, Any] | None:
    """
    Shape a normalized record for the record store.

    Returns:
        The record by alias with the composite ``id`` and sync metadata, or
        None when the record carries no identifier
    """
    key = record.record_key
    if key is None or not record.connection_id:
        return None
    stored = record.model_dump(by_alias=True)
    stored.update(
        id=key,
        originalId=record.key_value(),
        connectionId=record.connection_id,
        userId=user_id,
        syncedAt=synced_at,
    )
    return stored


class PMSSyncService:
    """Synchronizes registered PMS connections."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        record_store: RecordStore | None = None,
        settings: Settings | None = None,
        adapters: AdapterRegistry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        secret_resolver: SecretResolver | None = None,
    ) -> None:
        self.registry = registry
        self.record_store = record_store
        self.settings = settings or Settings()
        self.adapters = adapters or get_adapter_registry()
        self.transport = transport
        self.secret_resolver = secret_resolver

    def _client(self, connection: Connection) -> PMSApiClient:
        return PMSApiClient(
            connection,
            settings=self.settings,
            secret_resolver=self.secret_resolver,
            transport=self.transport,
        )

    async def test_connection(self, connection: Connection) -> bool:
        """Health check a connection; False when it is unhealthy or unreachable."""
        async with self._client(connection) as client:
            healthy = await client.check_health()
        logger.info(
            f"Connection test for {connection.name}: {'ok' if healthy else 'failed'}",
            extra={"connection_id": connection.id, "healthy": healthy},
        )
        return healthy

    async def fetch_connection_data(
        self, connection: Connection, now: datetime | None = None
    ) -> PMSData:
        """
        Fetch and normalize all five resources of a connection concurrently.

        Args:
            connection: Connection to fetch from
            now: Reference time for the date window (defaults to now)

        Returns:
            Normalized data tagged with the connection id

        Raises:
            SyncError: If any resource request fails
        """
        adapter = self.adapters.get(connection.type)
        resources = list(ResourceType)

        async with self._client(connection) as client:
            results = await asyncio.gather(
                *(client.fetch_resource(r, adapter, now=now) for r in resources),
                return_exceptions=True,
            )

        for resource, result in zip(resources, results, strict=True):
            if isinstance(result, Exception):
                message = (
                    result.message
                    if isinstance(result, PMSAnalyticsError)
                    else str(result)
                )
                raise SyncError(
                    f"Failed to fetch {resource.value} from {connection.name}: "
                    f"{message}",
                    connection_id=connection.id,
                    details={
                        "resource": resource.value,
                        "error_type": type(result).__name__,
                    },
                ) from result
            if isinstance(result, BaseException):
                raise result

        data = PMSData(
            **{
                resource.value: records
                for resource, records in zip(resources, results, strict=True)
            }
        )
        return data.tag(connection.id)

    async def persist(self, data: PMSData) -> tuple[dict[str, int], int]:
        """
        Write every record kind to the record store in one batch each.

        Returns:
            Stored counts per kind and the number of records skipped for
            lacking an identifier

        Raises:
            StorageError: If a batch cannot be written
        """
        if self.record_store is None or not self.settings.persist_synced_records:
            return {}, 0

        synced_at = datetime.now(UTC).isoformat()
        stored_counts: dict[str, int] = {}
        skipped = 0

        for resource in ResourceType:
            batch = []
            for record in data.records(resource):
                stored = storage_record(record, self.registry.user_id, synced_at)
                if stored is None:
                    skipped += 1
                    continue
                batch.append(stored)

            if batch:
                stored_counts[resource.value] = await self.record_store.create_many(
                    resource.value, batch
                )
            else:
                stored_counts[resource.value] = 0

        if skipped:
            logger.warning(
                f"Skipped {skipped} records without an identifier",
                extra={"skipped": skipped},
            )
        return stored_counts, skipped

    async def sync_connection(
        self, connection_id: str, now: datetime | None = None
    ) -> SyncResult:
        """
        Run the full sync lifecycle for one connection.

        The connection is marked ``syncing``, health checked, fetched,
        persisted and finally marked ``connected``. Any failure marks it
        ``error``; both outcomes refresh ``last_sync``.

        Raises:
            ConnectionNotFoundError: If the connection does not exist
            SyncError: If the health check, fetch or persistence fails
        """
        result, _ = await self._run_sync(connection_id, now)
        return result

    async def _run_sync(
        self, connection_id: str, now: datetime | None
    ) -> tuple[SyncResult, PMSData]:
        connection = self.registry.get(connection_id)
        start = time.time()

        try:
            await self.registry.update_status(connection_id, ConnectionStatus.SYNCING)
            logger.info(
                f"Syncing {connection.name}",
                extra={"connection_id": connection_id, "pms_type": connection.type},
            )
            if not await self.test_connection(connection):
                raise SyncError(
                    f"Health check failed for {connection.name}",
                    connection_id=connection_id,
                )
            data = await self.fetch_connection_data(connection, now=now)
            try:
                stored_counts, skipped = await self.persist(data)
            except StorageError as e:
                raise SyncError(
                    f"Failed to store records of {connection.name}: {e.message}",
                    connection_id=connection_id,
                    details=e.details,
                ) from e
            updated = await self.registry.update_status(
                connection_id, ConnectionStatus.CONNECTED, touch_last_sync=True
            )
        except PMSAnalyticsError as e:
            await self._mark_error(connection_id)
            logger.error(
                f"Sync failed for {connection.name}: {e.message}",
                extra={"connection_id": connection_id, "error_details": e.details},
            )
            if isinstance(e, SyncError):
                raise
            raise SyncError(
                f"Sync failed for {connection.name}: {e.message}",
                connection_id=connection_id,
                details=e.details,
            ) from e

        duration_ms = (time.time() - start) * 1000
        counts = data.counts()
        logger.info(
            f"Synced {connection.name}",
            extra={
                "connection_id": connection_id,
                "record_counts": counts,
                "duration_ms": duration_ms,
            },
        )

        result = SyncResult(
            connection_id=connection_id,
            connection_name=connection.name,
            success=True,
            status=ConnectionStatus.CONNECTED,
            record_counts=counts,
            stored_counts=stored_counts,
            skipped_records=skipped,
            last_sync=updated.last_sync,
            duration_ms=duration_ms,
        )
        return result, data

    async def _mark_error(self, connection_id: str) -> None:
        try:
            await self.registry.update_status(
                connection_id,
                ConnectionStatus.ERROR,
                touch_last_sync=True,
                keep_on_failure=True,
            )
        except StorageError as e:
            logger.error(
                f"Could not save error status: {e.message}",
                extra={"connection_id": connection_id},
            )

    async def _sync_one(
        self, connection_id: str, now: datetime | None
    ) -> tuple[SyncResult, PMSData | None]:
        connection = self.registry.find(connection_id)
        try:
            return await self._run_sync(connection_id, now)
        except PMSAnalyticsError as e:
            current = self.registry.find(connection_id)
            result = SyncResult(
                connection_id=connection_id,
                connection_name=connection.name if connection else None,
                success=False,
                status=current.status if current else ConnectionStatus.ERROR,
                error=e.message,
                last_sync=current.last_sync if current else None,
            )
            return result, None

    async def sync_all(
        self,
        connection_ids: list[str] | None = None,
        parallel: bool | None = None,
        now: datetime | None = None,
    ) -> AggregateResult:
        """
        Sync several connections, continuing past individual failures.

        Args:
            connection_ids: Connections to sync (defaults to all registered)
            parallel: Sync concurrently (defaults to the configured policy)
            now: Reference time for the date window

        Returns:
            Merged data of the successful connections with one warning per
            failed connection
        """
        ids = (
            connection_ids
            if connection_ids is not None
            else [conn.id for conn in self.registry]
        )
        if parallel is None:
            parallel = self.settings.parallel_connection_sync

        if parallel:
            outcomes = await asyncio.gather(*(self._sync_one(cid, now) for cid in ids))
        else:
            outcomes = [await self._sync_one(cid, now) for cid in ids]

        aggregate = AggregateResult()
        collected = []
        for result, data in outcomes:
            aggregate.results.append(result)
            if result.success and data is not None:
                collected.append(data)
            else:
                name = result.connection_name or result.connection_id
                aggregate.warnings.append(f"{name}: {result.error}")

        aggregate.data = PMSData().merge(*collected)
        logger.info(
            f"Synced {len(collected)} of {len(ids)} connections",
            extra={"warnings": len(aggregate.warnings), "parallel": parallel},
        )
        return aggregate

    async def get_dashboard_data(self, now: datetime | None = None) -> AggregateResult:
        """
        Fetch live data from every connected connection.

        Failed connections are marked ``error`` and reported as warnings.
        When nothing could be fetched the demonstration dataset is returned
        with ``is_demo`` set.
        """
        connections = self.registry.connected()
        aggregate = AggregateResult()
        collected = []

        for connection in connections:
            try:
                collected.append(await self.fetch_connection_data(connection, now=now))
            except SyncError as e:
                await self._mark_error(connection.id)
                aggregate.warnings.append(f"{connection.name}: {e.message}")
                logger.warning(
                    f"Skipping {connection.name}: {e.message}",
                    extra={"connection_id": connection.id},
                )

        if collected:
            aggregate.data = PMSData().merge(*collected)
        elif self.settings.demo_data_fallback:
            logger.info(
                "No PMS data available, serving demonstration data",
                extra={"connected": len(connections)},
            )
            aggregate.data = build_demo_data()
            aggregate.is_demo = True
        return aggregate
