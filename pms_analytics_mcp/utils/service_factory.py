"""
Service factory for the PMS Analytics MCP tools.

Builds the process-wide connection registry and sync service once, wired to
file storage under the configured storage directory.
"""

import logging

from pms_analytics_mcp.config.settings import Settings, get_settings
from pms_analytics_mcp.services.registry import ConnectionRegistry
from pms_analytics_mcp.services.storage import (
    FileKeyValueStore,
    JsonLinesRecordStore,
    RecordStore,
)
from pms_analytics_mcp.services.sync import PMSSyncService

logger = logging.getLogger(__name__)

_registry: ConnectionRegistry | None = None
_record_store: RecordStore | None = None
_sync_service: PMSSyncService | None = None


def get_record_store(settings: Settings | None = None) -> RecordStore:
    """Get the record store receiving synced records."""
    global _record_store
    if _record_store is None:
        settings = settings or get_settings()
        _record_store = JsonLinesRecordStore(settings.get_storage_path() / "records")
    return _record_store


def get_connection_registry(settings: Settings | None = None) -> ConnectionRegistry:
    """
    Get the connection registry, loading the stored list on first use.

    Args:
        settings: Optional settings instance

    Returns:
        Shared ConnectionRegistry
    """
    global _registry
    if _registry is None:
        settings = settings or get_settings()
        storage_path = settings.get_storage_path()
        registry = ConnectionRegistry(
            FileKeyValueStore(storage_path),
            user_id=settings.user_id,
            record_store=get_record_store(settings),
        )
        registry.load()
        logger.info(
            "Connection registry initialized",
            extra={"storage_path": str(storage_path), "user_id": settings.user_id},
        )
        _registry = registry
    return _registry


def get_sync_service(settings: Settings | None = None) -> PMSSyncService:
    """Get the sync service bound to the shared registry and record store."""
    global _sync_service
    if _sync_service is None:
        settings = settings or get_settings()
        _sync_service = PMSSyncService(
            get_connection_registry(settings),
            record_store=get_record_store(settings),
            settings=settings,
        )
    return _sync_service


def set_services(
    registry: ConnectionRegistry,
    sync_service: PMSSyncService,
    record_store: RecordStore | None = None,
) -> None:
    """Install prebuilt services (tests, embedding applications)."""
    global _registry, _sync_service, _record_store
    _registry = registry
    _sync_service = sync_service
    _record_store = record_store


def reset_services() -> None:
    """Drop the shared services so the next call rebuilds them."""
    global _registry, _sync_service, _record_store
    _registry = None
    _sync_service = None
    _record_store = None
