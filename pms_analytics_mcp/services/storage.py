"""
Local storage for connection lists and synced records.

Two collaborators live here:

* a per-user key-value store holding the JSON-serialized connection list
  under ``pms_connections_{userId}``;
* an append-only record store receiving normalized records in one batch per
  record kind. A batch is checked completely before anything is written, so
  it either lands whole or not at all.
"""

import asyncio
import json
import logging
import os
import re
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Any, Protocol

from pms_analytics_mcp.models.common import ResourceType
from pms_analytics_mcp.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

RECORD_KINDS = frozenset(resource.value for resource in ResourceType)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.\-]")


def connections_key(user_id: str) -> str:
    """Storage key of a user's connection list."""
    return f"pms_connections_{user_id}"


class KeyValueStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileKeyValueStore:
    """Key-value store keeping one JSON file per key inside a directory."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file then rename so readers never see
            # a half-written list
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete key {key}: {e}") from e


class RecordStore(Protocol):
    """Append-only store for synced records."""

    async def create_many(self, kind: str, records: list[dict[str, Any]]) -> int: ...

    async def delete_connection_records(self, connection_id: str) -> int: ...

    async def list_records(
        self, kind: str, connection_id: str | None = None
    ) -> list[dict[str, Any]]: ...


def _check_batch(kind: str, records: list[dict[str, Any]]) -> None:
    if kind not in RECORD_KINDS:
        raise StorageError(
            f"Unknown record kind '{kind}'", details={"kind": kind}
        )
    for index, record in enumerate(records):
        if not isinstance(record, dict) or not record.get("id"):
            raise StorageError(
                f"Record {index} of {kind} batch has no id",
                details={"kind": kind, "index": index},
            )
        if not record.get("connectionId"):
            raise StorageError(
                f"Record {index} of {kind} batch has no connectionId",
                details={"kind": kind, "index": index},
            )


class MemoryRecordStore:
    """Record store kept in process memory."""

    def __init__(self) -> None:
        self._records: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def create_many(self, kind: str, records: list[dict[str, Any]]) -> int:
        _check_batch(kind, records)
        async with self._lock:
            self._records[kind].extend(dict(record) for record in records)
        return len(records)

    async def delete_connection_records(self, connection_id: str) -> int:
        removed = 0
        async with self._lock:
            for kind, records in self._records.items():
                kept = [r for r in records if r.get("connectionId") != connection_id]
                removed += len(records) - len(kept)
                self._records[kind] = kept
        return removed

    async def list_records(
        self, kind: str, connection_id: str | None = None
    ) -> list[dict[str, Any]]:
        records = self._records.get(kind, [])
        if connection_id is None:
            return [dict(r) for r in records]
        return [dict(r) for r in records if r.get("connectionId") == connection_id]


class JsonLinesRecordStore:
    """
    Record store appending JSON lines to one file per record kind.

    Each batch is serialized in full before the file is opened and written
    with a single write call. File access runs in the default executor so
    the event loop is never blocked on disk.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self._lock = asyncio.Lock()

    def _path(self, kind: str) -> Path:
        return self.directory / f"{kind}.jsonl"

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _append(self, kind: str, payload: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with self._path(kind).open("a", encoding="utf-8") as handle:
                handle.write(payload)
        except OSError as e:
            raise StorageError(f"Failed to append {kind} batch: {e}") from e

    def _read(self, kind: str) -> list[dict[str, Any]]:
        path = self._path(kind)
        if not path.exists():
            return []
        records = []
        with path.open(encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(
                        f"Skipping corrupt line {line_number} in {path}",
                        extra={"kind": kind},
                    )
        return records

    def _purge(self, connection_id: str) -> int:
        removed = 0
        for kind in RECORD_KINDS:
            records = self._read(kind)
            kept = [r for r in records if r.get("connectionId") != connection_id]
            if len(kept) == len(records):
                continue
            removed += len(records) - len(kept)
            try:
                self._path(kind).write_text(
                    "".join(
                        json.dumps(r, default=str, sort_keys=True) + "\n" for r in kept
                    ),
                    encoding="utf-8",
                )
            except OSError as e:
                raise StorageError(f"Failed to rewrite {kind} records: {e}") from e
        return removed

    async def create_many(self, kind: str, records: list[dict[str, Any]]) -> int:
        _check_batch(kind, records)
        if not records:
            return 0
        try:
            payload = "".join(
                json.dumps(record, default=str, sort_keys=True) + "\n"
                for record in records
            )
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize {kind} batch: {e}") from e

        async with self._lock:
            await self._run(self._append, kind, payload)

        logger.debug(
            f"Stored {len(records)} {kind} records",
            extra={"kind": kind, "path": str(self._path(kind))},
        )
        return len(records)

    async def delete_connection_records(self, connection_id: str) -> int:
        async with self._lock:
            return await self._run(self._purge, connection_id)

    async def list_records(
        self, kind: str, connection_id: str | None = None
    ) -> list[dict[str, Any]]:
        records = await self._run(self._read, kind)
        if connection_id is None:
            return records
        return [r for r in records if r.get("connectionId") == connection_id]
