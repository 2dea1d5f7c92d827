"""Shared fixtures for the PMS Analytics MCP test suite."""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from pms_analytics_mcp.config.settings import Settings
from pms_analytics_mcp.models.connection import Connection
from pms_analytics_mcp.services.registry import ConnectionRegistry
from pms_analytics_mcp.services.storage import MemoryKeyValueStore, MemoryRecordStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and the user's home."""
    return Settings(
        _env_file=None,
        storage_dir=str(tmp_path / "storage"),
        request_timeout=5.0,
    )


@pytest.fixture
def make_connection() -> Callable[..., Connection]:
    """Factory for connections with sensible defaults."""

    def _make(**overrides: Any) -> Connection:
        fields = {
            "id": "conn_a",
            "name": "Main Hotel",
            "type": "opera",
            "status": "connected",
            "apiEndpoint": "https://opera.example.com/api",
            "authType": "api_key",
            "syncFrequency": "hourly",
        }
        fields.update(overrides)
        return Connection.model_validate(fields)

    return _make


@pytest.fixture
def record_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def registry(record_store: MemoryRecordStore) -> ConnectionRegistry:
    return ConnectionRegistry(
        MemoryKeyValueStore(), user_id="tester", record_store=record_store
    )


@pytest.fixture
def json_transport() -> Callable[..., httpx.MockTransport]:
    """
    Factory for mock transports answering by (host, path).

    A route value is either a JSON payload (answered with 200) or an
    ``int`` status code answered with an empty body; unknown routes answer 404.
    """
    return _json_transport


def _json_transport(
    routes: dict[tuple[str, str], Any], requests: list[httpx.Request] | None = None
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        answer = routes.get((request.url.host, request.url.path))
        if answer is None:
            return httpx.Response(404, json={"message": "not found"})
        if isinstance(answer, int):
            return httpx.Response(answer)
        return httpx.Response(200, json=answer)

    return httpx.MockTransport(handler)
