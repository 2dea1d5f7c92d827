"""
HTTP client for PMS vendor APIs.

Provides authentication headers, timeout handling, request/response logging
with sensitive-value masking and error mapping for one PMS connection.
Failed requests are not retried: the sync orchestrator skips the connection
and carries on.
"""

import asyncio
import json
import logging
import time
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel

from pms_analytics_mcp.adapters.base import VendorAdapter
from pms_analytics_mcp.adapters.endpoints import HEALTH_ENDPOINT, get_resource_params
from pms_analytics_mcp.auth.headers import (
    SecretResolver,
    build_auth_headers,
    resolve_placeholders,
)
from pms_analytics_mcp.config.settings import Settings
from pms_analytics_mcp.models.common import ResourceType
from pms_analytics_mcp.models.connection import Connection
from pms_analytics_mcp.models.records import CanonicalRecord
from pms_analytics_mcp.utils.exceptions import (
    APIError,
    AuthenticationError,
    PMSAnalyticsError,
    ResourceNotFoundError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class APIResponse(BaseModel):
    """Standard API response model."""

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None
    duration_ms: float | None = None


class DataTransformer:
    """Utility class for request/response data transformation."""

    SENSITIVE_FIELDS = frozenset(
        {
            "password",
            "secret",
            "token",
            "authorization",
            "api_key",
            "apikey",
            "credit_card",
            "phone",
            "email",
        }
    )

    @classmethod
    def mask_sensitive_data(
        cls, data: Any, sensitive_fields: set | frozenset | None = None
    ) -> Any:
        """Mask sensitive data in logs and responses."""
        if sensitive_fields is None:
            sensitive_fields = cls.SENSITIVE_FIELDS

        def _mask_recursive(obj: Any) -> Any:
            if isinstance(obj, dict):
                masked = {}
                for key, value in obj.items():
                    key_lower = str(key).lower()
                    if any(
                        sensitive_field in key_lower
                        for sensitive_field in sensitive_fields
                    ):
                        masked[key] = "***MASKED***"
                    else:
                        masked[key] = _mask_recursive(value)
                return masked
            elif isinstance(obj, list):
                return [_mask_recursive(item) for item in obj]
            else:
                return obj

        return _mask_recursive(data)


class PMSApiClient:
    """
    Async client bound to one PMS connection.

    Features:
    - Placeholder Authorization headers, optionally resolved through an
      external secret resolver right before dispatch
    - One timeout bound shared by health checks and resource fetches
    - Error mapping to the PMS Analytics exception hierarchy
    - Request/response logging with masked credentials
    - Async context management for proper resource cleanup
    """

    def __init__(
        self,
        connection: Connection,
        settings: Settings | None = None,
        secret_resolver: SecretResolver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            connection: Connection whose endpoint and auth type are used
            settings: Optional settings instance
            secret_resolver: Resolves ``{{name}}`` header placeholders
            transport: Custom httpx transport (tests, proxies)
        """
        self.connection = connection
        self.settings = settings or Settings()
        self.secret_resolver = secret_resolver
        self._transport = transport
        self._session: httpx.AsyncClient | None = None
        self._session_lock = asyncio.Lock()
        self._data_transformer = DataTransformer()
        self._timeout_config = httpx.Timeout(self.settings.request_timeout)

    async def __aenter__(self) -> "PMSApiClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is initialized with proper configuration."""
        if self._session is None:
            async with self._session_lock:
                if self._session is None:  # Double-check pattern
                    self._session = httpx.AsyncClient(
                        timeout=self._timeout_config,
                        transport=self._transport,
                        follow_redirects=True,
                        headers={"User-Agent": self.settings.user_agent},
                    )
                    logger.debug(
                        "HTTP session initialized",
                        extra={
                            "connection_id": self.connection.id,
                            "timeout": self.settings.request_timeout,
                        },
                    )

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session:
            try:
                await self._session.aclose()
                logger.debug("HTTP session closed successfully")
            except Exception as e:
                logger.warning(f"Error closing HTTP session: {e}")
            finally:
                self._session = None

    @property
    def base_url(self) -> str:
        """Get base API URL of the connection."""
        return self.connection.base_url

    def build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def _log_request(
        self, method: str, url: str, params: dict | None, headers: dict
    ) -> None:
        """Log outgoing request details."""
        logger.info(
            f"API Request: {method} {url}",
            extra={
                "method": method,
                "url": url,
                "connection_id": self.connection.id,
                "pms_type": self.connection.type,
                "params": self._data_transformer.mask_sensitive_data(params or {}),
                "headers": self._data_transformer.mask_sensitive_data(headers),
            },
        )

    async def _log_response(
        self, method: str, url: str, response: httpx.Response, duration_ms: float
    ) -> None:
        """Log response details."""
        log_data = {
            "method": method,
            "url": url,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "response_size_bytes": len(response.content) if response.content else 0,
            "connection_id": self.connection.id,
        }

        if response.status_code >= 400:
            logger.warning(
                f"API Error Response: {method} {url} - {response.status_code}",
                extra=log_data,
            )
        else:
            logger.info(
                f"API Response: {method} {url} - {response.status_code}", extra=log_data
            )

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> APIResponse:
        """
        Make an authenticated request against the connection's API.

        Args:
            method: HTTP method
            endpoint: Path relative to the connection endpoint
            params: Query parameters
            headers: Additional headers
            timeout: Custom timeout for this request

        Returns:
            APIResponse with decoded data

        Raises:
            PMSAnalyticsError: For non-2xx responses and transport failures
        """
        await self._ensure_session()

        url = self.build_url(endpoint)
        request_headers = build_auth_headers(self.connection)
        if headers:
            request_headers.update(headers)

        await self._log_request(method, url, params, request_headers)

        # Placeholders are resolved only for the outgoing request
        outgoing_headers = resolve_placeholders(request_headers, self.secret_resolver)
        request_timeout = httpx.Timeout(timeout or self.settings.request_timeout)

        start = time.time()
        try:
            response = await self._session.request(
                method=method,
                url=url,
                params=params,
                headers=outgoing_headers,
                timeout=request_timeout,
            )
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Request to {self.connection.name} timed out: {method} {url}",
                details={"connection_id": self.connection.id, "url": url},
            ) from e
        except httpx.RequestError as e:
            raise APIError(
                f"Request to {self.connection.name} failed: {e}",
                details={
                    "connection_id": self.connection.id,
                    "url": url,
                    "error_type": type(e).__name__,
                },
            ) from e

        duration_ms = (time.time() - start) * 1000
        await self._log_response(method, url, response, duration_ms)

        api_response = await self._handle_response(response)
        api_response.duration_ms = duration_ms
        return api_response

    async def _handle_response(self, response: httpx.Response) -> APIResponse:
        """
        Handle API response and convert to standard format.

        Raises:
            Various PMSAnalyticsError subclasses based on response
        """
        status_code = response.status_code

        if 200 <= status_code < 300:
            try:
                data = response.json() if response.content else None
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning(
                    "Vendor returned a non-JSON body, treating it as empty",
                    extra={
                        "connection_id": self.connection.id,
                        "content_type": response.headers.get("content-type"),
                    },
                )
                data = None
            return APIResponse(success=True, data=data, status_code=status_code)

        error_msg = f"HTTP {status_code}"
        error_data = None
        try:
            if response.content:
                error_data = response.json()
                if isinstance(error_data, dict):
                    error_msg = (
                        error_data.get("error_description")
                        or error_data.get("message")
                        or error_data.get("detail")
                        or error_data.get("error")
                        or error_msg
                    )
        except (json.JSONDecodeError, UnicodeDecodeError):
            error_msg = response.text[:500] or error_msg

        error_details = {
            "status_code": status_code,
            "url": str(response.url),
            "connection_id": self.connection.id,
        }
        if error_data is not None:
            error_details["response_data"] = error_data

        if status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed: {error_msg}", details=error_details
            )
        elif status_code == 404:
            raise ResourceNotFoundError(
                f"Resource not found: {error_msg}", details=error_details
            )
        elif status_code in (400, 422):
            raise ValidationError(f"Bad request: {error_msg}", details=error_details)
        elif status_code == 504:
            raise TimeoutError(f"Gateway timeout: {error_msg}", details=error_details)
        elif 400 <= status_code < 500:
            raise APIError(
                f"Client error {status_code}: {error_msg}",
                status_code=status_code,
                response_data=error_data,
                details=error_details,
            )
        raise APIError(
            f"Server error {status_code}: {error_msg}",
            status_code=status_code,
            response_data=error_data,
            details=error_details,
        )

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> APIResponse:
        """Make GET request."""
        return await self.request(
            "GET", endpoint, params=params, headers=headers, timeout=timeout
        )

    async def check_health(self) -> bool:
        """
        Call the vendor health endpoint.

        Returns:
            True for a 2xx answer; False for any other status or when the
            vendor is unreachable
        """
        try:
            response = await self.get(HEALTH_ENDPOINT)
            return response.success
        except PMSAnalyticsError as e:
            logger.warning(
                f"Connection test failed for {self.connection.name}: {e}",
                extra={"connection_id": self.connection.id, "error_type": type(e).__name__},
            )
            return False

    async def fetch_resource(
        self,
        resource_type: ResourceType | str,
        adapter: VendorAdapter,
        now: datetime | None = None,
    ) -> list[CanonicalRecord]:
        """
        Fetch one resource collection and normalize it.

        Raises:
            PMSAnalyticsError: When the vendor request fails
        """
        resource = ResourceType(resource_type)
        params = get_resource_params(
            resource,
            now=now,
            window_days=self.settings.sync_window_days,
            guest_limit=self.settings.guest_fetch_limit,
        )
        response = await self.get(adapter.endpoint(resource), params=params or None)
        records = adapter.normalize(resource, response.data)
        logger.debug(
            f"Fetched {len(records)} {resource.value} from {self.connection.name}",
            extra={"connection_id": self.connection.id, "resource": resource.value},
        )
        return records
