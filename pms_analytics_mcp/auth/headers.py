"""
Authorization header construction for PMS connections.

Headers never carry a real credential. The Authorization value holds an
opaque ``{{<connectionId>_<secret>}}`` placeholder that a separate, trusted
secret-injection layer resolves just before the request leaves the process.
"""

import logging
import re
from typing import Protocol, runtime_checkable

from pms_analytics_mcp.models.common import AuthType
from pms_analytics_mcp.models.connection import Connection
from pms_analytics_mcp.utils.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")

BASE_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# auth type -> (scheme, secret suffix)
AUTH_SCHEMES: dict[str, tuple[str, str]] = {
    AuthType.API_KEY.value: ("Bearer", "api_key"),
    AuthType.BASIC_AUTH.value: ("Basic", "basic_auth"),
    AuthType.OAUTH.value: ("Bearer", "oauth_token"),
}


@runtime_checkable
class SecretResolver(Protocol):
    """External collaborator that turns a secret name into its value."""

    def resolve(self, name: str) -> str: ...


def placeholder(connection_id: str, secret: str) -> str:
    return f"{{{{{connection_id}_{secret}}}}}"


def build_auth_headers(connection: Connection) -> dict[str, str]:
    """
    Build request headers for a connection.

    Args:
        connection: Connection whose auth type selects the scheme

    Returns:
        Header map with JSON content negotiation and an Authorization
        placeholder
    """
    headers = dict(BASE_HEADERS)

    scheme = AUTH_SCHEMES.get(connection.auth_type)
    if scheme is None:
        logger.warning(
            f"Unknown auth type {connection.auth_type!r} for connection "
            f"{connection.id}, sending request without Authorization"
        )
        return headers

    prefix, secret = scheme
    headers["Authorization"] = f"{prefix} {placeholder(connection.id, secret)}"
    return headers


def secret_names(connection: Connection) -> list[str]:
    """Names of the secrets an operator must provision for a connection."""
    if connection.auth_type == AuthType.API_KEY.value:
        return [f"{connection.id}_api_key"]
    if connection.auth_type == AuthType.BASIC_AUTH.value:
        return [
            f"{connection.id}_username",
            f"{connection.id}_password",
            f"{connection.id}_basic_auth",
        ]
    if connection.auth_type == AuthType.OAUTH.value:
        return [f"{connection.id}_oauth_token"]
    return []


def find_placeholders(value: str) -> list[str]:
    return PLACEHOLDER_PATTERN.findall(value)


def resolve_placeholders(
    headers: dict[str, str], resolver: SecretResolver | None
) -> dict[str, str]:
    """
    Substitute ``{{name}}`` tokens through the secret resolver.

    Without a resolver the headers are returned unchanged and the
    placeholder travels as-is to the secret-injecting proxy.

    Raises:
        AuthenticationError: If the resolver cannot supply a secret
    """
    if resolver is None:
        return dict(headers)

    def _substitute(match: re.Match) -> str:
        name = match.group(1)
        try:
            return resolver.resolve(name)
        except KeyError as e:
            raise AuthenticationError(
                f"Secret {name!r} is not provisioned", details={"secret": name}
            ) from e

    return {
        key: PLACEHOLDER_PATTERN.sub(_substitute, value)
        for key, value in headers.items()
    }
