"""Authorization headers and the secret placeholder seam."""

from pms_analytics_mcp.auth.headers import (
    SecretResolver,
    build_auth_headers,
    resolve_placeholders,
    secret_names,
)

__all__ = [
    "SecretResolver",
    "build_auth_headers",
    "resolve_placeholders",
    "secret_names",
]
