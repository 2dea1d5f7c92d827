"""
Unit tests for the auth header builder and placeholder resolution.
"""

import pytest

from pms_analytics_mcp.auth.headers import (
    SecretResolver,
    build_auth_headers,
    find_placeholders,
    resolve_placeholders,
    secret_names,
)
from pms_analytics_mcp.utils.exceptions import AuthenticationError


class DictResolver:
    """Secret resolver backed by a plain dictionary."""

    def __init__(self, secrets: dict[str, str]) -> None:
        self.secrets = secrets

    def resolve(self, name: str) -> str:
        return self.secrets[name]


class TestBuildAuthHeaders:
    """Test suite for Authorization header construction."""

    def test_api_key_uses_bearer_placeholder(self, make_connection):
        headers = build_auth_headers(make_connection(id="conn_42", authType="api_key"))

        assert headers == {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": "Bearer {{conn_42_api_key}}",
        }

    def test_basic_auth_placeholder(self, make_connection):
        headers = build_auth_headers(make_connection(id="conn_42", authType="basic_auth"))

        assert headers["Authorization"] == "Basic {{conn_42_basic_auth}}"

    def test_oauth_placeholder(self, make_connection):
        headers = build_auth_headers(make_connection(id="conn_42", authType="oauth"))

        assert headers["Authorization"] == "Bearer {{conn_42_oauth_token}}"

    def test_headers_never_contain_real_secrets(self, make_connection):
        headers = build_auth_headers(make_connection())

        assert find_placeholders(headers["Authorization"]) == ["conn_a_api_key"]

    def test_each_call_returns_a_fresh_dict(self, make_connection):
        connection = make_connection()
        first = build_auth_headers(connection)
        first["X-Extra"] = "1"

        assert "X-Extra" not in build_auth_headers(connection)


class TestSecretNames:
    """Test suite for the secret names a connection needs."""

    def test_api_key(self, make_connection):
        assert secret_names(make_connection(id="c1")) == ["c1_api_key"]

    def test_basic_auth_lists_credentials(self, make_connection):
        names = secret_names(make_connection(id="c1", authType="basic_auth"))

        assert names == ["c1_username", "c1_password", "c1_basic_auth"]

    def test_oauth(self, make_connection):
        assert secret_names(make_connection(id="c1", authType="oauth")) == [
            "c1_oauth_token"
        ]


class TestResolvePlaceholders:
    """Test suite for the secret resolution seam."""

    def test_without_resolver_headers_pass_through(self):
        headers = {"Authorization": "Bearer {{c1_api_key}}"}

        resolved = resolve_placeholders(headers, None)

        assert resolved == headers
        assert resolved is not headers

    def test_resolver_substitutes_placeholders(self):
        resolver = DictResolver({"c1_api_key": "s3cret"})
        headers = {"Authorization": "Bearer {{c1_api_key}}", "Accept": "application/json"}

        resolved = resolve_placeholders(headers, resolver)

        assert resolved["Authorization"] == "Bearer s3cret"
        assert resolved["Accept"] == "application/json"
        assert headers["Authorization"] == "Bearer {{c1_api_key}}"

    def test_missing_secret_raises_authentication_error(self):
        with pytest.raises(AuthenticationError) as exc_info:
            resolve_placeholders(
                {"Authorization": "Bearer {{c1_api_key}}"}, DictResolver({})
            )

        assert exc_info.value.details == {"secret": "c1_api_key"}

    def test_resolver_protocol_is_structural(self):
        assert isinstance(DictResolver({}), SecretResolver)
