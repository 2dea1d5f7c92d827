"""
Input validation utilities for the PMS Analytics MCP server.

Provides common validation functions for connection input, dates,
resource names and paging parameters used by the tools and the registry.
"""

import re
from datetime import date, datetime
from typing import Any
from urllib.parse import urlparse

from pms_analytics_mcp.models.common import ResourceType
from pms_analytics_mcp.utils.exceptions import ValidationError

_CONNECTION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,64}$")


def validate_date_string(date_str: str) -> date:
    """
    Validate and parse date string in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        Parsed date object

    Raises:
        ValidationError: If date format is invalid
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date format '{date_str}': {e}") from e


def validate_endpoint_url(url: str) -> str:
    """
    Validate a connection API endpoint.

    Args:
        url: Absolute http(s) URL of the vendor API

    Returns:
        The URL without surrounding whitespace or a trailing slash

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL
    """
    cleaned = (url or "").strip()
    if not cleaned:
        raise ValidationError("API endpoint cannot be empty")

    parsed = urlparse(cleaned)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(
            f"Invalid API endpoint '{url}': expected an absolute http(s) URL"
        )

    return cleaned.rstrip("/")


def validate_connection_id(connection_id: str) -> str:
    """
    Validate connection id format.

    Raises:
        ValidationError: If the id is empty or contains unexpected characters
    """
    if not connection_id:
        raise ValidationError("Connection id cannot be empty")

    if not _CONNECTION_ID_PATTERN.match(connection_id):
        raise ValidationError(f"Invalid connection id '{connection_id}'")

    return connection_id


def validate_resource_type(resource_type: str) -> ResourceType:
    """
    Validate a resource name (reservations, guests, rooms, revenue, occupancy).

    Raises:
        ValidationError: If the resource is unknown
    """
    try:
        return ResourceType(resource_type.lower())
    except (ValueError, AttributeError) as e:
        valid = ", ".join(resource.value for resource in ResourceType)
        raise ValidationError(
            f"Invalid resource '{resource_type}'. Must be one of: {valid}"
        ) from e


def validate_limit(limit: int, maximum: int = 1000) -> int:
    """
    Validate a result limit.

    Raises:
        ValidationError: If the limit is outside 1..maximum
    """
    if limit < 1:
        raise ValidationError("limit must be 1 or greater")

    if limit > maximum:
        raise ValidationError(f"limit cannot exceed {maximum}")

    return limit


def validate_required_fields(data: dict[str, Any], required_fields: list[str]) -> None:
    """
    Validate that required fields are present in data.

    Args:
        data: Data dictionary to validate
        required_fields: List of required field names

    Raises:
        ValidationError: If any required fields are missing
    """
    missing_fields = [field for field in required_fields if field not in data]

    if missing_fields:
        raise ValidationError(f"Missing required fields: {', '.join(missing_fields)}")

    # Check for empty values
    empty_fields = [
        field
        for field in required_fields
        if (not data.get(field) and data.get(field) != 0)
        or (isinstance(data.get(field), str) and not data[field].strip())
    ]

    if empty_fields:
        raise ValidationError(f"Empty required fields: {', '.join(empty_fields)}")
