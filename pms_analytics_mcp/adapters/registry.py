"""
Lookup table from PMS vendor to its adapter.

Replaces per-resource switch statements with polymorphic dispatch: callers
ask the registry for the adapter of a connection's vendor and call the same
normalize_* methods regardless of vendor.
"""

import logging

from pms_analytics_mcp.adapters.base import VendorAdapter
from pms_analytics_mcp.adapters.vendors import BUILTIN_ADAPTERS, GenericAdapter
from pms_analytics_mcp.models.common import PMSType

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Registry of vendor adapters keyed by PMS type."""

    def __init__(self, register_builtins: bool = True) -> None:
        self._adapters: dict[str, VendorAdapter] = {}
        self._fallback: VendorAdapter = GenericAdapter()
        if register_builtins:
            for adapter_class in BUILTIN_ADAPTERS:
                self.register(adapter_class())

    def register(self, adapter: VendorAdapter, pms_type: PMSType | str | None = None):
        """Register (or replace) the adapter for a vendor."""
        key = _key(pms_type or adapter.pms_type)
        if key in self._adapters:
            logger.debug(f"Replacing adapter for vendor {key}")
        self._adapters[key] = adapter

    def get(self, pms_type: PMSType | str) -> VendorAdapter:
        """Adapter for a vendor; unknown vendors get the generic adapter."""
        adapter = self._adapters.get(_key(pms_type))
        if adapter is None:
            logger.warning(
                f"No adapter registered for vendor {pms_type}, using generic mapping"
            )
            return self._fallback
        return adapter

    def list_vendors(self) -> list[str]:
        return list(self._adapters)

    def describe(self) -> list[dict[str, str]]:
        """Vendor value/label pairs, as offered when adding a connection."""
        return [
            {"value": key, "label": adapter.display_name}
            for key, adapter in self._adapters.items()
        ]

    def __contains__(self, pms_type: object) -> bool:
        return isinstance(pms_type, (str, PMSType)) and _key(pms_type) in self._adapters


def _key(pms_type: PMSType | str) -> str:
    return pms_type.value if isinstance(pms_type, PMSType) else str(pms_type).lower()


# Global registry instance
_registry: AdapterRegistry | None = None


def get_adapter_registry() -> AdapterRegistry:
    """Process-wide adapter registry with every built-in vendor."""
    global _registry
    if _registry is None:
        _registry = AdapterRegistry()
    return _registry
