"""
PMS connection model.

A connection describes one configured vendor system: where its API lives,
how it authenticates and where it is in the sync lifecycle.
"""

from pydantic import Field

from pms_analytics_mcp.models.common import (
    AuthType,
    ConnectionStatus,
    FrozenPMSModel,
    PMSType,
    SyncFrequency,
)


class Connection(FrozenPMSModel):
    """A configured PMS connection."""

    id: str
    name: str
    type: PMSType = PMSType.CUSTOM
    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    last_sync: str | None = Field(None, alias="lastSync")
    api_endpoint: str = Field(alias="apiEndpoint")
    auth_type: AuthType = Field(AuthType.API_KEY, alias="authType")
    sync_frequency: SyncFrequency = Field(
        SyncFrequency.HOURLY, alias="syncFrequency"
    )

    @property
    def base_url(self) -> str:
        """API endpoint without a trailing slash."""
        return self.api_endpoint.rstrip("/")

    @property
    def is_connected(self) -> bool:
        return self.status == ConnectionStatus.CONNECTED.value
