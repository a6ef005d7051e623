"""Server list configuration."""

from pathlib import Path

from pydantic import BaseModel, Field

from rctservers.discovery.local import LocalDiscoveryService
from rctservers.discovery.remote import DEFAULT_MASTER_SERVER_URL


def default_user_dir() -> Path:
    return Path.home() / ".config" / "OpenRCT2"


class ServerListConfig(BaseModel):
    """Settings for favourites storage and both discovery channels."""

    user_dir: Path = Field(default_factory=default_user_dir)

    # Remote discovery
    master_server_url: str = ""
    http_enabled: bool = True
    http_timeout: float = Field(default=30.0, gt=0)

    # Sorting
    protocol_version: str = ""

    # Local discovery
    broadcast_address: str = "255.255.255.255"
    broadcast_port: int = Field(default=LocalDiscoveryService.BROADCAST_PORT, ge=1, le=65535)
    receive_window_ms: int = Field(default=2000, ge=0)
    receive_delay_ms: int = Field(default=10, ge=1)
    max_response_size: int = Field(default=1023, ge=1)

    def resolved_master_server_url(self) -> str:
        """Override URL if set, otherwise the built-in default."""
        return self.master_server_url or DEFAULT_MASTER_SERVER_URL
