"""Discovery module - local (LAN broadcast) and remote (master server) discovery."""

from rctservers.discovery.local import LocalDiscoveryService
from rctservers.discovery.remote import DEFAULT_MASTER_SERVER_URL, RemoteDiscoveryService

__all__ = [
    "LocalDiscoveryService",
    "RemoteDiscoveryService",
    "DEFAULT_MASTER_SERVER_URL",
]
