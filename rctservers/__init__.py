"""
rctservers - OpenRCT2 multiplayer server discovery.

Finds servers on the local network and on the master server, keeps them in
one ranked list and remembers favourites between sessions.
"""

__version__ = "0.1.0"

from rctservers.core.domain.models import (
    FetchError,
    FetchErrorKind,
    FetchResult,
    PromiseAlreadyResolvedError,
    ServerListEntry,
    ServerListError,
)
from rctservers.core.adapters import (
    AiohttpClientAdapter,
    FileFavouritesStore,
    UdpDatagramAdapter,
)
from rctservers.discovery import LocalDiscoveryService, RemoteDiscoveryService
from rctservers.core.domain.services.server_list import ServerList
from rctservers.config import ServerListConfig
from rctservers.browser import ServerBrowser

__all__ = [
    # Main
    "ServerBrowser",
    "ServerList",
    "ServerListConfig",
    # Models
    "ServerListEntry",
    "FetchResult",
    "FetchErrorKind",
    # Errors
    "ServerListError",
    "FetchError",
    "PromiseAlreadyResolvedError",
    # Discovery
    "LocalDiscoveryService",
    "RemoteDiscoveryService",
    # Adapters
    "AiohttpClientAdapter",
    "FileFavouritesStore",
    "UdpDatagramAdapter",
]
