"""Adapters - concrete implementations of ports."""

from rctservers.core.adapters.favourites_adapter import FileFavouritesStore
from rctservers.core.adapters.http_adapter import AiohttpClientAdapter
from rctservers.core.adapters.udp_adapter import UdpDatagramAdapter

__all__ = [
    # Favourites
    "FileFavouritesStore",
    # HTTP
    "AiohttpClientAdapter",
    # Datagram
    "UdpDatagramAdapter",
]
