"""Server list service - the ordered collection of known servers."""

import asyncio
from functools import cmp_to_key
from typing import Optional

import structlog

from rctservers.core.domain.models import FetchResult, ServerListEntry
from rctservers.core.ports.outbound.favourites import IFavouritesStorePort
from rctservers.discovery.local import LocalDiscoveryService
from rctservers.discovery.remote import RemoteDiscoveryService

logger = structlog.get_logger(__name__)


class ServerList:
    """
    Unified, always-sorted list of servers from every source.

    Discovery results are not merged automatically: await the future
    returned by a fetch, then pass the entries to ``add_range``. Merging is
    not synchronized, so callers must serialize it.

    Usage:
        server_list = ServerList(FileFavouritesStore(user_dir), "0.4.3")
        server_list.read_and_add_favourites()

        result = await server_list.fetch_online_server_list_async()
        if result.is_ok:
            server_list.add_range(result.entries)
    """

    def __init__(
        self,
        favourites: IFavouritesStorePort,
        protocol_version: str = "",
        local_discovery: Optional[LocalDiscoveryService] = None,
        remote_discovery: Optional[RemoteDiscoveryService] = None,
    ):
        """
        Initialize the server list.

        Args:
            favourites: Favourites persistence
            protocol_version: Network version of the running game
            local_discovery: LAN probe service
            remote_discovery: Master server service
        """
        self._favourites = favourites
        self._protocol_version = protocol_version
        self._local_discovery = local_discovery or LocalDiscoveryService()
        self._remote_discovery = remote_discovery or RemoteDiscoveryService(http=None)
        self._entries: list[ServerListEntry] = []

    @property
    def protocol_version(self) -> str:
        return self._protocol_version

    # === Collection ===

    def sort(self) -> None:
        """Order entries so the best match comes first."""
        version = self._protocol_version
        self._entries.sort(
            key=cmp_to_key(lambda a, b: a.compare_to(b, version)),
            reverse=True,
        )

    def get_server(self, index: int) -> ServerListEntry:
        return self._entries[index]

    def get_count(self) -> int:
        return len(self._entries)

    def get_servers(self) -> list[ServerListEntry]:
        """Get a copy of all entries in display order."""
        return list(self._entries)

    def add(self, entry: ServerListEntry) -> None:
        self._entries.append(entry)
        self.sort()

    def add_range(self, entries: list[ServerListEntry]) -> None:
        self._entries.extend(entries)
        self.sort()

    def clear(self) -> None:
        self._entries.clear()

    def get_total_player_count(self) -> int:
        return sum(entry.players for entry in self._entries)

    # === Favourites ===

    def read_favourites(self) -> list[ServerListEntry]:
        return self._favourites.read_favourites()

    def read_and_add_favourites(self) -> None:
        """Replace favourite entries with the persisted ones."""
        self._entries = [entry for entry in self._entries if not entry.favourite]
        self.add_range(self.read_favourites())

        logger.debug("favourites_refreshed", total=len(self._entries))

    def write_favourites(self, entries: Optional[list[ServerListEntry]] = None) -> bool:
        """
        Persist favourites.

        Args:
            entries: Entries to save (default: favourite entries of this list)

        Returns:
            True if written
        """
        if entries is None:
            entries = [entry for entry in self._entries if entry.favourite]
        return self._favourites.write_favourites(entries)

    # === Discovery ===

    def fetch_local_server_list_async(self) -> "asyncio.Future[FetchResult]":
        return self._local_discovery.fetch_local_server_list_async()

    def fetch_online_server_list_async(self) -> "asyncio.Future[FetchResult]":
        return self._remote_discovery.fetch_online_server_list_async()
