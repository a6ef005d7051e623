"""Server browser - wires configuration, adapters and the server list together."""

import asyncio
from typing import Optional

import structlog

from rctservers.config import ServerListConfig
from rctservers.core.adapters.favourites_adapter import FileFavouritesStore
from rctservers.core.adapters.http_adapter import AiohttpClientAdapter
from rctservers.core.domain.models import FetchError, ServerListEntry
from rctservers.core.domain.services.server_list import ServerList
from rctservers.core.ports.outbound.favourites import IFavouritesStorePort
from rctservers.core.ports.outbound.http_client import IHttpClientPort
from rctservers.discovery.local import LocalDiscoveryService
from rctservers.discovery.remote import RemoteDiscoveryService

logger = structlog.get_logger(__name__)


class ServerBrowser:
    """
    Main entry point for listing servers.

    Usage:
        async with ServerBrowser(ServerListConfig(protocol_version="0.4.3")) as browser:
            errors = await browser.refresh()
            for entry in browser.server_list.get_servers():
                print(entry.name)
    """

    def __init__(
        self,
        config: Optional[ServerListConfig] = None,
        http: Optional[IHttpClientPort] = None,
        favourites: Optional[IFavouritesStorePort] = None,
        local_discovery: Optional[LocalDiscoveryService] = None,
    ):
        """
        Initialize the browser.

        Args:
            config: Settings (defaults apply when omitted)
            http: HTTP client override (default: aiohttp, unless disabled)
            favourites: Favourites store override (default: file in user_dir)
            local_discovery: LAN probe override
        """
        self._config = config or ServerListConfig()

        self._owns_http = False
        if http is None and self._config.http_enabled:
            http = AiohttpClientAdapter(timeout=self._config.http_timeout)
            self._owns_http = True
        self._http = http if self._config.http_enabled else None

        self._favourites = favourites or FileFavouritesStore(self._config.user_dir)

        self._local_discovery = local_discovery or LocalDiscoveryService(
            broadcast_address=self._config.broadcast_address,
            broadcast_port=self._config.broadcast_port,
            receive_window_ms=self._config.receive_window_ms,
            receive_delay_ms=self._config.receive_delay_ms,
            max_response_size=self._config.max_response_size,
        )
        self._remote_discovery = RemoteDiscoveryService(
            http=self._http,
            master_server_url=self._config.resolved_master_server_url(),
        )

        self._server_list = ServerList(
            favourites=self._favourites,
            protocol_version=self._config.protocol_version,
            local_discovery=self._local_discovery,
            remote_discovery=self._remote_discovery,
        )

    async def __aenter__(self) -> "ServerBrowser":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def config(self) -> ServerListConfig:
        return self._config

    @property
    def server_list(self) -> ServerList:
        return self._server_list

    async def refresh(self, local: bool = True, remote: bool = True) -> list[FetchError]:
        """
        Rebuild the list from favourites and both discovery channels.

        Both channels run concurrently; their results are merged one after
        the other once each completes.

        Args:
            local: Probe the LAN
            remote: Query the master server

        Returns:
            Errors from channels that failed
        """
        self._server_list.clear()
        self._server_list.read_and_add_favourites()

        pending: list["asyncio.Future"] = []
        if local:
            pending.append(self._server_list.fetch_local_server_list_async())
        if remote:
            pending.append(self._server_list.fetch_online_server_list_async())

        errors: list[FetchError] = []
        for result in await asyncio.gather(*pending):
            if result.is_ok:
                self._server_list.add_range(result.entries)
            else:
                errors.append(result.error)

        logger.info(
            "server_list_refreshed",
            servers=self._server_list.get_count(),
            players=self._server_list.get_total_player_count(),
            errors=[e.kind.value for e in errors],
        )
        return errors

    def add_favourite(self, entry: ServerListEntry) -> bool:
        """Pin a server and persist the favourites."""
        remaining = [
            e for e in self._server_list.read_favourites() if e.address != entry.address
        ]
        remaining.append(entry.model_copy(update={"favourite": True}))
        if not self._server_list.write_favourites(remaining):
            return False
        self._server_list.read_and_add_favourites()
        return True

    def remove_favourite(self, address: str) -> bool:
        """
        Unpin a server.

        Returns:
            False if the address is not a favourite or saving failed
        """
        favourites = self._server_list.read_favourites()
        remaining = [e for e in favourites if e.address != address]
        if len(remaining) == len(favourites):
            return False
        if not self._server_list.write_favourites(remaining):
            return False
        self._server_list.read_and_add_favourites()
        return True

    async def close(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
