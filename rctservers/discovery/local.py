"""Local discovery - finds game servers on the LAN by UDP broadcast."""

import asyncio
import json
import time
from concurrent.futures import Executor
from typing import Callable, Optional

import structlog

from rctservers.core.adapters.udp_adapter import UdpDatagramAdapter
from rctservers.core.domain.models import FetchErrorKind, FetchResult, ServerListEntry
from rctservers.core.ports.outbound.datagram import Datagram, IDatagramPort

logger = structlog.get_logger(__name__)

DatagramFactory = Callable[[], IDatagramPort]


class LocalDiscoveryService:
    """
    Broadcast probe for servers on the local network.

    A single probe is broadcast, then the socket is polled for replies for
    the whole receive window. Every server that answers in time is
    returned; there is no early exit on the first reply.
    """

    PROBE_MESSAGE = b"Are you an OpenRCT2 server?"
    BROADCAST_PORT = 11754

    def __init__(
        self,
        socket_factory: DatagramFactory = UdpDatagramAdapter,
        broadcast_address: str = "255.255.255.255",
        broadcast_port: int = BROADCAST_PORT,
        receive_window_ms: int = 2000,
        receive_delay_ms: int = 10,
        max_response_size: int = 1023,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize local discovery.

        Args:
            socket_factory: Creates the datagram socket for one probe
            broadcast_address: Destination of the probe
            broadcast_port: Port servers listen on
            receive_window_ms: Total time spent polling for replies
            receive_delay_ms: Pause between two polls
            max_response_size: Largest reply accepted, in bytes
            sleep: Blocking sleep, in seconds
        """
        self._socket_factory = socket_factory
        self._broadcast_address = broadcast_address
        self._broadcast_port = broadcast_port
        self._receive_window_ms = receive_window_ms
        self._receive_delay_ms = receive_delay_ms
        self._max_response_size = max_response_size
        self._sleep = sleep

    @property
    def poll_attempts(self) -> int:
        """Number of receive attempts per probe."""
        return max(self._receive_window_ms // max(self._receive_delay_ms, 1), 1)

    def fetch_local_server_list(self) -> FetchResult:
        """
        Probe the LAN and collect replies.

        Blocks for the whole receive window.

        Returns:
            FetchResult with entries flagged ``local``
        """
        try:
            udp_socket = self._socket_factory()
        except OSError as e:
            logger.error("local_discovery_socket_failed", error=str(e))
            return FetchResult.fail(FetchErrorKind.BROADCAST_FAILED, str(e))

        entries: list[ServerListEntry] = []
        with udp_socket:
            try:
                sent = udp_socket.send_to(
                    self.PROBE_MESSAGE,
                    self._broadcast_address,
                    self._broadcast_port,
                )
            except OSError as e:
                logger.error("local_discovery_broadcast_failed", error=str(e))
                return FetchResult.fail(FetchErrorKind.BROADCAST_FAILED, str(e))

            if sent != len(self.PROBE_MESSAGE):
                logger.error(
                    "local_discovery_broadcast_failed",
                    sent=sent,
                    expected=len(self.PROBE_MESSAGE),
                )
                return FetchResult.fail(
                    FetchErrorKind.BROADCAST_FAILED,
                    "Unable to broadcast server query.",
                )

            delay = self._receive_delay_ms / 1000
            for _ in range(self.poll_attempts):
                datagram = udp_socket.receive(self._max_response_size)
                if datagram is not None:
                    entry = self._parse_response(datagram)
                    if entry is not None:
                        entries.append(entry)
                self._sleep(delay)

        logger.info("local_discovery_finished", count=len(entries))
        return FetchResult.ok(entries)

    def fetch_local_server_list_async(
        self,
        executor: Optional[Executor] = None,
    ) -> "asyncio.Future[FetchResult]":
        """
        Run the probe on a worker thread.

        Args:
            executor: Executor to run on (default: loop's default executor)

        Returns:
            Future resolving to the FetchResult
        """
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(executor, self.fetch_local_server_list)

    def _parse_response(self, datagram: Datagram) -> Optional[ServerListEntry]:
        """Decode a reply, trusting the transport for the sender address."""
        logger.debug("local_server_replied", host=datagram.host)

        try:
            record = json.loads(datagram.payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            logger.debug("local_reply_skipped", host=datagram.host, error=str(e))
            return None

        if not isinstance(record, dict):
            logger.debug("local_reply_skipped", host=datagram.host, error="not an object")
            return None

        record["ip"] = {"v4": [datagram.host]}
        entry = ServerListEntry.from_json(record)
        if entry is None:
            return None

        logger.info("local_server_discovered", name=entry.name, address=entry.address)
        return entry.model_copy(update={"local": True})
