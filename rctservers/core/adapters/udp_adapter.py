"""UDP socket adapter implementation."""

import socket
from typing import Optional

import structlog

from rctservers.core.ports.outbound.datagram import Datagram, IDatagramPort

logger = structlog.get_logger(__name__)


class UdpDatagramAdapter(IDatagramPort):
    """
    Non-blocking IPv4 UDP socket with broadcast enabled.

    The socket is bound to an ephemeral port so that replies to a
    broadcast come back to it.
    """

    def __init__(self, bind_host: str = "", bind_port: int = 0):
        """
        Create and bind the socket.

        Args:
            bind_host: Local address to bind ("" for all interfaces)
            bind_port: Local port (0 for an ephemeral port)

        Raises:
            OSError: If the socket cannot be created or bound
        """
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            self._socket.setblocking(False)
            self._socket.bind((bind_host, bind_port))
        except OSError:
            self._socket.close()
            raise

    @property
    def local_address(self) -> tuple[str, int]:
        return self._socket.getsockname()

    def send_to(self, data: bytes, host: str, port: int) -> int:
        return self._socket.sendto(data, (host, port))

    def receive(self, max_size: int) -> Optional[Datagram]:
        try:
            payload, addr = self._socket.recvfrom(max_size)
        except BlockingIOError:
            return None
        except ConnectionResetError:
            # ICMP port unreachable surfaces here on Windows
            return None
        return Datagram(payload=payload, host=addr[0], port=addr[1])

    def close(self) -> None:
        self._socket.close()
