"""Datagram outbound port interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Datagram:
    """A received datagram and the address it came from."""

    payload: bytes
    host: str
    port: int


class IDatagramPort(ABC):
    """
    Outbound port for connectionless UDP traffic.

    Implementations never block on ``receive``: when nothing is pending it
    returns None immediately.
    """

    @abstractmethod
    def send_to(self, data: bytes, host: str, port: int) -> int:
        """
        Send a datagram.

        Args:
            data: Payload
            host: Destination host (may be a broadcast address)
            port: Destination port

        Returns:
            Number of bytes accepted by the socket
        """
        pass

    @abstractmethod
    def receive(self, max_size: int) -> Optional[Datagram]:
        """
        Poll for one datagram.

        Args:
            max_size: Largest payload accepted; longer datagrams are truncated

        Returns:
            Datagram, or None if nothing is pending
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the socket."""
        pass

    def __enter__(self) -> "IDatagramPort":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
