"""
HTTP client port - outbound port for talking to the master server.

The port is callback based: a request is fired and the completion handler
receives the response once it arrives.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Optional


class HttpMethod(Enum):
    """HTTP methods."""
    GET = "GET"


class HttpStatus(IntEnum):
    """HTTP status codes."""
    OK = 200


@dataclass
class HttpRequest:
    """HTTP request model."""
    url: str
    method: HttpMethod = HttpMethod.GET
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    timeout: float = 30.0


@dataclass
class HttpResponse:
    """
    HTTP response model.

    A transport failure (DNS, refused connection, timeout) is reported as
    ``status_code == 0`` with the reason in ``error``. A body that is not
    valid UTF-8 keeps the status code, leaves ``body`` empty and sets
    ``error``.
    """
    status_code: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """2xx status code check."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON."""
        import json
        return json.loads(self.body)


CompletionHandler = Callable[[HttpResponse], None]


class IHttpClientPort(ABC):
    """
    Asynchronous HTTP client port.

    Usage:
        ```python
        def on_complete(response: HttpResponse) -> None:
            print(response.status_code)

        client.send_async(HttpRequest(url="https://example.org"), on_complete)
        ```
    """

    @abstractmethod
    def send_async(self, request: HttpRequest, on_complete: CompletionHandler) -> None:
        """
        Fire a request without waiting for it.

        Must be called from within a running event loop. ``on_complete`` is
        invoked exactly once with the response.

        Args:
            request: Request to send
            on_complete: Completion handler
        """
        ...

    @abstractmethod
    async def send(self, request: HttpRequest) -> HttpResponse:
        """
        Send a request and wait for the response.

        Args:
            request: Request to send

        Returns:
            HttpResponse
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close client connections."""
        ...
