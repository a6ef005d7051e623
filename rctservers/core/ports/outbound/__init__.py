"""Outbound ports - interfaces for external system connections."""

from rctservers.core.ports.outbound.datagram import Datagram, IDatagramPort
from rctservers.core.ports.outbound.favourites import IFavouritesStorePort
from rctservers.core.ports.outbound.http_client import (
    CompletionHandler,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    HttpStatus,
    IHttpClientPort,
)

__all__ = [
    # Datagram
    "Datagram",
    "IDatagramPort",
    # Favourites
    "IFavouritesStorePort",
    # HTTP
    "CompletionHandler",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "HttpStatus",
    "IHttpClientPort",
]
