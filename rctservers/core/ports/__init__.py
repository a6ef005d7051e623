"""Ports - interfaces for hexagonal architecture."""

from rctservers.core.ports.outbound import (
    IDatagramPort,
    IFavouritesStorePort,
    IHttpClientPort,
)

__all__ = [
    "IDatagramPort",
    "IFavouritesStorePort",
    "IHttpClientPort",
]
