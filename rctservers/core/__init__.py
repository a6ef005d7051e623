"""Core module - hexagonal architecture ports, domain and adapters."""

# Domain models
from rctservers.core.domain import (
    FetchError,
    FetchErrorKind,
    FetchResult,
    ResultPromise,
    ServerListEntry,
    ServerListError,
)

# Ports
from rctservers.core.ports import (
    IDatagramPort,
    IFavouritesStorePort,
    IHttpClientPort,
)

# Adapters
from rctservers.core.adapters import (
    AiohttpClientAdapter,
    FileFavouritesStore,
    UdpDatagramAdapter,
)

__all__ = [
    # Domain Models
    "FetchError",
    "FetchErrorKind",
    "FetchResult",
    "ResultPromise",
    "ServerListEntry",
    "ServerListError",
    # Ports
    "IDatagramPort",
    "IFavouritesStorePort",
    "IHttpClientPort",
    # Adapters
    "AiohttpClientAdapter",
    "FileFavouritesStore",
    "UdpDatagramAdapter",
]
