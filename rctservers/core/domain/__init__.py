"""Domain layer - server list models and logic."""

from rctservers.core.domain.models import (
    FetchError,
    FetchErrorKind,
    FetchResult,
    PromiseAlreadyResolvedError,
    ServerListEntry,
    ServerListError,
)
from rctservers.core.domain.promise import PromiseState, ResultPromise

__all__ = [
    "ServerListEntry",
    "FetchResult",
    "FetchErrorKind",
    "FetchError",
    "ServerListError",
    "PromiseAlreadyResolvedError",
    "ResultPromise",
    "PromiseState",
]
