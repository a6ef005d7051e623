"""Single-resolution promise bridging completion callbacks to asyncio."""

import asyncio
import threading
from enum import Enum
from typing import Optional

from rctservers.core.domain.models import FetchResult, PromiseAlreadyResolvedError


class PromiseState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


class ResultPromise:
    """
    Promise that is resolved exactly once with a FetchResult.

    ``resolve`` may be called from any thread; the awaitable ``future``
    completes on the loop the promise was created on.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[FetchResult] = self._loop.create_future()
        self._state = PromiseState.PENDING
        self._lock = threading.Lock()

    @property
    def future(self) -> "asyncio.Future[FetchResult]":
        return self._future

    @property
    def state(self) -> PromiseState:
        return self._state

    def resolve(self, result: FetchResult) -> None:
        """
        Resolve the promise.

        Raises:
            PromiseAlreadyResolvedError: If already resolved
        """
        with self._lock:
            if self._state is not PromiseState.PENDING:
                raise PromiseAlreadyResolvedError()
            self._state = PromiseState.RESOLVED

        self._loop.call_soon_threadsafe(self._set_result, result)

    def _set_result(self, result: FetchResult) -> None:
        if not self._future.done():
            self._future.set_result(result)
