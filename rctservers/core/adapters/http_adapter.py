"""aiohttp based HTTP client adapter."""

import asyncio
from typing import Optional

import aiohttp
import structlog

from rctservers.core.ports.outbound.http_client import (
    CompletionHandler,
    HttpRequest,
    HttpResponse,
    IHttpClientPort,
)

logger = structlog.get_logger(__name__)


class AiohttpClientAdapter(IHttpClientPort):
    """
    HTTP client backed by a shared aiohttp session.

    The session is created lazily on the first request, inside the running
    event loop.
    """

    def __init__(self, timeout: float = 30.0):
        """
        Initialize adapter.

        Args:
            timeout: Default total timeout in seconds
        """
        self._timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._pending: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> "AiohttpClientAdapter":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def send_async(self, request: HttpRequest, on_complete: CompletionHandler) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._complete(request, on_complete))

        # Keep a reference until the task finishes
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def send(self, request: HttpRequest) -> HttpResponse:
        session = self._get_session()
        timeout = aiohttp.ClientTimeout(total=request.timeout or self._timeout)

        logger.debug("http_request", method=request.method.value, url=request.url)

        try:
            async with session.request(
                request.method.value,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=timeout,
            ) as response:
                raw = await response.read()
                status = response.status
                headers = dict(response.headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("http_request_failed", url=request.url, error=str(e))
            return HttpResponse(status_code=0, error=str(e) or type(e).__name__)

        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("http_body_undecodable", url=request.url, error=str(e))
            return HttpResponse(
                status_code=status,
                headers=headers,
                error=f"Response body is not valid UTF-8: {e}",
            )

        return HttpResponse(status_code=status, body=body, headers=headers)

    async def close(self) -> None:
        """Wait for in-flight requests, then close the session."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

        if self._session is not None:
            await self._session.close()
            self._session = None

    # === Private Methods ===

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def _complete(self, request: HttpRequest, on_complete: CompletionHandler) -> None:
        try:
            response = await self.send(request)
        except Exception as e:
            logger.error("http_request_error", url=request.url, error=str(e))
            response = HttpResponse(status_code=0, error=str(e) or type(e).__name__)

        try:
            on_complete(response)
        except Exception as e:
            logger.error("http_callback_error", url=request.url, error=str(e))
