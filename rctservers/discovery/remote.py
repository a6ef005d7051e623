"""Remote discovery - fetches the public server directory from the master server."""

import asyncio
from typing import Any, Optional

import structlog

from rctservers.core.domain.models import FetchErrorKind, FetchResult, ServerListEntry
from rctservers.core.domain.promise import ResultPromise
from rctservers.core.ports.outbound.http_client import (
    HttpMethod,
    HttpRequest,
    HttpResponse,
    HttpStatus,
    IHttpClientPort,
)

logger = structlog.get_logger(__name__)

DEFAULT_MASTER_SERVER_URL = "https://servers.openrct2.io"

# "status" field of the response body, independent of the HTTP status
MASTER_SERVER_STATUS_OK = 200


class RemoteDiscoveryService:
    """
    Master server directory fetch.

    Each call issues one GET; nothing is cached between calls.
    """

    def __init__(
        self,
        http: Optional[IHttpClientPort],
        master_server_url: str = DEFAULT_MASTER_SERVER_URL,
    ):
        """
        Initialize remote discovery.

        Args:
            http: HTTP client, or None when HTTP is unavailable
            master_server_url: Resolved directory URL
        """
        self._http = http
        self._master_server_url = master_server_url or DEFAULT_MASTER_SERVER_URL

    @property
    def master_server_url(self) -> str:
        return self._master_server_url

    def fetch_online_server_list_async(self) -> "asyncio.Future[FetchResult]":
        """
        Request the directory from the master server.

        Must be called from within a running event loop.

        Returns:
            Future resolving to the FetchResult
        """
        promise = ResultPromise()

        if self._http is None:
            logger.debug("remote_discovery_disabled")
            promise.resolve(FetchResult.ok([]))
            return promise.future

        request = HttpRequest(
            url=self._master_server_url,
            method=HttpMethod.GET,
            headers={"Accept": "application/json"},
        )

        def on_complete(response: HttpResponse) -> None:
            try:
                result = self.parse_response(response)
            except Exception as e:
                logger.error("remote_discovery_parse_error", error=str(e))
                result = FetchResult.fail(FetchErrorKind.INVALID_RESPONSE, str(e))
            promise.resolve(result)

        logger.debug("remote_discovery_started", url=self._master_server_url)
        self._http.send_async(request, on_complete)
        return promise.future

    def parse_response(self, response: HttpResponse) -> FetchResult:
        """
        Turn a master server response into a FetchResult.

        Args:
            response: Completed HTTP response

        Returns:
            FetchResult with the parsed entries or the failure kind
        """
        if response.status_code != HttpStatus.OK:
            return self._fail(
                FetchErrorKind.NO_CONNECTION,
                response.error or f"HTTP {response.status_code}",
            )

        if response.error:
            return self._fail(FetchErrorKind.INVALID_RESPONSE, response.error)

        try:
            root = response.json()
        except (ValueError, RecursionError) as e:
            return self._fail(FetchErrorKind.INVALID_RESPONSE, f"Invalid JSON: {e}")

        if not isinstance(root, dict):
            return self._fail(FetchErrorKind.INVALID_RESPONSE, "Expected a JSON object")

        status = root.get("status")
        if not _is_number(status):
            return self._fail(FetchErrorKind.INVALID_RESPONSE, "Missing numeric 'status'")

        # A non-integral status reads as 0, never as success
        if not isinstance(status, int) or status != MASTER_SERVER_STATUS_OK:
            return self._fail(FetchErrorKind.MASTER_SERVER_FAILED, f"status {status}")

        servers = root.get("servers")
        if not isinstance(servers, list):
            return self._fail(FetchErrorKind.INVALID_RESPONSE, "Missing 'servers' array")

        entries: list[ServerListEntry] = []
        for record in servers:
            if not isinstance(record, dict):
                continue
            entry = ServerListEntry.from_json(record)
            if entry is not None:
                entries.append(entry)

        logger.info(
            "remote_discovery_finished",
            url=self._master_server_url,
            count=len(entries),
            skipped=len(servers) - len(entries),
        )
        return FetchResult.ok(entries)

    def _fail(self, kind: FetchErrorKind, detail: str) -> FetchResult:
        logger.warning(
            "remote_discovery_failed",
            url=self._master_server_url,
            kind=kind.value,
            detail=detail,
        )
        return FetchResult.fail(kind, detail)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
