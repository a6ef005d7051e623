import asyncio
import json

import pytest

from rctservers.core.domain.models import FetchErrorKind, FetchResult, PromiseAlreadyResolvedError
from rctservers.core.domain.promise import PromiseState, ResultPromise
from rctservers.core.ports.outbound.http_client import (
    CompletionHandler,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    HttpStatus,
    IHttpClientPort,
)
from rctservers.discovery.remote import DEFAULT_MASTER_SERVER_URL, RemoteDiscoveryService


class _FakeHttpClient(IHttpClientPort):
    """Completes every request on the next loop iteration with a canned response."""

    def __init__(self, response: HttpResponse) -> None:
        self._response = response
        self.requests: list[HttpRequest] = []

    def send_async(self, request: HttpRequest, on_complete: CompletionHandler) -> None:
        self.requests.append(request)
        asyncio.get_running_loop().call_soon(on_complete, self._response)

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        return self._response

    async def close(self) -> None:
        pass


def _ok(body: object) -> HttpResponse:
    return HttpResponse(status_code=200, body=json.dumps(body))


async def _fetch(response: HttpResponse, url: str = "") -> FetchResult:
    service = RemoteDiscoveryService(_FakeHttpClient(response), url)
    return await service.fetch_online_server_list_async()


@pytest.mark.asyncio
async def test_single_server() -> None:
    result = await _fetch(_ok({"status": 200, "servers": [{"name": "A", "version": "1.0"}]}))

    assert result.is_ok
    assert [e.name for e in result.entries] == ["A"]
    assert result.entries[0].local is False


@pytest.mark.asyncio
async def test_request_shape() -> None:
    client = _FakeHttpClient(_ok({"status": 200, "servers": []}))
    service = RemoteDiscoveryService(client, "https://master.example/servers")

    await service.fetch_online_server_list_async()

    assert len(client.requests) == 1
    request = client.requests[0]
    assert request.method is HttpMethod.GET
    assert request.url == "https://master.example/servers"
    assert request.headers["Accept"] == "application/json"


def test_default_url_when_no_override() -> None:
    service = RemoteDiscoveryService(http=None, master_server_url="")

    assert service.master_server_url == DEFAULT_MASTER_SERVER_URL


@pytest.mark.asyncio
async def test_http_error_is_no_connection() -> None:
    result = await _fetch(HttpResponse(status_code=503, body="down"))

    assert result.error.kind is FetchErrorKind.NO_CONNECTION


@pytest.mark.asyncio
async def test_transport_failure_is_no_connection() -> None:
    result = await _fetch(HttpResponse(status_code=0, error="Connection refused"))

    assert result.error.kind is FetchErrorKind.NO_CONNECTION
    assert result.error.detail == "Connection refused"


@pytest.mark.asyncio
async def test_master_server_status_failure() -> None:
    result = await _fetch(_ok({"status": 500, "servers": []}))

    assert result.error.kind is FetchErrorKind.MASTER_SERVER_FAILED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        "not json at all",
        json.dumps([1, 2]),
        json.dumps({"servers": []}),
        json.dumps({"status": "200", "servers": []}),
        json.dumps({"status": True, "servers": []}),
        json.dumps({"status": 200}),
        json.dumps({"status": 200, "servers": {"name": "A"}}),
    ],
)
async def test_invalid_response(body: str) -> None:
    result = await _fetch(HttpResponse(status_code=200, body=body))

    assert result.error.kind is FetchErrorKind.INVALID_RESPONSE


@pytest.mark.asyncio
async def test_bad_server_records_are_skipped() -> None:
    result = await _fetch(
        _ok(
            {
                "status": 200,
                "servers": [
                    {"name": "Good", "version": "1.0", "players": 4, "port": 11753,
                     "ip": {"v4": ["198.51.100.3"]}},
                    {"name": "No version"},
                    "a string",
                    None,
                    {"name": "Also good", "version": ""},
                ],
            }
        )
    )

    assert result.is_ok
    assert [e.name for e in result.entries] == ["Good", "Also good"]
    assert result.entries[0].address == "198.51.100.3:11753"


@pytest.mark.asyncio
async def test_http_unavailable_resolves_empty() -> None:
    service = RemoteDiscoveryService(http=None)

    result = await service.fetch_online_server_list_async()

    assert result.is_ok
    assert result.entries == []


@pytest.mark.asyncio
async def test_fetch_does_not_block_the_caller() -> None:
    service = RemoteDiscoveryService(_FakeHttpClient(_ok({"status": 200, "servers": []})))

    future = service.fetch_online_server_list_async()

    assert not future.done()
    await future
    assert future.done()


@pytest.mark.asyncio
async def test_promise_resolves_exactly_once() -> None:
    promise = ResultPromise()
    promise.resolve(FetchResult.ok([]))

    with pytest.raises(PromiseAlreadyResolvedError):
        promise.resolve(FetchResult.fail(FetchErrorKind.NO_CONNECTION))

    result = await promise.future
    assert result.is_ok
    assert promise.state is PromiseState.RESOLVED


@pytest.mark.asyncio
async def test_promise_resolves_from_another_thread() -> None:
    promise = ResultPromise()
    loop = asyncio.get_running_loop()

    await loop.run_in_executor(None, promise.resolve, FetchResult.ok([]))

    result = await asyncio.wait_for(promise.future, timeout=1.0)
    assert result.is_ok


@pytest.mark.asyncio
async def test_deeply_nested_body_is_invalid_response() -> None:
    result = await _fetch(HttpResponse(status_code=200, body="[" * 100000))

    assert result.error.kind is FetchErrorKind.INVALID_RESPONSE


@pytest.mark.asyncio
async def test_undecodable_body_is_invalid_response() -> None:
    result = await _fetch(
        HttpResponse(status_code=200, error="Response body is not valid UTF-8")
    )

    assert result.error.kind is FetchErrorKind.INVALID_RESPONSE


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [200.0, 200.5])
async def test_non_integral_status_is_master_server_failure(status: float) -> None:
    result = await _fetch(_ok({"status": status, "servers": []}))

    assert result.error.kind is FetchErrorKind.MASTER_SERVER_FAILED


@pytest.mark.asyncio
async def test_parse_error_still_resolves_the_future(monkeypatch) -> None:
    service = RemoteDiscoveryService(_FakeHttpClient(_ok({"status": 200, "servers": []})))

    def explode(response: HttpResponse) -> FetchResult:
        raise RuntimeError("unexpected")

    monkeypatch.setattr(service, "parse_response", explode)

    result = await asyncio.wait_for(service.fetch_online_server_list_async(), timeout=1.0)

    assert result.error.kind is FetchErrorKind.INVALID_RESPONSE
    assert "unexpected" in result.error.detail


def test_http_status_compares_with_plain_codes() -> None:
    assert HttpStatus.OK == 200
    assert [m.value for m in HttpMethod] == ["GET"]
