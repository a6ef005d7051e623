import json
import time
from typing import Optional

import pytest

from rctservers.core.domain.models import FetchErrorKind
from rctservers.core.ports.outbound.datagram import Datagram, IDatagramPort
from rctservers.discovery.local import LocalDiscoveryService


class _FakeSocket(IDatagramPort):
    """Replays scripted replies, one per poll, then stays silent."""

    def __init__(self, replies: list[Optional[Datagram]] | None = None, short_send: bool = False) -> None:
        self._replies = list(replies or [])
        self._short_send = short_send
        self.sent: list[tuple[bytes, str, int]] = []
        self.receive_calls = 0
        self.max_sizes: set[int] = set()
        self.closed = False

    def send_to(self, data: bytes, host: str, port: int) -> int:
        self.sent.append((data, host, port))
        return len(data) - 1 if self._short_send else len(data)

    def receive(self, max_size: int) -> Optional[Datagram]:
        self.receive_calls += 1
        self.max_sizes.add(max_size)
        if self._replies:
            return self._replies.pop(0)
        return None

    def close(self) -> None:
        self.closed = True


def _reply(host: str, **record) -> Datagram:
    return Datagram(payload=json.dumps(record).encode(), host=host, port=11754)


def _service(socket: _FakeSocket, sleeps: list[float] | None = None, **kwargs) -> LocalDiscoveryService:
    return LocalDiscoveryService(
        socket_factory=lambda: socket,
        sleep=(sleeps.append if sleeps is not None else (lambda _: None)),
        **kwargs,
    )


def test_broadcasts_probe_to_well_known_port() -> None:
    socket = _FakeSocket()

    result = _service(socket, broadcast_address="192.168.1.255").fetch_local_server_list()

    assert result.is_ok
    assert socket.sent == [(b"Are you an OpenRCT2 server?", "192.168.1.255", 11754)]
    assert socket.closed


def test_polls_the_whole_window() -> None:
    sleeps: list[float] = []
    socket = _FakeSocket([_reply("10.0.0.2", name="A", version="1", port=11753)])

    _service(socket, sleeps).fetch_local_server_list()

    # 2000 ms window at 10 ms per poll, no early exit after a reply
    assert socket.receive_calls == 200
    assert len(sleeps) == 200
    assert all(s == pytest.approx(0.01) for s in sleeps)
    assert socket.max_sizes == {1023}


def test_sender_address_overrides_payload_ip() -> None:
    socket = _FakeSocket(
        [
            _reply(
                "192.168.1.42",
                name="LAN Park",
                version="0.4.3",
                port=11753,
                players=2,
                ip={"v4": ["6.6.6.6"]},
            )
        ]
    )

    result = _service(socket).fetch_local_server_list()

    assert len(result.entries) == 1
    entry = result.entries[0]
    assert entry.local is True
    assert entry.favourite is False
    assert entry.host == "192.168.1.42"
    assert entry.address == "192.168.1.42:11753"
    assert entry.players == 2


def test_collects_every_reply_and_skips_malformed() -> None:
    socket = _FakeSocket(
        [
            _reply("10.0.0.1", name="One", version="1"),
            None,
            Datagram(payload=b"{not json", host="10.0.0.9", port=1),
            Datagram(payload=b"\xff\xfe\xfd", host="10.0.0.9", port=1),
            Datagram(payload=b"[1, 2, 3]", host="10.0.0.9", port=1),
            _reply("10.0.0.8", name="No version"),
            _reply("10.0.0.2", name="Two", version="1"),
        ]
    )

    result = _service(socket).fetch_local_server_list()

    assert result.is_ok
    assert [e.name for e in result.entries] == ["One", "Two"]
    assert socket.receive_calls == 200


def test_short_send_fails_with_broadcast_error() -> None:
    socket = _FakeSocket(short_send=True)

    result = _service(socket).fetch_local_server_list()

    assert not result.is_ok
    assert result.error.kind is FetchErrorKind.BROADCAST_FAILED
    assert socket.receive_calls == 0
    assert socket.closed


def test_socket_error_fails_with_broadcast_error() -> None:
    def factory() -> IDatagramPort:
        raise OSError("network unreachable")

    service = LocalDiscoveryService(socket_factory=factory, sleep=lambda _: None)

    result = service.fetch_local_server_list()

    assert result.error is not None
    assert result.error.kind is FetchErrorKind.BROADCAST_FAILED
    assert "network unreachable" in result.error.detail


def test_custom_window() -> None:
    socket = _FakeSocket()

    _service(socket, receive_window_ms=100, receive_delay_ms=20).fetch_local_server_list()

    assert socket.receive_calls == 5


@pytest.mark.asyncio
async def test_async_fetch_runs_off_the_event_loop() -> None:
    socket = _FakeSocket([_reply("10.0.0.5", name="Async", version="1")])
    service = LocalDiscoveryService(
        socket_factory=lambda: socket,
        receive_window_ms=50,
        receive_delay_ms=10,
        sleep=time.sleep,
    )

    future = service.fetch_local_server_list_async()
    assert not future.done()

    result = await future

    assert [e.name for e in result.entries] == ["Async"]
    assert result.entries[0].local is True


def test_deeply_nested_reply_is_skipped() -> None:
    socket = _FakeSocket(
        [
            Datagram(payload=b"[" * 1023, host="10.0.0.9", port=1),
            _reply("10.0.0.2", name="Two", version="1"),
        ]
    )

    result = _service(socket).fetch_local_server_list()

    assert result.is_ok
    assert [e.name for e in result.entries] == ["Two"]
    assert socket.receive_calls == 200
