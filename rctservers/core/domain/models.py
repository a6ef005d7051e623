"""Domain models for the server list."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

MAX_PLAYER_COUNT = 255


class ServerListEntry(BaseModel):
    """One discovered or remembered game server."""

    address: str = ""
    name: str = ""
    description: str = ""
    version: str = ""
    requires_password: bool = False
    players: int = Field(default=0, ge=0, le=MAX_PLAYER_COUNT)
    max_players: int = Field(default=0, ge=0, le=MAX_PLAYER_COUNT)

    # Origin flags, independent of each other
    favourite: bool = False
    local: bool = False

    model_config = {"frozen": True}

    @property
    def host(self) -> str:
        """Host part of the address."""
        host, _, _ = self.address.rpartition(":")
        return host

    @property
    def port(self) -> int:
        """Port part of the address, 0 when missing."""
        _, _, port = self.address.rpartition(":")
        try:
            return int(port)
        except ValueError:
            return 0

    def is_version_valid(self, current_version: str) -> bool:
        """Empty version acts as a wildcard."""
        return self.version == "" or self.version == current_version

    def compare_to(self, other: "ServerListEntry", current_version: str) -> int:
        """
        Rank this entry against another.

        Returns a positive number when this entry should be listed before
        ``other``, negative when after, zero when they tie. Criteria, in
        priority order: favourite, non-local, compatible version, no
        password, then name (case-insensitive, ascending).

        Args:
            other: Entry to compare with
            current_version: Protocol version of the running game

        Returns:
            Positive, negative or zero
        """
        a, b = self, other

        if a.favourite != b.favourite:
            return 1 if a.favourite else -1

        # Local entries rank below remote ones
        if a.local != b.local:
            return -1 if a.local else 1

        a_compatible = a.version == current_version
        b_compatible = b.version == current_version
        if a_compatible != b_compatible:
            return 1 if a_compatible else -1

        if a.requires_password != b.requires_password:
            return -1 if a.requires_password else 1

        a_name = a.name.casefold()
        b_name = b.name.casefold()
        if a_name == b_name:
            return 0
        return 1 if a_name < b_name else -1

    @classmethod
    def from_json(cls, record: Any) -> Optional["ServerListEntry"]:
        """
        Build an entry from a server record.

        ``name`` and ``version`` are mandatory; every other field falls back
        to its default when missing or of the wrong type.

        Args:
            record: Decoded JSON object

        Returns:
            ServerListEntry, or None if the record is unusable
        """
        if not isinstance(record, dict):
            return None

        name = record.get("name")
        version = record.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            logger.debug(
                "server_record_rejected",
                reason="missing name or version",
                name=name,
            )
            return None

        description = record.get("description")
        port = _json_int(record.get("port"))

        return cls(
            address=f"{_first_ipv4(record)}:{port}",
            name=name,
            description=description if isinstance(description, str) else "",
            version=version,
            requires_password=record.get("requiresPassword") is True,
            players=_player_count(record.get("players")),
            max_players=_player_count(record.get("maxPlayers")),
        )


def _json_int(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _player_count(value: Any) -> int:
    return min(max(_json_int(value), 0), MAX_PLAYER_COUNT)


def _first_ipv4(record: dict) -> str:
    ip = record.get("ip")
    if not isinstance(ip, dict):
        return ""
    v4 = ip.get("v4")
    if not isinstance(v4, list) or not v4 or not isinstance(v4[0], str):
        return ""
    return v4[0]


class FetchErrorKind(str, Enum):
    """Why a discovery fetch failed."""

    NO_CONNECTION = "no_connection"
    INVALID_RESPONSE = "invalid_response"
    MASTER_SERVER_FAILED = "master_server_failed"
    BROADCAST_FAILED = "broadcast_failed"


# === Exceptions ===


class ServerListError(Exception):
    """Base exception for the server list."""

    pass


class FetchError(ServerListError):
    """A discovery fetch failed."""

    def __init__(self, kind: FetchErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = f"Server list fetch failed: {kind.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PromiseAlreadyResolvedError(ServerListError):
    """A promise was resolved more than once."""

    def __init__(self) -> None:
        super().__init__("Promise has already been resolved")


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a discovery fetch: either entries or an error."""

    entries: list[ServerListEntry] = field(default_factory=list)
    error: Optional[FetchError] = None

    @classmethod
    def ok(cls, entries: list[ServerListEntry]) -> "FetchResult":
        return cls(entries=list(entries))

    @classmethod
    def fail(cls, kind: FetchErrorKind, detail: str = "") -> "FetchResult":
        return cls(error=FetchError(kind, detail))

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> list[ServerListEntry]:
        """Return the entries or raise the carried error."""
        if self.error is not None:
            raise self.error
        return list(self.entries)
