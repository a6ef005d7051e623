"""File-backed favourites store (``servers.cfg``)."""

import io
import os
import struct
import tempfile
from pathlib import Path
from typing import BinaryIO, Union

import structlog

from rctservers.core.domain.models import ServerListEntry
from rctservers.core.ports.outbound.favourites import IFavouritesStorePort

logger = structlog.get_logger(__name__)

FAVOURITES_FILE_NAME = "servers.cfg"

# uint32 little-endian, used for the record count and every string length
_UINT32 = struct.Struct("<I")


class FavouritesFormatError(ValueError):
    """The favourites file is truncated or malformed."""

    pass


def encode_favourites(entries: list[ServerListEntry]) -> bytes:
    """
    Serialize favourites.

    Layout: ``uint32 count`` then ``count`` records of three length-prefixed
    UTF-8 strings ``(address, name, description)``.
    """
    buffer = io.BytesIO()
    buffer.write(_UINT32.pack(len(entries)))
    for entry in entries:
        for value in (entry.address, entry.name, entry.description):
            data = value.encode("utf-8")
            buffer.write(_UINT32.pack(len(data)))
            buffer.write(data)
    return buffer.getvalue()


def decode_favourites(data: bytes) -> list[ServerListEntry]:
    """
    Deserialize favourites.

    Raises:
        FavouritesFormatError: If the data is truncated or not UTF-8
    """
    stream = io.BytesIO(data)
    count = _read_uint32(stream)

    entries: list[ServerListEntry] = []
    for _ in range(count):
        address = _read_string(stream)
        name = _read_string(stream)
        description = _read_string(stream)
        entries.append(
            ServerListEntry(
                address=address,
                name=name,
                description=description,
                favourite=True,
            )
        )
    return entries


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise FavouritesFormatError(
            f"Unexpected end of data: wanted {size} bytes, got {len(data)}"
        )
    return data


def _read_uint32(stream: BinaryIO) -> int:
    (value,) = _UINT32.unpack(_read_exact(stream, _UINT32.size))
    return value


def _read_string(stream: BinaryIO) -> str:
    length = _read_uint32(stream)
    try:
        return _read_exact(stream, length).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FavouritesFormatError(f"Invalid UTF-8 string: {e}") from e


class FileFavouritesStore(IFavouritesStorePort):
    """
    Favourites persisted in a per-user binary file.

    Writes go to a temporary file that replaces ``servers.cfg`` in one
    rename, so a failed write never leaves a half-written file behind.
    """

    def __init__(self, user_dir: Union[str, Path]):
        """
        Initialize the store.

        Args:
            user_dir: Directory holding the favourites file
        """
        self._user_dir = Path(user_dir)

    @property
    def path(self) -> Path:
        return self._user_dir / FAVOURITES_FILE_NAME

    def read_favourites(self) -> list[ServerListEntry]:
        """Load favourites, returning an empty list on any failure."""
        path = self.path
        logger.debug("favourites_reading", path=str(path))

        if not path.exists():
            return []

        try:
            entries = decode_favourites(path.read_bytes())
        except (OSError, FavouritesFormatError) as e:
            logger.error("favourites_read_failed", path=str(path), error=str(e))
            return []

        logger.debug("favourites_read", path=str(path), count=len(entries))
        return entries

    def write_favourites(self, entries: list[ServerListEntry]) -> bool:
        """Overwrite the favourites file with ``entries``."""
        path = self.path
        logger.debug("favourites_writing", path=str(path), count=len(entries))

        tmp_name = None
        try:
            self._user_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{FAVOURITES_FILE_NAME}.", dir=self._user_dir
            )
            with os.fdopen(fd, "wb") as f:
                f.write(encode_favourites(entries))
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            logger.error("favourites_write_failed", path=str(path), error=str(e))
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

        return True
