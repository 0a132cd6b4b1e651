from __future__ import annotations
import io
import os
from typing import BinaryIO, Iterator, Tuple

from .config import DEFAULT_ENCODING
from .errors import (
    IntoOffsetError,
    OpenFileError,
    ReadFileMetadataError,
    ReadLineError,
    ReadLineOffsetError,
    SeekError,
    SeekOffsetError,
)
from .offsets import U64, OffsetType

def strip_terminator(raw: bytes) -> bytes:
    """Drop a trailing `\\n` and, only if it was there, a `\\r` before it."""
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    return raw

class LineOffsetReader:
    """
    Sequential reader yielding (line, offset) pairs, where offset is the byte
    position at which the line starts. A failing read ends the iteration:
    the error is raised once and every later next() stops.
    """
    def __init__(
        self,
        name: str,
        buf: BinaryIO,
        offset_type: OffsetType = U64,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.name = name
        self.offset_type = offset_type
        self.encoding = encoding
        self._buf = buf
        self._index = 0
        self._position = 0
        self._done = False

    @classmethod
    def from_path(cls, path: str | os.PathLike, offset_type: OffsetType = U64) -> "LineOffsetReader":
        name = os.fspath(path)
        try:
            f = open(name, "rb")
        except OSError as e:
            raise OpenFileError(name) from e
        return cls(name, f, offset_type)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, offset_type: OffsetType = U64) -> "LineOffsetReader":
        return cls(name, io.BytesIO(data), offset_type)

    @classmethod
    def from_text(cls, name: str, text: str, offset_type: OffsetType = U64) -> "LineOffsetReader":
        return cls.from_bytes(name, text.encode(DEFAULT_ENCODING), offset_type)

    @property
    def index(self) -> int:
        """Number of lines produced so far."""
        return self._index

    @property
    def position(self) -> int:
        """Raw stream position of the next line."""
        return self._position

    def size(self) -> int:
        """Size in bytes of the underlying file."""
        try:
            return os.fstat(self._buf.fileno()).st_size
        except OSError as e:
            raise ReadFileMetadataError(self.name) from e

    def close(self) -> None:
        self._done = True
        self._buf.close()

    def __enter__(self) -> "LineOffsetReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return self

    def __next__(self) -> Tuple[str, int]:
        if self._done:
            raise StopIteration
        try:
            raw = self._buf.readline()
            if not raw:
                self._done = True
                raise StopIteration
            line = strip_terminator(raw).decode(self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            self._done = True
            raise ReadLineError(self._index, self.name) from e

        try:
            offset = self.offset_type.convert(self._position)
        except OverflowError as e:
            self._done = True
            raise IntoOffsetError(self._position, self._index, self.name) from e

        self._index += 1
        try:
            self._position = self._buf.tell()
        except OSError as e:
            self._done = True
            raise SeekOffsetError(self._index, self.name) from e
        return line, offset

def read_line_at(path: str | os.PathLike, offset: int, encoding: str = DEFAULT_ENCODING) -> str:
    """
    Open `path`, seek to `offset` and return the single line found there,
    without its terminator. Uses a fresh file handle on every call.
    """
    name = os.fspath(path)
    try:
        f = open(name, "rb")
    except OSError as e:
        raise OpenFileError(name) from e
    with f:
        try:
            f.seek(OffsetType.to_position(offset))
        except (OSError, ValueError) as e:
            raise SeekError(name, offset) from e
        try:
            raw = f.readline()
            return strip_terminator(raw).decode(encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ReadLineOffsetError(offset, name) from e

def file_modified_at(path: str | os.PathLike) -> int:
    """Modification time in nanoseconds."""
    try:
        return os.stat(path).st_mtime_ns
    except OSError as e:
        raise ReadFileMetadataError(path) from e
