from __future__ import annotations
import os

class CsvPartialCacheError(Exception):
    """Base class for every error raised by csv_partial_cache."""

class OpenFileError(CsvPartialCacheError):
    def __init__(self, path: str | os.PathLike) -> None:
        self.path = os.fspath(path)
        super().__init__(f"can't open file: {self.path}")

class CreateFileError(CsvPartialCacheError):
    def __init__(self, path: str | os.PathLike) -> None:
        self.path = os.fspath(path)
        super().__init__(f"can't create file: {self.path}")

class ReadFileMetadataError(CsvPartialCacheError):
    def __init__(self, path: str | os.PathLike) -> None:
        self.path = os.fspath(path)
        super().__init__(f"can't read file metadata: {self.path}")

class ReadLineError(CsvPartialCacheError):
    def __init__(self, index: int, name: str) -> None:
        self.index = index
        self.name = name
        super().__init__(f"can't read line {index} from {name}")

class SeekOffsetError(CsvPartialCacheError):
    def __init__(self, index: int, name: str) -> None:
        self.index = index
        self.name = name
        super().__init__(f"can't seek for offset of line {index} in {name}")

class IntoOffsetError(CsvPartialCacheError):
    def __init__(self, offset: int, index: int, name: str) -> None:
        self.offset = offset
        self.index = index
        self.name = name
        super().__init__(f"can't convert offset {offset} of line {index} of {name}")

class SeekError(CsvPartialCacheError):
    def __init__(self, path: str | os.PathLike, offset: int) -> None:
        self.path = os.fspath(path)
        self.offset = offset
        super().__init__(f"can't seek to {offset} in {self.path}")

class ReadLineOffsetError(CsvPartialCacheError):
    def __init__(self, offset: int, path: str | os.PathLike) -> None:
        self.offset = offset
        self.path = os.fspath(path)
        super().__init__(f"can't read line as offset {offset} from {self.path}")

class DecodeError(CsvPartialCacheError):
    """A decoder could not turn a line into a record."""
    def __init__(self, line: str, reason: str = "") -> None:
        self.line = line
        self.reason = reason
        msg = "can't decode csv line"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)

class DecodeDetailsError(CsvPartialCacheError):
    """Full-record decode failure with the file, offset and raw line attached."""
    def __init__(self, path: str | os.PathLike, offset: int, line: str) -> None:
        self.path = os.fspath(path)
        self.offset = offset
        self.line = line
        super().__init__(f"can't decode csv line from `{self.path}` at {offset}: {line}")

class ReadCacheError(CsvPartialCacheError):
    def __init__(self, path: str | os.PathLike, reason: str = "") -> None:
        self.path = os.fspath(path)
        self.reason = reason
        msg = f"can't read cache from: {self.path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)

class WriteCacheError(CsvPartialCacheError):
    def __init__(self, path: str | os.PathLike) -> None:
        self.path = os.fspath(path)
        super().__init__(f"can't write cache into: {self.path}")
