from __future__ import annotations
import asyncio
import bisect
import logging
import os
from typing import Any, Callable, Generic, Iterator, Optional, Sequence, Tuple, Type, TypeVar

from .cache import is_cache_expired, read_snapshot, write_snapshot
from .errors import CsvPartialCacheError, DecodeDetailsError, DecodeError
from .offsets import U64
from .progress import Progress, ProgressCallback
from .records import FullRecordDecoder, decode_full
from .storage import LineOffsetReader, read_line_at

logger = logging.getLogger(__name__)

T = TypeVar("T")

class CsvPartialCache(Generic[T]):
    """
    Sorted, immutable in-memory index over a delimited text file.

    Each item is a partial record holding the columns the caller wants in
    memory plus the byte offset of its line; the full row stays on disk and
    is read back by offset on demand.
    """
    __slots__ = ("path", "items")

    def __init__(self, path: str | os.PathLike, items: Sequence[T]) -> None:
        self.path = os.fspath(path)
        self.items: Tuple[T, ...] = tuple(items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r}, items=<{len(self.items)}>)"

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __getitem__(self, i: int) -> T:
        return self.items[i]

    # ----- Build -----

    @classmethod
    def new(
        cls,
        record_cls: Type[T],
        path: str | os.PathLike,
        on_progress: Optional[ProgressCallback] = None,
    ) -> "CsvPartialCache[T]":
        """
        Scan the whole file once, skipping the header line and decoding every
        other line with record_cls.from_line_offset(). Any failure aborts the
        build; a partially built index is never returned.
        """
        path = os.fspath(path)
        progress = Progress(on_progress)
        offset_type = getattr(record_cls, "offset_type", U64)
        logger.debug("building index over %s (%s offsets)", path, offset_type.name)
        progress.emit("build.start", 0, path)

        items = []
        with LineOffsetReader.from_path(path, offset_type) as reader:
            total = reader.size() if progress.enabled else 0
            next(reader, None)  # header
            for line, offset in reader:
                try:
                    items.append(record_cls.from_line_offset(line, offset))
                except CsvPartialCacheError:
                    raise
                except (ValueError, TypeError, IndexError, KeyError) as e:
                    raise DecodeError(line, str(e)) from e
                progress.ratio("build.scan", reader.position, total)

        logger.debug("indexed %d rows from %s", len(items), path)
        progress.emit("build.done", 100, f"{len(items)} rows")
        return cls(path, items)

    # ----- Lookup -----

    def find(self, key: Any, projection: Callable[[T], Any]) -> Optional[T]:
        """
        Binary search for the item whose projection equals `key`.

        Items must already be sorted ascending by the same projection; this
        is not checked (see is_sorted_by). With an unsorted index the result
        is unspecified. With duplicate keys any one of the matches may be
        returned. Returns None when no item matches.
        """
        i = bisect.bisect_left(self.items, key, key=projection)
        if i < len(self.items) and projection(self.items[i]) == key:
            return self.items[i]
        return None

    def is_sorted_by(self, projection: Callable[[T], Any]) -> bool:
        keys = [projection(item) for item in self.items]
        return all(a <= b for a, b in zip(keys, keys[1:]))

    # ----- Full records -----

    async def full_line(self, record: T) -> str:
        """Read the record's whole source line, without its terminator."""
        return await asyncio.to_thread(read_line_at, self.path, record.offset)

    async def full_record(self, record: T, decoder: FullRecordDecoder) -> Any:
        """
        Read the record's source line and decode it with `decoder`: a
        callable taking the line, a class with from_line(), or a dataclass
        filled positionally from the CSV cells.
        """
        line = await self.full_line(record)
        try:
            return decode_full(decoder, line)
        except (CsvPartialCacheError, ValueError, TypeError, IndexError, KeyError) as e:
            raise DecodeDetailsError(self.path, record.offset, line) from e

    # ----- Snapshot -----

    @classmethod
    def from_cache(
        cls,
        record_cls: Type[T],
        csv_path: str | os.PathLike,
        cache_path: str | os.PathLike,
        on_progress: Optional[ProgressCallback] = None,
    ) -> "CsvPartialCache[T]":
        """
        Load the index from a snapshot at `cache_path` when it is newer than
        `csv_path`; otherwise build it from the source and (re)write the
        snapshot. The returned index always points at `csv_path`.
        """
        csv_path = os.fspath(csv_path)
        if is_cache_expired(csv_path, cache_path):
            logger.debug("snapshot %s expired, rebuilding", cache_path)
            index = cls.new(record_cls, csv_path, on_progress=on_progress)
            write_snapshot(index.items, cache_path, record_cls)
            Progress(on_progress).emit("cache.write", 100, os.fspath(cache_path))
            return index

        logger.debug("snapshot %s is fresh, loading", cache_path)
        items = read_snapshot(cache_path, record_cls)
        Progress(on_progress).emit("cache.hit", 100, os.fspath(cache_path))
        return cls(csv_path, items)
