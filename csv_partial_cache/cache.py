"""
Snapshot files: a persisted copy of an index's partial records.

Layout (JSON Lines):
    {"_t":"header","format":"cpc1","record":"Book","offset_bits":32,"count":N}
    {...record 0...}
    ...
    {...record N-1...}

A snapshot is fresh only while its mtime is strictly newer than the source
file's. The file is written beside its final path and renamed into place,
so readers see either the previous snapshot or the complete new one.
"""
from __future__ import annotations
import json
import logging
import os
from typing import Any, Iterable, Tuple, Type, TypeVar

from .config import DEFAULT_ENCODING, SNAPSHOT_FORMAT, SNAPSHOT_TMP_SUFFIX
from .errors import CreateFileError, OpenFileError, ReadCacheError, WriteCacheError
from .records import record_from_json, record_to_json
from .storage import file_modified_at

HEADER_T = "header"

logger = logging.getLogger(__name__)

R = TypeVar("R")

def is_cache_expired(csv_path: str | os.PathLike, cache_path: str | os.PathLike) -> bool:
    if not os.path.exists(cache_path):
        return True
    csv_modified = file_modified_at(csv_path)
    cache_modified = file_modified_at(cache_path)
    return cache_modified <= csv_modified

def _header(record_cls: type, count: int) -> dict:
    hdr = {
        "_t": HEADER_T,
        "format": SNAPSHOT_FORMAT,
        "record": record_cls.__name__,
        "count": count,
    }
    offset_type = getattr(record_cls, "offset_type", None)
    if offset_type is not None:
        hdr["offset_bits"] = offset_type.bits
    return hdr

def write_snapshot(items: Tuple[Any, ...], cache_path: str | os.PathLike, record_cls: type) -> None:
    path = os.fspath(cache_path)
    tmp = path + SNAPSHOT_TMP_SUFFIX
    try:
        f = open(tmp, "w", encoding=DEFAULT_ENCODING, newline="\n")
    except OSError as e:
        raise CreateFileError(path) from e
    try:
        with f:
            f.write(json.dumps(_header(record_cls, len(items)), ensure_ascii=False))
            f.write("\n")
            for item in items:
                f.write(json.dumps(record_to_json(item), ensure_ascii=False, separators=(",", ":")))
                f.write("\n")
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError, NameError) as e:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise WriteCacheError(path) from e
    logger.debug("snapshot written: %s (%d records)", path, len(items))

def _check_header(path: str, hdr: Any, record_cls: type) -> int:
    if not isinstance(hdr, dict) or hdr.get("_t") != HEADER_T:
        raise ReadCacheError(path, "missing header")
    if hdr.get("format") != SNAPSHOT_FORMAT:
        raise ReadCacheError(path, f"unsupported format {hdr.get('format')!r}")
    if hdr.get("record") != record_cls.__name__:
        raise ReadCacheError(path, f"snapshot holds {hdr.get('record')!r}, not {record_cls.__name__!r}")
    offset_type = getattr(record_cls, "offset_type", None)
    if offset_type is not None and hdr.get("offset_bits") != offset_type.bits:
        raise ReadCacheError(path, f"offset width {hdr.get('offset_bits')} != {offset_type.bits}")
    count = hdr.get("count")
    if not isinstance(count, int) or count < 0:
        raise ReadCacheError(path, "invalid record count")
    return count

def _iter_lines(f: Iterable[str]) -> Iterable[str]:
    for raw in f:
        line = raw.rstrip("\n")
        if line:
            yield line

def read_snapshot(cache_path: str | os.PathLike, record_cls: Type[R]) -> Tuple[R, ...]:
    path = os.fspath(cache_path)
    try:
        f = open(path, "r", encoding=DEFAULT_ENCODING)
    except OSError as e:
        raise OpenFileError(path) from e
    items = []
    with f:
        try:
            lines = _iter_lines(f)
            first = next(lines, None)
            if first is None:
                raise ReadCacheError(path, "empty snapshot")
            count = _check_header(path, json.loads(first), record_cls)
            for line in lines:
                items.append(record_from_json(record_cls, json.loads(line)))
        except (OSError, UnicodeDecodeError, ValueError, TypeError, NameError) as e:
            raise ReadCacheError(path, str(e)) from e
    if len(items) != count:
        raise ReadCacheError(path, f"expected {count} records, found {len(items)}")
    logger.debug("snapshot loaded: %s (%d records)", path, count)
    return tuple(items)
