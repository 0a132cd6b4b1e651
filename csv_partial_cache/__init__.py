from .index import CsvPartialCache
from .offsets import OffsetType, U8, U16, U32, U64
from .records import PartialRecord, FullRecordDecoder, record_from_json, record_to_json
from .storage import LineOffsetReader, read_line_at, file_modified_at
from .cache import is_cache_expired, read_snapshot, write_snapshot
from .progress import Progress, console_printer
from . import csvline
from .errors import (
    CsvPartialCacheError,
    OpenFileError,
    CreateFileError,
    ReadFileMetadataError,
    ReadLineError,
    SeekOffsetError,
    IntoOffsetError,
    SeekError,
    ReadLineOffsetError,
    DecodeError,
    DecodeDetailsError,
    ReadCacheError,
    WriteCacheError,
)

__all__ = [
    "CsvPartialCache",
    "OffsetType", "U8", "U16", "U32", "U64",
    "PartialRecord", "FullRecordDecoder", "record_from_json", "record_to_json",
    "LineOffsetReader", "read_line_at", "file_modified_at",
    "is_cache_expired", "read_snapshot", "write_snapshot",
    "Progress", "console_printer",
    "csvline",
    "CsvPartialCacheError",
    "OpenFileError", "CreateFileError", "ReadFileMetadataError",
    "ReadLineError", "SeekOffsetError", "IntoOffsetError",
    "SeekError", "ReadLineOffsetError",
    "DecodeError", "DecodeDetailsError",
    "ReadCacheError", "WriteCacheError",
]
