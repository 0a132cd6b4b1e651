from __future__ import annotations
import dataclasses
import functools
import types
import typing
from typing import Any, Callable, ClassVar, Protocol, Tuple, Type, TypeVar, Union

from .csvline import from_str
from .offsets import OffsetType

R = TypeVar("R")
D = TypeVar("D")

class PartialRecord(Protocol):
    """
    Memory-resident part of a row plus the byte offset of its line.

    Implementations choose `offset_type` to trade index size for the largest
    indexable file, and build themselves from one line in `from_line_offset`.
    """
    offset_type: ClassVar[OffsetType]
    offset: int

    @classmethod
    def from_line_offset(cls, line: str, offset: int) -> "PartialRecord":
        ...

# Full-record decoders: a plain callable, a class with from_line(), or a dataclass
FullRecordDecoder = Union[Callable[[str], D], Type[D]]

def decode_full(decoder: FullRecordDecoder, line: str) -> Any:
    from_line = getattr(decoder, "from_line", None)
    if callable(from_line):
        return from_line(line)
    if isinstance(decoder, type) and dataclasses.is_dataclass(decoder):
        return from_str(decoder, line)
    return decoder(line)

_JSON_SCALARS = (str, int, float, bool)

def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is Union or origin is types.UnionType

def _check_json_type(tp: Any) -> None:
    """Reject annotations whose values would not come back equal from JSON."""
    if tp in _JSON_SCALARS or tp is type(None):
        return
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        _field_types(tp)
        return
    args = typing.get_args(tp)
    if _is_union(tp):
        inner = [a for a in args if a is not type(None)]
        if len(inner) != 1:
            raise TypeError(f"ambiguous union {tp!r} can't be restored from a snapshot")
        _check_json_type(inner[0])
        return
    origin = typing.get_origin(tp)
    if origin is tuple and args:
        for a in (args[:1] if len(args) == 2 and args[1] is Ellipsis else args):
            _check_json_type(a)
        return
    if origin is list and args:
        _check_json_type(args[0])
        return
    if origin is dict and args and args[0] is str:
        _check_json_type(args[1])
        return
    raise TypeError(f"field type {tp!r} can't be stored in a snapshot")

@functools.lru_cache(maxsize=None)
def _field_types(cls: type) -> Tuple[Tuple[str, Any], ...]:
    hints = typing.get_type_hints(cls)
    out = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        _check_json_type(hints[f.name])
        out.append((f.name, hints[f.name]))
    return tuple(out)

def _restore(tp: Any, value: Any) -> Any:
    if tp is type(None):
        if value is not None:
            raise TypeError(f"expected null, got {value!r}")
        return None
    if tp is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if tp in _JSON_SCALARS:
        if not isinstance(value, tp) or (tp is int and isinstance(value, bool)):
            raise TypeError(f"expected {tp.__name__}, got {value!r}")
        return value
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _from_fields(tp, value)
    if _is_union(tp):
        if value is None:
            return None
        inner = [a for a in typing.get_args(tp) if a is not type(None)]
        return _restore(inner[0], value)
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is dict:
        if not isinstance(value, dict):
            raise TypeError(f"expected an object, got {value!r}")
        return {k: _restore(args[1], v) for k, v in value.items()}
    if not isinstance(value, list):
        raise TypeError(f"expected an array, got {value!r}")
    if origin is list:
        return [_restore(args[0], v) for v in value]
    if len(args) == 2 and args[1] is Ellipsis:
        return tuple(_restore(args[0], v) for v in value)
    if len(args) != len(value):
        raise TypeError(f"expected {len(args)} items, got {len(value)}")
    return tuple(_restore(a, v) for a, v in zip(args, value))

def _from_fields(cls: type, obj: Any) -> Any:
    if not isinstance(obj, dict):
        raise TypeError(f"expected an object for {cls.__name__}, got {type(obj).__name__}")
    values = {}
    for name, tp in _field_types(cls):
        if name not in obj:
            raise TypeError(f"missing field {name!r} for {cls.__name__}")
        values[name] = _restore(tp, obj[name])
    return cls(**values)

def record_to_json(record: Any) -> Any:
    to_json = getattr(record, "to_json", None)
    if callable(to_json):
        return to_json()
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        _field_types(type(record))
        return dataclasses.asdict(record)
    raise TypeError(f"{type(record).__name__} is neither a dataclass nor defines to_json()")

def record_from_json(cls: Type[R], obj: Any) -> R:
    """
    Rebuild a record written by record_to_json. Dataclass fields are
    converted back by annotation, so tuples and nested dataclasses come
    back as the same types they were written from.
    """
    from_json = getattr(cls, "from_json", None)
    if callable(from_json):
        return from_json(obj)
    if dataclasses.is_dataclass(cls):
        return _from_fields(cls, obj)
    if not isinstance(obj, dict):
        raise TypeError(f"expected an object for {cls.__name__}, got {type(obj).__name__}")
    return cls(**obj)
