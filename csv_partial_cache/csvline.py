"""
Single-line CSV decoding helpers for writing record decoders.
`from_str` fills a dataclass positionally, one cell per field, converting
each cell according to the field's annotation.
"""
from __future__ import annotations
import csv
import dataclasses
import types
import typing
from typing import Any, Callable, Dict, List, Type, TypeVar, Union

from .config import DEFAULT_DELIMITER
from .errors import DecodeError

T = TypeVar("T")

_TRUE = {"true", "1", "yes", "y", "t"}
_FALSE = {"false", "0", "no", "n", "f"}

def split(line: str, delimiter: str = DEFAULT_DELIMITER) -> List[str]:
    """Split one CSV line into its cells, honouring quoting."""
    try:
        rows = list(csv.reader([line], delimiter=delimiter, strict=True))
    except csv.Error as e:
        raise DecodeError(line, str(e)) from e
    if len(rows) != 1:
        raise DecodeError(line, f"expected one row, got {len(rows)}")
    return rows[0]

def _parse_bool(cell: str) -> bool:
    v = cell.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"invalid bool: {cell!r}")

_SCALARS: Dict[Any, Callable[[str], Any]] = {
    str: str,
    int: lambda c: int(c.strip()),
    float: lambda c: float(c.strip()),
    bool: _parse_bool,
}

def _converter(tp: Any) -> Callable[[str], Any]:
    if tp in _SCALARS:
        return _SCALARS[tp]
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            inner = _converter(args[0])
            return lambda c: None if c == "" else inner(c)
    raise TypeError(f"unsupported field type for csv decoding: {tp!r}")

def from_str(cls: Type[T], line: str, delimiter: str = DEFAULT_DELIMITER) -> T:
    """Decode `line` into dataclass `cls`."""
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls!r} is not a dataclass")
    hints = typing.get_type_hints(cls)
    fields = [f for f in dataclasses.fields(cls) if f.init]
    cells = split(line, delimiter)
    if len(cells) != len(fields):
        raise DecodeError(line, f"expected {len(fields)} fields, got {len(cells)}")
    values: Dict[str, Any] = {}
    for f, cell in zip(fields, cells):
        try:
            values[f.name] = _converter(hints[f.name])(cell)
        except ValueError as e:
            raise DecodeError(line, f"field {f.name!r}: {e}") from e
    return cls(**values)
