from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import ClassVar

import pytest
from csv_partial_cache import (
    CsvPartialCache, csvline, U8, U32, OffsetType,
    DecodeError, DecodeDetailsError, IntoOffsetError, OpenFileError,
)

CSV = (
    "id,name,year,country\n"
    "1,Alpha,1999,NL\n"
    "3,Bravo,2004,\"Tonga, Kingdom of\"\r\n"
    "5,Charlie,2011,US\n"
    "8,Delta,2020,FR"
)

@dataclass(frozen=True)
class Item:
    id: int
    name: str
    offset: int
    offset_type: ClassVar[OffsetType] = U32

    @classmethod
    def from_line_offset(cls, line: str, offset: int) -> "Item":
        cells = csvline.split(line)
        if len(cells) != 4:
            raise DecodeError(line, "expected 4 columns")
        return cls(int(cells[0]), cells[1], offset)

@dataclass
class Details:
    id: int
    name: str
    year: int
    country: str

def make_csv(tmp_path, text=CSV):
    p = tmp_path / "items.csv"
    p.write_bytes(text.encode("utf-8"))
    return p

def test_build_skips_header(tmp_path):
    p = make_csv(tmp_path)
    index = CsvPartialCache.new(Item, p)
    assert index.path == str(p)
    assert len(index) == 4
    assert [it.id for it in index] == [1, 3, 5, 8]
    assert all(it.name != "name" for it in index)
    assert index[0].offset == len("id,name,year,country\n")

def test_header_never_decoded_even_if_valid(tmp_path):
    p = make_csv(tmp_path, "0,Header,1,XX\n1,Alpha,1999,NL\n")
    index = CsvPartialCache.new(Item, p)
    assert [it.id for it in index] == [1]

def test_items_are_immutable(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    assert isinstance(index.items, tuple)

def test_find(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    key = lambda it: it.id
    for wanted in (1, 3, 5, 8):
        found = index.find(wanted, key)
        assert found is not None and found.id == wanted
    for missing in (0, 2, 4, 9, 100):
        assert index.find(missing, key) is None

def test_find_empty_index(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path, "id,name,year,country\n"))
    assert len(index) == 0
    assert index.find(1, lambda it: it.id) is None

def test_find_duplicates_returns_a_match(tmp_path):
    text = "h\n1,A,1,x\n2,B,1,x\n2,C,1,x\n2,D,1,x\n3,E,1,x\n"
    index = CsvPartialCache.new(Item, make_csv(tmp_path, text))
    found = index.find(2, lambda it: it.id)
    assert found is not None and found.name in {"B", "C", "D"}

def test_is_sorted_by(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    assert index.is_sorted_by(lambda it: it.id)
    assert not index.is_sorted_by(lambda it: -it.id)

def test_decode_failure_aborts_build(tmp_path):
    text = "h\n1,A,1,x\nbroken\n3,C,1,x\n"
    with pytest.raises(DecodeError) as exc:
        CsvPartialCache.new(Item, make_csv(tmp_path, text))
    assert exc.value.line == "broken"

def test_foreign_decoder_exception_becomes_decode_error(tmp_path):
    text = "h\nnot-a-number,A,1,x\n"
    with pytest.raises(DecodeError):
        CsvPartialCache.new(Item, make_csv(tmp_path, text))

def test_offset_overflow_aborts_build(tmp_path):
    @dataclass(frozen=True)
    class Tiny:
        offset: int
        offset_type: ClassVar[OffsetType] = U8

        @classmethod
        def from_line_offset(cls, line, offset):
            return cls(offset)

    text = "h\n" + "".join(f"{'y' * 99}\n" for _ in range(5))
    with pytest.raises(IntoOffsetError):
        CsvPartialCache.new(Tiny, make_csv(tmp_path, text))

def test_missing_file(tmp_path):
    with pytest.raises(OpenFileError):
        CsvPartialCache.new(Item, tmp_path / "nope.csv")

def test_full_line_and_record(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    row = index.find(3, lambda it: it.id)
    assert asyncio.run(index.full_line(row)) == '3,Bravo,2004,"Tonga, Kingdom of"'
    details = asyncio.run(index.full_record(row, Details))
    assert details == Details(3, "Bravo", 2004, "Tonga, Kingdom of")

def test_full_record_with_callable(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    row = index.find(8, lambda it: it.id)
    cells = asyncio.run(index.full_record(row, csvline.split))
    assert cells == ["8", "Delta", "2020", "FR"]

def test_full_record_concurrent(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))

    async def fetch_all():
        rows = list(index) * 10
        return rows, await asyncio.gather(*(index.full_record(r, Details) for r in rows))

    rows, got = asyncio.run(fetch_all())
    assert [d.id for d in got] == [r.id for r in rows]
    assert [d.name for d in got] == [r.name for r in rows]

def test_full_record_decode_details(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    row = index.find(5, lambda it: it.id)

    @dataclass
    class Wrong:
        id: int
        year: int

    with pytest.raises(DecodeDetailsError) as exc:
        asyncio.run(index.full_record(row, Wrong))
    err = exc.value
    assert err.path == index.path
    assert err.offset == row.offset
    assert err.line == "5,Charlie,2011,US"
    assert isinstance(err.__cause__, DecodeError)

def test_full_record_file_gone(tmp_path):
    p = make_csv(tmp_path)
    index = CsvPartialCache.new(Item, p)
    p.unlink()
    with pytest.raises(OpenFileError):
        asyncio.run(index.full_line(index[0]))
    # the index itself is still usable
    assert index.find(1, lambda it: it.id) is not None

def test_progress_events(tmp_path):
    events = []
    CsvPartialCache.new(Item, make_csv(tmp_path), on_progress=events.append)
    phases = [e["phase"] for e in events]
    assert phases[0] == "build.start"
    assert "build.scan" in phases
    assert phases[-1] == "build.done"
    assert events[-1]["pct"] == 100
    assert all(0 <= e["pct"] <= 100 for e in events)

def test_missing_file_with_progress(tmp_path):
    events = []
    with pytest.raises(OpenFileError):
        CsvPartialCache.new(Item, tmp_path / "nope.csv", on_progress=events.append)

def test_full_record_decoder_index_error(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    row = index.find(1, lambda it: it.id)
    with pytest.raises(DecodeDetailsError) as exc:
        asyncio.run(index.full_record(row, lambda line: csvline.split(line)[5]))
    assert exc.value.offset == row.offset
    assert exc.value.line == "1,Alpha,1999,NL"
    assert isinstance(exc.value.__cause__, IndexError)

def test_full_record_decoder_key_error(tmp_path):
    index = CsvPartialCache.new(Item, make_csv(tmp_path))
    row = index.find(1, lambda it: it.id)
    with pytest.raises(DecodeDetailsError):
        asyncio.run(index.full_record(row, lambda line: {}[line]))
