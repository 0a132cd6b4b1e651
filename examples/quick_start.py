#!/usr/bin/env python3
# Example usage of csv_partial_cache
# Keeps (id, name) of every row in memory and fetches full rows from disk on demand.

import asyncio
from dataclasses import dataclass
from typing import ClassVar

from csv_partial_cache import CsvPartialCache, OffsetType, U32, console_printer, csvline

@dataclass(frozen=True)
class Person:
    id: int
    name: str
    offset: int
    offset_type: ClassVar[OffsetType] = U32  # files up to 4 GiB

    @classmethod
    def from_line_offset(cls, line: str, offset: int) -> "Person":
        id_, name, *_ = csvline.split(line)
        return cls(int(id_), name, offset)

@dataclass
class PersonDetails:
    id: int
    name: str
    age: int
    city: str

def write_demo_csv(path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write("id,name,age,city\n")
        f.write("1,Alice,33,Wien\n")
        f.write("2,Bob,41,Graz\n")
        f.write('3,Carol,29,"Linz, Upper Austria"\n')

async def main() -> None:
    write_demo_csv("people.csv")

    # First run parses the CSV and writes people.idx.json; later runs load the snapshot
    index = CsvPartialCache.from_cache(Person, "people.csv", "people.idx.json", on_progress=console_printer())
    print("Indexed rows:", len(index))

    # Lookups are pure in-memory binary searches (rows are sorted by id)
    row = index.find(3, lambda p: p.id)
    print("Partial:", row)

    # Full rows are read lazily by byte offset
    details = await index.full_record(row, PersonDetails)
    print("Full:", details)

    everyone = await asyncio.gather(*(index.full_record(p, PersonDetails) for p in index))
    print("Cities:", [d.city for d in everyone])

if __name__ == "__main__":
    asyncio.run(main())
