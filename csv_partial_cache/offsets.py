from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class OffsetType:
    """
    Width of the byte offsets stored in partial records.
    A narrower width keeps the index smaller but limits the largest file
    that can be indexed: positions beyond `max` are rejected, never wrapped.
    """
    name: str
    bits: int

    @property
    def max(self) -> int:
        return (1 << self.bits) - 1

    def fits(self, position: int) -> bool:
        return 0 <= position <= self.max

    def convert(self, position: int) -> int:
        """Narrow a raw stream position into this width."""
        if not self.fits(position):
            raise OverflowError(f"offset {position} does not fit into {self.name}")
        return int(position)

    @staticmethod
    def to_position(offset: int) -> int:
        return int(offset)

U8  = OffsetType("u8", 8)
U16 = OffsetType("u16", 16)
U32 = OffsetType("u32", 32)
U64 = OffsetType("u64", 64)
