"""Fixed-size bit set stored in 64-bit chunks."""

from __future__ import annotations

_MASK = (1 << 64) - 1


class Bitset:
    """A set of bit positions; bits 0-63 live in chunk 0, and so on."""

    __slots__ = ("_chunks",)

    def __init__(self, nbits: int = 0) -> None:
        self._chunks = [0] * -(-nbits // 64)

    def __len__(self) -> int:
        return len(self._chunks) * 64

    def _index(self, pos: int) -> tuple[int, int]:
        if pos < 0 or pos >= len(self):
            raise IndexError(f"bit {pos} out of range")
        return divmod(pos, 64)

    def clone(self) -> "Bitset":
        copy = Bitset()
        copy._chunks = list(self._chunks)
        return copy

    def set(self, pos: int) -> "Bitset":
        major, minor = self._index(pos)
        self._chunks[major] |= 1 << minor
        return self

    def clear(self, pos: int) -> "Bitset":
        major, minor = self._index(pos)
        self._chunks[major] &= ~(1 << minor) & _MASK
        return self

    def get(self, pos: int) -> bool:
        major, minor = self._index(pos)
        return bool(self._chunks[major] >> minor & 1)

    def popcount(self) -> int:
        return sum(bin(chunk).count("1") for chunk in self._chunks)

    def hash_key(self) -> int:
        """A cheap hash: the popcount XOR-ed with every chunk."""
        result = self.popcount()
        for chunk in self._chunks:
            result ^= chunk
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitset):
            return NotImplemented
        return self._chunks == other._chunks

    __hash__ = None  # type: ignore[assignment]