"""Range-check builtin.

A ``RangeCheckSegment`` is the append-only memory segment behind the
bound gadget.  Every check writes one cell and advances ``ptr`` by one;
cells are never rewritten, so the segment doubles as a trace of every
bound the computation relied on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from limbvm.config import CARRY_SHIFT, RC_BOUND
from limbvm.vm import felt
from limbvm.vm.errors import OracleInconsistency


@dataclass(frozen=True)
class RangeCheckCell:
    index: int
    value: int
    label: str


def shift_signed(value: int) -> int:
    """Map a signed carry onto the non-negative range-check domain.

    Carries in [-CARRY_SHIFT, CARRY_SHIFT) land in [0, RC_BOUND); any other
    field element lands at or above RC_BOUND.
    """
    return felt.add(value, CARRY_SHIFT)


class RangeCheckSegment:
    """Append-only segment of range-checked cells."""

    def __init__(self, bound: int = RC_BOUND) -> None:
        self.bound = bound
        self._cells: List[RangeCheckCell] = []

    @property
    def ptr(self) -> int:
        """Index of the next free cell."""
        return len(self._cells)

    def assert_in_bound(self, value: int, label: str = "") -> int:
        """Write *value* to the next cell and check ``0 <= value < bound``.

        Returns the index of the written cell.  Raises
        ``OracleInconsistency`` when the value is out of range.
        """
        cell = RangeCheckCell(index=self.ptr, value=felt.reduce(value), label=label)
        self._cells.append(cell)
        if cell.value >= self.bound:
            where = f" ({label})" if label else ""
            raise OracleInconsistency(
                f"Range check #{cell.index}{where} failed: value is not below {self.bound:#x}"
            )
        return cell.index

    def cells(self, label: Optional[str] = None) -> List[RangeCheckCell]:
        """Return the written cells, optionally only those with *label*."""
        if label is None:
            return list(self._cells)
        return [c for c in self._cells if c.label == label]
