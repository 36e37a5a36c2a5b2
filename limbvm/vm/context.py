"""Execution context threaded through every verified operation.

The context owns the two resources the arithmetic consumes: the
range-check segment (a cursor that only moves forward) and the oracle
that supplies untrusted witnesses.
"""

from __future__ import annotations

from typing import Optional

from limbvm.hints.oracle import HonestOracle, Oracle
from limbvm.vm.range_check import RangeCheckSegment


class ExecutionContext:
    """Per-computation mutable state."""

    def __init__(
        self,
        oracle: Optional[Oracle] = None,
        range_check: Optional[RangeCheckSegment] = None,
    ) -> None:
        self.oracle: Oracle = oracle if oracle is not None else HonestOracle()
        self.range_check = range_check if range_check is not None else RangeCheckSegment()
