"""Multi-limb integer representations.

Every value is read as ``d0 + d1*BASE + d2*BASE**2 (+ d3*BASE**3 + d4*BASE**4)``
with ``BASE = 2**86``:

  BigInt3           – canonical 3-limb value, limbs in [0, 3*BASE)
  UnreducedBigInt3  – 3 limbs, unrestricted (may be negative)
  UnreducedBigInt5  – 5 limbs, wide enough for the exact product of two
                      3-limb values

Limbs are stored as plain ints.  On the verified path they are read as
field elements; ``pack`` reads them as signed integers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from limbvm.config import BASE, N_LIMBS
from limbvm.vm import felt
from limbvm.vm.errors import MalformedInput


def split(num: int) -> Tuple[int, int, int]:
    """Decompose a non-negative integer into three limbs in [0, BASE)."""
    if num < 0:
        raise MalformedInput(f"Cannot split negative value {num}")
    limbs = []
    for _ in range(N_LIMBS):
        num, residue = divmod(num, BASE)
        limbs.append(residue)
    if num != 0:
        raise MalformedInput(f"Value does not fit in {N_LIMBS} limbs of 2**86")
    return limbs[0], limbs[1], limbs[2]


def _as_limbs(values: Iterable[int], count: int) -> Tuple[int, ...]:
    limbs = tuple(values)
    if len(limbs) != count:
        raise MalformedInput(f"Expected {count} limbs, got {len(limbs)}")
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in limbs):
        raise MalformedInput("Limbs must be integers")
    return limbs


@dataclass(frozen=True)
class BigInt3:
    """Canonical 3-limb value."""

    d0: int
    d1: int
    d2: int

    @classmethod
    def from_int(cls, num: int) -> "BigInt3":
        return cls(*split(num))

    @classmethod
    def from_limbs(cls, limbs: Iterable[int]) -> "BigInt3":
        return cls(*_as_limbs(limbs, 3))

    def limbs(self) -> Tuple[int, int, int]:
        return (self.d0, self.d1, self.d2)


@dataclass(frozen=True)
class UnreducedBigInt3:
    """3-limb value whose limbs may be negative or exceed canonical bounds."""

    d0: int
    d1: int
    d2: int

    @classmethod
    def from_int(cls, num: int) -> "UnreducedBigInt3":
        return cls(*split(num))

    @classmethod
    def from_limbs(cls, limbs: Iterable[int]) -> "UnreducedBigInt3":
        return cls(*_as_limbs(limbs, 3))

    def limbs(self) -> Tuple[int, int, int]:
        return (self.d0, self.d1, self.d2)


@dataclass(frozen=True)
class UnreducedBigInt5:
    """5-limb accumulator."""

    d0: int
    d1: int
    d2: int
    d3: int
    d4: int

    @classmethod
    def from_bigint3(cls, x: Union[BigInt3, UnreducedBigInt3]) -> "UnreducedBigInt5":
        """Zero-extend a 3-limb value."""
        return cls(d0=x.d0, d1=x.d1, d2=x.d2, d3=0, d4=0)

    @classmethod
    def from_limbs(cls, limbs: Iterable[int]) -> "UnreducedBigInt5":
        return cls(*_as_limbs(limbs, 5))

    def limbs(self) -> Tuple[int, int, int, int, int]:
        return (self.d0, self.d1, self.d2, self.d3, self.d4)


LimbValue = Union[BigInt3, UnreducedBigInt3, UnreducedBigInt5]


def pack(value: LimbValue) -> int:
    """Return the weighted limb sum, each limb read as a signed integer."""
    return sum(felt.as_int(limb) * BASE**i for i, limb in enumerate(value.limbs()))
