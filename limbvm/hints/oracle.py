"""Witness oracles.

The verified arithmetic never divides.  Instead it asks an oracle for a
candidate answer and checks the candidate with a carry chain.  An oracle
is anything implementing the ``Oracle`` protocol; nothing it returns is
trusted.

Two witnesses are requested per reduction:

    1. div_mod:   res = x / y  (mod p)
    2. quotient:  k = (res*y - x) / p  over the integers, returned as its
                  magnitude plus a sign flag (1 if k > 0, else 0)

``HonestOracle`` computes both in-process.  ``limbvm.hints.client``
provides an oracle backed by the hint server.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple

from limbvm.bigint.limbs import split
from limbvm.config import BASE
from limbvm.vm.errors import MalformedInput


@dataclass(frozen=True)
class Witness:
    """An untrusted 3-limb value plus a sign flag."""

    limbs: Tuple[int, int, int]
    flag: int = 1

    @classmethod
    def from_int(cls, value: int, flag: int = 1) -> "Witness":
        return cls(limbs=split(value), flag=flag)

    @property
    def value(self) -> int:
        return sum(limb * BASE**i for i, limb in enumerate(self.limbs))


class Oracle(Protocol):
    def div_mod(self, x: int, y: int, p: int) -> Witness:
        ...

    def quotient(self, res: int, x: int, y: int, p: int) -> Witness:
        ...


def div_mod(x: int, y: int, p: int) -> int:
    """Return the unique ``r`` in [0, p) with ``r * y == x (mod p)``."""
    if y % p == 0:
        raise MalformedInput("Division by zero modulo p")
    try:
        y_inv = pow(y % p, -1, p)
    except ValueError as exc:
        raise MalformedInput("y is not invertible modulo p") from exc
    return (x % p) * y_inv % p


def safe_div(a: int, b: int) -> int:
    """Exact integer division; raises if *b* does not divide *a*."""
    q, r = divmod(a, b)
    if r != 0:
        raise MalformedInput(f"{b} does not divide {a}")
    return q


class HonestOracle:
    """Computes witnesses with plain arbitrary-precision arithmetic."""

    def div_mod(self, x: int, y: int, p: int) -> Witness:
        return Witness.from_int(div_mod(x, y, p))

    def quotient(self, res: int, x: int, y: int, p: int) -> Witness:
        k = safe_div(res * y - x, p)
        if k > 0:
            return Witness.from_int(k, flag=1)
        return Witness.from_int(-k, flag=0)
