"""Native field arithmetic of the execution environment.

Limbs, carries and the terminal residue of the carry chain are felts:
Python ints in [0, FELT_PRIME).  Every helper accepts arbitrary ints
(negative ones included) and returns a reduced felt.
"""

from __future__ import annotations

from limbvm.config import FELT_PRIME


def reduce(a: int) -> int:
    """Map an integer to its felt."""
    return a % FELT_PRIME


def as_int(a: int) -> int:
    """Read a felt as a signed integer in (-p/2, p/2]."""
    a = reduce(a)
    return a - FELT_PRIME if a > FELT_PRIME // 2 else a


def add(a: int, b: int) -> int:
    return reduce(a + b)


def sub(a: int, b: int) -> int:
    return reduce(a - b)


def neg(a: int) -> int:
    return reduce(-a)


def mul(a: int, b: int) -> int:
    return reduce(a * b)


def div(a: int, b: int) -> int:
    """Felt division.

    Unlike integer division this never rounds: if *b* does not divide *a*
    over the integers the result is some large felt.
    """
    if reduce(b) == 0:
        raise ZeroDivisionError("Division by the zero felt")
    return mul(a, pow(b, -1, FELT_PRIME))


def inv(a: int) -> int:
    return div(1, a)
