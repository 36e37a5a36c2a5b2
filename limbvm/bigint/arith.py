"""Verified modular arithmetic on 3-limb values.

The verifier never divides.  To compute ``res = x / y (mod p)`` it:

    1. Asks the oracle for res and range-checks its limbs.
    2. Asks the oracle for k = (res*y - x) / p, as a magnitude plus a
       sign flag, and range-checks k's limbs the same way.
    3. Forms res*y and k*p with schoolbook multiplication (5 limbs each).
    4. Walks the limbs from low to high checking that

           s*(k*p) - res*y + x == 0,      s = 2*flag - 1

       holds with a base-2**86 carry chain.  Each carry is computed in the
       native field (division by BASE is field division, so an inexact
       carry becomes a huge element), shifted by 2**127 and range-checked.
       The top limb must cancel exactly.

Any failed check raises ``OracleInconsistency``; a result is returned
only if the whole chain holds.

Addition, subtraction and multiplication build a 5-limb accumulator and
reduce it with divisor 1.
"""

from __future__ import annotations

from typing import Callable, Union

from limbvm.bigint.limbs import BigInt3, UnreducedBigInt3, UnreducedBigInt5, pack
from limbvm.config import BASE, MAX_SUM
from limbvm.hints.oracle import Witness
from limbvm.vm import felt
from limbvm.vm.context import ExecutionContext
from limbvm.vm.errors import MalformedInput, OracleInconsistency
from limbvm.vm.range_check import shift_signed

Operand = Union[BigInt3, UnreducedBigInt3]

ONE = UnreducedBigInt3(d0=1, d1=0, d2=0)


# --------------------------------------------------------------------------
# Witness acquisition
# --------------------------------------------------------------------------


def nondet_bigint3(ctx: ExecutionContext, witness: Witness) -> BigInt3:
    """Accept an untrusted witness as a ``BigInt3``.

    Uses four range-check cells: the slack ``MAX_SUM - (d0 + d1 + d2)``
    and then each limb.  Together they bound every limb by
    ``3 * (BASE - 1)``.  Nothing forces the limbs below ``BASE``; an
    honest oracle just happens to produce them that way.
    """
    try:
        limbs = BigInt3.from_limbs(witness.limbs)
    except MalformedInput as exc:
        raise OracleInconsistency(f"Witness has the wrong shape: {exc}") from exc
    res = BigInt3.from_limbs(felt.reduce(limb) for limb in limbs.limbs())

    rc = ctx.range_check
    limb_sum = felt.add(felt.add(res.d0, res.d1), res.d2)
    rc.assert_in_bound(felt.sub(MAX_SUM, limb_sum), "limb_sum")
    rc.assert_in_bound(res.d0, "d0")
    rc.assert_in_bound(res.d1, "d1")
    rc.assert_in_bound(res.d2, "d2")
    return res


def _consult(request: Callable[..., Witness], *args: int) -> Witness:
    """Run an oracle request; an oracle that cannot answer fails the check."""
    try:
        return request(*args)
    except MalformedInput as exc:
        raise OracleInconsistency(f"Oracle could not produce a witness: {exc}") from exc


# --------------------------------------------------------------------------
# Multiplication (no checks)
# --------------------------------------------------------------------------


def bigint_mul(x: Operand, y: Operand) -> UnreducedBigInt5:
    """Exact 5-limb product of two 3-limb values."""
    return UnreducedBigInt5(
        d0=x.d0 * y.d0,
        d1=x.d0 * y.d1 + x.d1 * y.d0,
        d2=x.d0 * y.d2 + x.d1 * y.d1 + x.d2 * y.d0,
        d3=x.d1 * y.d2 + x.d2 * y.d1,
        d4=x.d2 * y.d2,
    )


def bigint_sqr(x: Operand) -> UnreducedBigInt5:
    """Exact 5-limb square of a 3-limb value."""
    return UnreducedBigInt5(
        d0=x.d0 * x.d0,
        d1=2 * x.d0 * x.d1,
        d2=2 * x.d0 * x.d2 + x.d1 * x.d1,
        d3=2 * x.d1 * x.d2,
        d4=x.d2 * x.d2,
    )


# --------------------------------------------------------------------------
# Modular reduction
# --------------------------------------------------------------------------


def bigint_div_mod(
    ctx: ExecutionContext,
    x: UnreducedBigInt5,
    y: UnreducedBigInt3,
    p: BigInt3,
) -> BigInt3:
    """Return ``res`` with ``res * y == x (mod p)``, verified.

    Consumes twelve range-check cells: four for ``res``, four for ``k``
    and one per carry.
    """
    x_int, y_int, p_int = pack(x), pack(y), pack(p)

    res = nondet_bigint3(ctx, _consult(ctx.oracle.div_mod, x_int, y_int, p_int))

    k_witness = _consult(ctx.oracle.quotient, pack(res), x_int, y_int, p_int)
    k = nondet_bigint3(ctx, k_witness)
    flag = k_witness.flag
    if not isinstance(flag, int) or felt.mul(flag, flag) != felt.reduce(flag):
        raise OracleInconsistency("Sign flag is not boolean")
    sign = felt.sub(felt.mul(2, flag), 1)

    res_y = bigint_mul(y, res)
    k_p = bigint_mul(k, p)
    _verify_carry_chain(ctx, x, res_y, k_p, sign)
    return res


def _verify_carry_chain(
    ctx: ExecutionContext,
    x: UnreducedBigInt5,
    res_y: UnreducedBigInt5,
    k_p: UnreducedBigInt5,
    sign: int,
) -> None:
    """Check ``sign*k_p - res_y + x == 0`` limb by limb."""
    carry = 0
    limbs = list(zip(k_p.limbs(), res_y.limbs(), x.limbs()))
    for i, (kp_i, ry_i, x_i) in enumerate(limbs[:-1]):
        digit = felt.add(felt.sub(felt.mul(sign, kp_i), ry_i), felt.add(x_i, carry))
        carry = felt.div(digit, BASE)
        ctx.range_check.assert_in_bound(shift_signed(carry), f"carry{i}")

    kp_top, ry_top, x_top = limbs[-1]
    residue = felt.add(felt.sub(felt.mul(sign, kp_top), ry_top), felt.add(x_top, carry))
    if residue != 0:
        raise OracleInconsistency("Carry chain does not close: top limb residue is nonzero")


# --------------------------------------------------------------------------
# Composed operations
# --------------------------------------------------------------------------


def add_mod(ctx: ExecutionContext, x: BigInt3, y: BigInt3, p: BigInt3) -> BigInt3:
    """(x + y) mod p."""
    acc = UnreducedBigInt5(d0=x.d0 + y.d0, d1=x.d1 + y.d1, d2=x.d2 + y.d2, d3=0, d4=0)
    return bigint_div_mod(ctx, acc, ONE, p)


def sub_mod(ctx: ExecutionContext, x: BigInt3, y: BigInt3, p: BigInt3) -> BigInt3:
    """(x - y) mod p."""
    acc = UnreducedBigInt5(d0=x.d0 - y.d0, d1=x.d1 - y.d1, d2=x.d2 - y.d2, d3=0, d4=0)
    return bigint_div_mod(ctx, acc, ONE, p)


def mul_mod(ctx: ExecutionContext, x: BigInt3, y: BigInt3, p: BigInt3) -> BigInt3:
    """(x * y) mod p."""
    return bigint_div_mod(ctx, bigint_mul(x, y), ONE, p)


def sqr_mod(ctx: ExecutionContext, x: BigInt3, p: BigInt3) -> BigInt3:
    """x**2 mod p."""
    return bigint_div_mod(ctx, bigint_sqr(x), ONE, p)


def div_mod(ctx: ExecutionContext, x: BigInt3, y: BigInt3, p: BigInt3) -> BigInt3:
    """x / y mod p.  Fails if y is zero mod p."""
    divisor = UnreducedBigInt3(d0=y.d0, d1=y.d1, d2=y.d2)
    return bigint_div_mod(ctx, UnreducedBigInt5.from_bigint3(x), divisor, p)
