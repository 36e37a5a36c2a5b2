"""Tests for the limb representations."""

import pytest

from limbvm.bigint.limbs import BigInt3, UnreducedBigInt3, UnreducedBigInt5, pack, split
from limbvm.config import BASE, FELT_PRIME, SECP256K1_PRIME
from limbvm.vm.errors import MalformedInput


def test_split_small():
    assert split(5) == (5, 0, 0)


def test_split_limb_boundaries():
    assert split(BASE) == (0, 1, 0)
    assert split(BASE**2 - 1) == (BASE - 1, BASE - 1, 0)
    assert split(BASE**3 - 1) == (BASE - 1, BASE - 1, BASE - 1)


def test_split_secp256k1_prime():
    d0, d1, d2 = split(SECP256K1_PRIME)
    assert all(0 <= d < BASE for d in (d0, d1, d2))
    assert d0 + d1 * BASE + d2 * BASE**2 == SECP256K1_PRIME


def test_split_too_large():
    with pytest.raises(MalformedInput):
        split(BASE**3)


def test_split_negative():
    with pytest.raises(MalformedInput):
        split(-1)


def test_pack_inverts_split():
    for num in (0, 1, BASE - 1, BASE, SECP256K1_PRIME - 1, BASE**3 - 1):
        assert pack(BigInt3.from_int(num)) == num


def test_pack_signed_limbs():
    value = UnreducedBigInt3(d0=-2, d1=0, d2=0)
    assert pack(value) == -2
    # A limb stored as a field element still reads as negative.
    assert pack(UnreducedBigInt3(d0=FELT_PRIME - 2, d1=0, d2=0)) == -2


def test_pack_five_limbs():
    value = UnreducedBigInt5(d0=1, d1=2, d2=3, d3=4, d4=5)
    assert pack(value) == 1 + 2 * BASE + 3 * BASE**2 + 4 * BASE**3 + 5 * BASE**4


def test_pack_non_canonical_limbs():
    """Limbs above BASE still pack to their weighted sum."""
    assert pack(BigInt3(d0=BASE + 3, d1=0, d2=0)) == BASE + 3


def test_zero_extend():
    x = BigInt3.from_int(12345)
    wide = UnreducedBigInt5.from_bigint3(x)
    assert wide.limbs() == (12345, 0, 0, 0, 0)
    assert pack(wide) == 12345


def test_from_limbs_wrong_count():
    with pytest.raises(MalformedInput):
        BigInt3.from_limbs([1, 2])
    with pytest.raises(MalformedInput):
        UnreducedBigInt5.from_limbs([1, 2, 3])


def test_from_limbs_rejects_non_integers():
    with pytest.raises(MalformedInput):
        BigInt3.from_limbs([1, 2.0, 3])


def test_values_are_immutable():
    x = BigInt3.from_int(7)
    with pytest.raises(AttributeError):
        x.d0 = 8
