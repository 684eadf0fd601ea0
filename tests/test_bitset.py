import pytest

from distlab.porcupine.bitset import Bitset


def test_set_get_clear():
    b = Bitset(100)
    assert not b.get(70)
    assert b.set(70) is b
    assert b.get(70)
    b.clear(70)
    assert not b.get(70)


def test_size_rounds_up_to_chunks():
    assert len(Bitset(65)) == 128
    assert len(Bitset(64)) == 64


def test_clone_is_independent():
    b = Bitset(10).set(3)
    c = b.clone().set(4)
    assert b.get(3) and not b.get(4)
    assert c.get(3) and c.get(4)
    assert b != c


def test_popcount_and_equality():
    b = Bitset(130)
    for pos in (0, 63, 64, 129):
        b.set(pos)
    assert b.popcount() == 4
    c = Bitset(130)
    for pos in (129, 64, 63, 0):
        c.set(pos)
    assert b == c
    assert b.hash_key() == c.hash_key()


def test_different_sizes_unequal():
    assert Bitset(10) != Bitset(100)


def test_out_of_range():
    with pytest.raises(IndexError):
        Bitset(10).get(64)
    with pytest.raises(IndexError):
        Bitset(10).set(-1)