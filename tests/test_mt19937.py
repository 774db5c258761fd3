import random

from core.mt19937 import MT19937


def test_reference_first_output():
    assert MT19937(5489).genrand_int32() == 3499211612


def test_reference_ten_thousandth_output():
    mt = MT19937(5489)
    for _ in range(9999):
        mt.genrand_int32()
    assert mt.genrand_int32() == 4123659995


def test_matches_python_random_with_same_state():
    mt = MT19937(0xA9C36DE1)
    rng = random.Random()
    rng.setstate(mt.getstate())
    expected = [rng.getrandbits(32) for _ in range(1500)]
    assert [mt.genrand_int32() for _ in range(1500)] == expected


def test_seed_is_truncated_to_32_bits():
    a = MT19937(0x1_0000_0001)
    b = MT19937(1)
    assert [a.genrand_int32() for _ in range(5)] == [b.genrand_int32() for _ in range(5)]


def test_keystream_is_low_bytes():
    mt = MT19937(42)
    words = [mt.genrand_int32() & 0xFF for _ in range(700)]
    assert MT19937(42).keystream(700) == bytes(words)
