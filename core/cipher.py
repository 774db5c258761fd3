# core/cipher.py

"""Seeded XOR stream applied to every compressed entry payload."""
import random

from core.mt19937 import MT19937

KEY_MASK = 0xA9C36DE1
WRITER_SEED = 0


def derive_key(seed: int) -> int:
    """Turn an entry's stored seed into the generator key (32-bit wrap)."""
    return ((seed << 7) ^ KEY_MASK) & 0xFFFFFFFF


def keystream(seed: int, length: int) -> bytes:
    """
    Low byte of the first `length` generator outputs for `seed`.

    The generator is seeded with MT19937 and its state handed to
    random.Random, whose getrandbits() emits the same 32-bit outputs
    little-endian first.
    """
    rng = random.Random()
    rng.setstate(MT19937(derive_key(seed)).getstate())
    return rng.getrandbits(32 * length).to_bytes(4 * length, 'little')[::4]


def apply_stream(data: bytes, seed: int) -> bytes:
    """
    XOR `data` with the keystream for `seed`.

    Encryption and decryption are the same operation. Each call uses a
    fresh generator, so the stream always starts at output 0.
    """
    if not data:
        return b""
    stream = keystream(seed, len(data))
    mixed = int.from_bytes(data, 'little') ^ int.from_bytes(stream, 'little')
    return mixed.to_bytes(len(data), 'little')


encrypt = apply_stream
decrypt = apply_stream
