# core/compression.py

"""zlib wrapper with the size contracts the archive format relies on."""
import zlib

from core.errors import DecodeFailure, IOFailure

DEFAULT_LEVEL = 9


def compress_bound(size: int) -> int:
    """Worst-case zlib output size for `size` input bytes."""
    return size + (size >> 12) + (size >> 14) + (size >> 25) + 13


def compress(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """Compress into a zlib stream no larger than compress_bound(len(data))."""
    try:
        out = zlib.compress(data, level)
    except zlib.error as e:
        raise IOFailure(f"compression failed: {e}") from e
    if len(out) > compress_bound(len(data)):
        raise IOFailure(f"compressed size {len(out)} exceeds bound {compress_bound(len(data))}")
    return out


def decompress(data: bytes, expected_size: int) -> bytes:
    """
    Inflate `data`, which must expand to exactly `expected_size` bytes.

    Output is never truncated or padded: a short result, extra output,
    an incomplete stream or a zlib error all raise DecodeFailure.
    """
    inflater = zlib.decompressobj()
    try:
        out = inflater.decompress(data, expected_size)
        if not inflater.eof:
            # either the stream is cut short or it holds more than expected
            out += inflater.decompress(inflater.unconsumed_tail, 1)
            out += inflater.flush()
    except zlib.error as e:
        raise DecodeFailure(f"zlib error: {e}") from e

    if not inflater.eof:
        raise DecodeFailure("compressed stream is incomplete")
    if len(out) != expected_size:
        raise DecodeFailure(f"size mismatch: expected {expected_size} bytes, got {len(out)}")
    return out
