# core/mt19937.py

"""32-bit Mersenne Twister (MT19937) used to derive entry keystreams."""


class MT19937:
    """
    Mersenne Twister seeded the classic way (init_genrand).

    Only the 32-bit output is provided since the cipher consumes one
    output per payload byte.
    """
    N = 624
    M = 397
    MATRIX_A = 0x9908B0DF
    UPPER_MASK = 0x80000000
    LOWER_MASK = 0x7FFFFFFF

    def __init__(self, seed: int = 5489):
        self.mt = [0] * self.N
        self.mti = self.N + 1
        self.seed(seed)

    def seed(self, seed: int):
        """Reset the state from a 32-bit seed."""
        mt = self.mt
        mt[0] = seed & 0xFFFFFFFF
        for i in range(1, self.N):
            prev = mt[i - 1]
            mt[i] = (1812433253 * (prev ^ (prev >> 30)) + i) & 0xFFFFFFFF
        self.mti = self.N

    def _twist(self):
        mt = self.mt
        n, m = self.N, self.M
        for kk in range(n):
            y = (mt[kk] & self.UPPER_MASK) | (mt[(kk + 1) % n] & self.LOWER_MASK)
            value = mt[(kk + m) % n] ^ (y >> 1)
            if y & 1:
                value ^= self.MATRIX_A
            mt[kk] = value
        self.mti = 0

    def genrand_int32(self) -> int:
        """Next output on the [0, 0xffffffff] interval."""
        if self.mti >= self.N:
            self._twist()
        y = self.mt[self.mti]
        self.mti += 1

        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y

    def getstate(self):
        """State in the layout random.Random.setstate() expects."""
        return (3, tuple(self.mt) + (self.mti,), None)

    def keystream(self, length: int) -> bytes:
        """Low byte of the next `length` outputs."""
        out = bytearray(length)
        for i in range(length):
            out[i] = self.genrand_int32() & 0xFF
        return bytes(out)
