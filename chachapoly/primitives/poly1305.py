"""
Poly1305 one-time authenticator
===============================
RFC 8439 section 2.5: polynomial evaluation over GF(2^130 - 5).

Key:  256-bit (32 bytes) = r (16, clamped) || s (16)
Tag:  128-bit (16 bytes)

The accumulator lives in five 26-bit limbs with explicit carry
propagation (the "donna" layout), so every block costs the same
sequence of multiplies, shifts and masks. The final reduction picks
between h and h - p with a mask, never a branch.

A key must authenticate exactly one message.
"""

import struct

KEY_SIZE   = 32
TAG_SIZE   = 16
BLOCK_SIZE = 16

_M26  = 0x3FFFFFF
_M32  = 0xFFFFFFFF
_HIBIT = 1 << 24

# top 4 bits of bytes 3, 7, 11, 15; bottom 2 bits of bytes 4, 8, 12
_CLAMP = bytes((
    0xFF, 0xFF, 0xFF, 0x0F, 0xFC, 0xFF, 0xFF, 0x0F,
    0xFC, 0xFF, 0xFF, 0x0F, 0xFC, 0xFF, 0xFF, 0x0F,
))


def clamp(r: bytes) -> bytes:
    """Clear the bits of r that Poly1305 requires to be zero."""
    if len(r) != 16:
        raise ValueError("Poly1305 r must be 16 bytes.")
    return bytes(a & m for a, m in zip(r, _CLAMP))


def _limbs(block) -> tuple:
    t0, t1, t2, t3 = struct.unpack("<4I", block)
    return (
        t0 & _M26,
        ((t0 >> 26) | (t1 << 6)) & _M26,
        ((t1 >> 20) | (t2 << 12)) & _M26,
        ((t2 >> 14) | (t3 << 18)) & _M26,
        t3 >> 8,
    )


class Poly1305:
    """
    Incremental Poly1305. Feed with update(), read the tag once with
    finalize(); the object refuses further use afterwards.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError(f"Poly1305 key must be {KEY_SIZE} bytes.")
        key = bytes(key)
        self._r   = _limbs(clamp(key[:16]))
        self._s   = struct.unpack("<4I", key[16:])
        self._h   = [0, 0, 0, 0, 0]
        self._buf = bytearray()
        self._done = False

    def update(self, data) -> None:
        if self._done:
            raise RuntimeError("Poly1305 instance already finalized.")
        data = memoryview(data).cast("B")
        pos  = 0
        if self._buf:
            take = min(BLOCK_SIZE - len(self._buf), len(data))
            self._buf += data[:take]
            pos = take
            if len(self._buf) < BLOCK_SIZE:
                return
            self._block(self._buf, _HIBIT)
            self._buf = bytearray()
        end = len(data) - (len(data) - pos) % BLOCK_SIZE
        for off in range(pos, end, BLOCK_SIZE):
            self._block(data[off:off + BLOCK_SIZE], _HIBIT)
        self._buf += data[end:]

    def _block(self, block, hibit: int) -> None:
        r0, r1, r2, r3, r4 = self._r
        s1, s2, s3, s4 = r1 * 5, r2 * 5, r3 * 5, r4 * 5
        m0, m1, m2, m3, m4 = _limbs(block)
        h = self._h

        h0 = h[0] + m0
        h1 = h[1] + m1
        h2 = h[2] + m2
        h3 = h[3] + m3
        h4 = h[4] + (m4 | hibit)

        # h *= r mod 2^130 - 5; limbs above 2^130 fold back in as *5
        d0 = h0 * r0 + h1 * s4 + h2 * s3 + h3 * s2 + h4 * s1
        d1 = h0 * r1 + h1 * r0 + h2 * s4 + h3 * s3 + h4 * s2
        d2 = h0 * r2 + h1 * r1 + h2 * r0 + h3 * s4 + h4 * s3
        d3 = h0 * r3 + h1 * r2 + h2 * r1 + h3 * r0 + h4 * s4
        d4 = h0 * r4 + h1 * r3 + h2 * r2 + h3 * r1 + h4 * r0

        c = d0 >> 26; h0 = d0 & _M26
        d1 += c; c = d1 >> 26; h1 = d1 & _M26
        d2 += c; c = d2 >> 26; h2 = d2 & _M26
        d3 += c; c = d3 >> 26; h3 = d3 & _M26
        d4 += c; c = d4 >> 26; h4 = d4 & _M26
        h0 += c * 5; c = h0 >> 26; h0 &= _M26
        h1 += c

        self._h = [h0, h1, h2, h3, h4]

    def finalize(self) -> bytes:
        if self._done:
            raise RuntimeError("Poly1305 instance already finalized.")
        self._done = True

        if self._buf:
            # short final block: 0x01 marker right after the data, no hibit
            last = bytes(self._buf) + b"\x01"
            self._block(last.ljust(BLOCK_SIZE, b"\x00"), 0)
            self._buf = bytearray()

        h0, h1, h2, h3, h4 = self._h

        c = h1 >> 26; h1 &= _M26
        h2 += c; c = h2 >> 26; h2 &= _M26
        h3 += c; c = h3 >> 26; h3 &= _M26
        h4 += c; c = h4 >> 26; h4 &= _M26
        h0 += c * 5; c = h0 >> 26; h0 &= _M26
        h1 += c

        # g = h + 5 - 2^130
        g0 = h0 + 5; c = g0 >> 26; g0 &= _M26
        g1 = h1 + c; c = g1 >> 26; g1 &= _M26
        g2 = h2 + c; c = g2 >> 26; g2 &= _M26
        g3 = h3 + c; c = g3 >> 26; g3 &= _M26
        g4 = (h4 + c - (1 << 26)) & _M32

        # h >= p  <=>  g4 did not borrow  <=>  top bit of g4 clear
        mask = ((g4 >> 31) - 1) & _M32
        keep = ~mask & _M32
        h0 = (h0 & keep) | (g0 & mask)
        h1 = (h1 & keep) | (g1 & mask)
        h2 = (h2 & keep) | (g2 & mask)
        h3 = (h3 & keep) | (g3 & mask)
        h4 = (h4 & keep) | (g4 & mask)

        w0 = (h0 | (h1 << 26)) & _M32
        w1 = ((h1 >> 6) | (h2 << 20)) & _M32
        w2 = ((h2 >> 12) | (h3 << 14)) & _M32
        w3 = ((h3 >> 18) | (h4 << 8)) & _M32

        # tag = (h + s) mod 2^128
        s0, s1, s2, s3 = self._s
        f = w0 + s0;             w0 = f & _M32
        f = w1 + s1 + (f >> 32); w1 = f & _M32
        f = w2 + s2 + (f >> 32); w2 = f & _M32
        f = w3 + s3 + (f >> 32); w3 = f & _M32

        self._h = [0, 0, 0, 0, 0]
        return struct.pack("<4I", w0, w1, w2, w3)


def poly1305_mac(key: bytes, message) -> bytes:
    """One-shot Poly1305 tag of `message` under a one-time `key`."""
    mac = Poly1305(key)
    mac.update(message)
    return mac.finalize()
