"""
ChaCha20 / HChaCha20
====================
The ARX block function from RFC 8439 section 2.3, the HChaCha20 subkey
derivation from draft-irtf-cfrg-xchacha, and a lazy keystream built on top.

State layout (16 x 32-bit words, little-endian):

    cccccccc  cccccccc  cccccccc  cccccccc     c = "expand 32-byte k"
    kkkkkkkk  kkkkkkkk  kkkkkkkk  kkkkkkkk     k = key
    kkkkkkkk  kkkkkkkk  kkkkkkkk  kkkkkkkk
    bbbbbbbb  nnnnnnnn  nnnnnnnn  nnnnnnnn     b = block counter, n = nonce

HChaCha20 uses the same layout with a 16-byte nonce filling the last row.

Key:     256-bit (32 bytes)
Nonce:    96-bit (12 bytes), 128-bit (16 bytes) for HChaCha20
Counter:  32-bit, never wraps

Every operation is add/rotate/xor on fixed-width words: no table lookups
and no branches on key material.
"""

import struct

from ..errors import InvalidKeyLength, InvalidNonceLength, MessageTooLong

KEY_SIZE         = 32
NONCE_SIZE       = 12
HNONCE_SIZE      = 16
BLOCK_SIZE       = 64
MAX_COUNTER      = 0xFFFFFFFF
DEFAULT_ROUNDS   = 20

_MASK32    = 0xFFFFFFFF
CONSTANTS  = struct.unpack("<4I", b"expand 32-byte k")


def _rotl32(v: int, n: int) -> int:
    return ((v << n) | (v >> (32 - n))) & _MASK32


def quarter_round(x: list, a: int, b: int, c: int, d: int) -> None:
    """Mix words a, b, c, d of state x in place."""
    x[a] = (x[a] + x[b]) & _MASK32
    x[d] = _rotl32(x[d] ^ x[a], 16)
    x[c] = (x[c] + x[d]) & _MASK32
    x[b] = _rotl32(x[b] ^ x[c], 12)
    x[a] = (x[a] + x[b]) & _MASK32
    x[d] = _rotl32(x[d] ^ x[a], 8)
    x[c] = (x[c] + x[d]) & _MASK32
    x[b] = _rotl32(x[b] ^ x[c], 7)


def _double_rounds(x: list, rounds: int) -> None:
    for _ in range(rounds // 2):
        # columns
        quarter_round(x, 0, 4,  8, 12)
        quarter_round(x, 1, 5,  9, 13)
        quarter_round(x, 2, 6, 10, 14)
        quarter_round(x, 3, 7, 11, 15)
        # diagonals
        quarter_round(x, 0, 5, 10, 15)
        quarter_round(x, 1, 6, 11, 12)
        quarter_round(x, 2, 7,  8, 13)
        quarter_round(x, 3, 4,  9, 14)


def _check_rounds(rounds: int) -> None:
    if rounds <= 0 or rounds % 2:
        raise ValueError(f"ChaCha round count must be a positive even number, got {rounds}.")


def _check_key(key) -> None:
    if len(key) != KEY_SIZE:
        raise InvalidKeyLength(f"ChaCha20 key must be {KEY_SIZE} bytes, got {len(key)}.")


def _initial_state(key, row3: tuple) -> list:
    return list(CONSTANTS) + list(struct.unpack("<8I", key)) + list(row3)


def chacha20_block(key: bytes, counter: int, nonce: bytes,
                   rounds: int = DEFAULT_ROUNDS) -> bytes:
    """
    One 64-byte keystream block for (key, counter, nonce).
    RFC 8439 section 2.3: rounds, then feed-forward of the input state.
    """
    _check_key(key)
    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceLength(f"ChaCha20 nonce must be {NONCE_SIZE} bytes, got {len(nonce)}.")
    if not 0 <= counter <= MAX_COUNTER:
        raise MessageTooLong(f"Block counter {counter:#x} outside 32-bit range.")
    _check_rounds(rounds)

    initial = _initial_state(key, (counter,) + struct.unpack("<3I", nonce))
    x = initial[:]
    _double_rounds(x, rounds)
    return struct.pack("<16I", *[(w + i) & _MASK32 for w, i in zip(x, initial)])


def hchacha20(key: bytes, nonce: bytes, rounds: int = DEFAULT_ROUNDS) -> bytes:
    """
    Derive a 32-byte subkey from a key and a 16-byte nonce.

    Same rounds as the block function but no feed-forward; the output is
    state words 0-3 and 12-15. Used to turn the first 16 bytes of an
    extended nonce into a fresh ChaCha20 key.
    """
    _check_key(key)
    if len(nonce) != HNONCE_SIZE:
        raise InvalidNonceLength(f"HChaCha20 nonce must be {HNONCE_SIZE} bytes, got {len(nonce)}.")
    _check_rounds(rounds)

    x = _initial_state(key, struct.unpack("<4I", nonce))
    _double_rounds(x, rounds)
    return struct.pack("<8I", *(x[0:4] + x[12:16]))


def blocks_needed(length: int) -> int:
    return -(-length // BLOCK_SIZE)


def check_length(counter: int, length: int) -> None:
    """Raise MessageTooLong if `length` bytes from `counter` would pass the 32-bit counter."""
    if length < 0:
        raise ValueError("Keystream length cannot be negative.")
    last = counter + blocks_needed(length) - 1
    if counter < 0 or last > MAX_COUNTER:
        raise MessageTooLong(
            f"{length} bytes starting at block {counter} would overflow the "
            f"32-bit block counter."
        )


def keystream(key: bytes, nonce: bytes, counter: int, length: int,
              rounds: int = DEFAULT_ROUNDS):
    """
    Lazy keystream: yields 64-byte blocks for counter, counter+1, ...
    The last block is truncated so the total is exactly `length` bytes.

    Limits are checked here, before the generator is handed back, so an
    oversized request fails without producing any output.
    """
    _check_key(key)
    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceLength(f"ChaCha20 nonce must be {NONCE_SIZE} bytes, got {len(nonce)}.")
    _check_rounds(rounds)
    check_length(counter, length)
    return _generate(bytes(key), bytes(nonce), counter, length, rounds)


def _generate(key, nonce, counter, length, rounds):
    remaining = length
    while remaining > 0:
        block = chacha20_block(key, counter, nonce, rounds)
        if remaining < BLOCK_SIZE:
            block = block[:remaining]
        yield block
        remaining -= len(block)
        counter   += 1


def chacha20_xor(key: bytes, nonce: bytes, counter: int, data,
                 rounds: int = DEFAULT_ROUNDS) -> bytes:
    """Encrypt or decrypt `data` (xor is its own inverse)."""
    data = memoryview(data).cast("B")
    out  = bytearray(len(data))
    pos  = 0
    for block in keystream(key, nonce, counter, len(data), rounds):
        n = len(block)
        chunk = int.from_bytes(data[pos:pos + n], "little")
        out[pos:pos + n] = (chunk ^ int.from_bytes(block, "little")).to_bytes(n, "little")
        pos += n
    return bytes(out)
