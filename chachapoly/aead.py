"""
AEAD — ChaCha20-Poly1305 / XChaCha20-Poly1305
==============================================
RFC 8439 authenticated encryption, pure Python, plus the extended-nonce
XChaCha20 construction (draft-irtf-cfrg-xchacha).

Key:    256-bit (32 bytes)
Nonce:   96-bit (12 bytes) — ChaCha20-Poly1305
        192-bit (24 bytes) — XChaCha20-Poly1305
Tag:    128-bit (16 bytes) — Poly1305

Output format: ciphertext || tag(16)
No nonce prefix, no length field. Framing belongs to the caller, and so
does nonce uniqueness: never encrypt twice under the same (key, nonce).

Per message:
    block(key, nonce, counter=0)[:32]   -> one-time Poly1305 key
    keystream(key, nonce, counter=1)    -> xor with plaintext
    Poly1305(aad | pad16 | ct | pad16 | le64(len aad) | le64(len ct))

XChaCha: subkey = HChaCha20(key, nonce[:16]); then the above with
the subkey and nonce 00000000 || nonce[16:24].

Reduced-round variants (8 and 12 rounds) are included for
interoperability; use the 20-round classes unless you know you need them.

Dependencies: cryptography >= 41.0 (constant-time compare, InvalidTag)
"""

import logging
import struct

from cryptography.hazmat.primitives import constant_time

from .errors import (InvalidKeyLength, InvalidNonceLength, InputTooShort,
                     MessageTooLong, AuthenticationFailed)
from .primitives.chacha20 import (chacha20_block, hchacha20, chacha20_xor,
                                  BLOCK_SIZE, MAX_COUNTER)
from .primitives.poly1305 import Poly1305

logger = logging.getLogger(__name__)

# counters 1 .. 0xFFFFFFFF carry data; counter 0 makes the Poly1305 key
MAX_MESSAGE_SIZE = MAX_COUNTER * BLOCK_SIZE

_ZERO_PAD = bytes(16)


def _as_bytes(data) -> bytes:
    if data is None:
        return b""
    return bytes(data)


def _pad16(n: int) -> bytes:
    return _ZERO_PAD[:-n % 16]


class ChaCha20Poly1305:
    """ChaCha20-Poly1305 authenticated encryption (RFC 8439)."""

    KEY_SIZE   = 32
    NONCE_SIZE = 12
    TAG_SIZE   = 16
    ROUNDS     = 20

    def __init__(self, key: bytes):
        if key is None or len(key) != self.KEY_SIZE:
            got = "None" if key is None else len(key)
            raise InvalidKeyLength(
                f"{type(self).__name__} key must be {self.KEY_SIZE} bytes, got {got}."
            )
        self._key = bytes(key)
        logger.debug("%s ready (rounds=%d)", type(self).__name__, self.ROUNDS)

    @property
    def key(self) -> bytes:
        return self._key

    def __repr__(self):
        return f"{type(self).__name__}(rounds={self.ROUNDS})"

    # ── key / nonce schedule ────────────────────────────────────────────────

    def _check_nonce(self, nonce) -> bytes:
        if nonce is None or len(nonce) != self.NONCE_SIZE:
            got = "None" if nonce is None else len(nonce)
            raise InvalidNonceLength(
                f"{type(self).__name__} nonce must be {self.NONCE_SIZE} bytes, got {got}."
            )
        return bytes(nonce)

    def _schedule(self, nonce: bytes):
        """(key, 12-byte nonce) actually fed to ChaCha20."""
        return self._key, nonce

    # ── core ────────────────────────────────────────────────────────────────

    def _tag(self, key: bytes, nonce: bytes, aad: bytes, ciphertext: bytes) -> bytes:
        otk = chacha20_block(key, 0, nonce, self.ROUNDS)[:32]
        mac = Poly1305(otk)
        mac.update(aad)
        mac.update(_pad16(len(aad)))
        mac.update(ciphertext)
        mac.update(_pad16(len(ciphertext)))
        mac.update(struct.pack("<QQ", len(aad), len(ciphertext)))
        return mac.finalize()

    @staticmethod
    def _check_size(n: int) -> None:
        if n > MAX_MESSAGE_SIZE:
            raise MessageTooLong(
                f"Message of {n} bytes exceeds the {MAX_MESSAGE_SIZE}-byte limit."
            )

    def encrypt_detached(self, nonce: bytes, associated_data, plaintext):
        """
        Encrypt and authenticate, returning (ciphertext, tag) separately.
        """
        nonce     = self._check_nonce(nonce)
        aad       = _as_bytes(associated_data)
        plaintext = _as_bytes(plaintext)
        self._check_size(len(plaintext))

        key, n12 = self._schedule(nonce)
        ct  = chacha20_xor(key, n12, 1, plaintext, self.ROUNDS)
        tag = self._tag(key, n12, aad, ct)
        return ct, tag

    def decrypt_detached(self, nonce: bytes, associated_data, ciphertext, tag) -> bytes:
        """
        Verify `tag` over (aad, ciphertext), then decrypt.
        Raises AuthenticationFailed on mismatch; nothing is decrypted
        until the tag has been accepted.
        """
        nonce = self._check_nonce(nonce)
        if tag is None or len(tag) != self.TAG_SIZE:
            raise InputTooShort(f"Tag must be {self.TAG_SIZE} bytes.")
        aad = _as_bytes(associated_data)
        ct  = _as_bytes(ciphertext)
        self._check_size(len(ct))

        key, n12 = self._schedule(nonce)
        expected = self._tag(key, n12, aad, ct)
        if not constant_time.bytes_eq(expected, bytes(tag)):
            logger.debug("%s: tag mismatch on %d-byte ciphertext",
                         type(self).__name__, len(ct))
            raise AuthenticationFailed(
                "Authentication tag mismatch. Data tampered, wrong key, "
                "wrong nonce or wrong associated data."
            )
        return chacha20_xor(key, n12, 1, ct, self.ROUNDS)

    def encrypt(self, nonce: bytes, associated_data, plaintext) -> bytes:
        """
        Encrypt and authenticate.
        associated_data is authenticated but not encrypted (None = empty).
        Returns: ciphertext || tag(16)
        """
        ct, tag = self.encrypt_detached(nonce, associated_data, plaintext)
        return ct + tag

    def decrypt(self, nonce: bytes, associated_data, data) -> bytes:
        """
        Decrypt and verify ciphertext || tag(16).
        Raises AuthenticationFailed (an InvalidTag) on tamper.
        """
        nonce = self._check_nonce(nonce)
        data  = _as_bytes(data)
        if len(data) < self.TAG_SIZE:
            raise InputTooShort(
                f"Input of {len(data)} bytes is shorter than the {self.TAG_SIZE}-byte tag."
            )
        split = len(data) - self.TAG_SIZE
        return self.decrypt_detached(nonce, associated_data, data[:split], data[split:])


class XChaCha20Poly1305(ChaCha20Poly1305):
    """
    XChaCha20-Poly1305: 24-byte nonces, safe to pick at random.
    The first 16 nonce bytes go through HChaCha20 to make a per-nonce
    subkey; the last 8 become the tail of an ordinary 12-byte nonce.
    """

    NONCE_SIZE = 24

    def _schedule(self, nonce: bytes):
        subkey = hchacha20(self._key, nonce[:16], self.ROUNDS)
        return subkey, b"\x00\x00\x00\x00" + nonce[16:]


# ── reduced-round variants ─────────────────────────────────────────────────────

class ChaCha12Poly1305(ChaCha20Poly1305):
    ROUNDS = 12


class ChaCha8Poly1305(ChaCha20Poly1305):
    ROUNDS = 8


class XChaCha12Poly1305(XChaCha20Poly1305):
    ROUNDS = 12


class XChaCha8Poly1305(XChaCha20Poly1305):
    ROUNDS = 8
