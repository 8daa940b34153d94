"""
chachapoly — ChaCha20-Poly1305 AEAD in pure Python
===================================================
RFC 8439 authenticated encryption with associated data, plus the
extended-nonce XChaCha20-Poly1305 variant.

Layers:
    primitives.chacha20   — quarter round, block function, HChaCha20, keystream
    primitives.poly1305   — one-time polynomial MAC over GF(2^130 - 5)
    aead                  — ChaCha20Poly1305 / XChaCha20Poly1305 (+ 8/12-round)

    from chachapoly import ChaCha20Poly1305
    box = ChaCha20Poly1305(key)
    ct  = box.encrypt(nonce, b"header", b"secret")
    pt  = box.decrypt(nonce, b"header", ct)

License: Apache 2.0
"""

__version__  = "1.0.0"

from .aead    import (ChaCha20Poly1305, XChaCha20Poly1305,
                      ChaCha12Poly1305, ChaCha8Poly1305,
                      XChaCha12Poly1305, XChaCha8Poly1305)
from .errors  import (ChaChaPolyError, InvalidKeyLength, InvalidNonceLength,
                      InputTooShort, MessageTooLong, AuthenticationFailed)

__all__ = [
    "ChaCha20Poly1305",
    "XChaCha20Poly1305",
    "ChaCha12Poly1305",
    "ChaCha8Poly1305",
    "XChaCha12Poly1305",
    "XChaCha8Poly1305",
    "ChaChaPolyError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "InputTooShort",
    "MessageTooLong",
    "AuthenticationFailed",
]
