"""
Raw building blocks: ChaCha20 / HChaCha20 keystream and the Poly1305 MAC.
Most callers want the AEAD classes in chachapoly.aead instead.
"""

from .chacha20 import (quarter_round, chacha20_block, hchacha20,
                       keystream, chacha20_xor)
from .poly1305 import clamp, Poly1305, poly1305_mac

__all__ = [
    "quarter_round",
    "chacha20_block",
    "hchacha20",
    "keystream",
    "chacha20_xor",
    "clamp",
    "Poly1305",
    "poly1305_mac",
]
