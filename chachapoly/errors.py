"""
Error taxonomy for chachapoly.

Structural errors (bad key/nonce/input sizes) are ValueErrors so generic
callers can catch them as such. AuthenticationFailed derives from
cryptography's InvalidTag, the exception its own AEAD classes raise.
"""

from cryptography.exceptions import InvalidTag


class ChaChaPolyError(Exception):
    """Base class for every error raised by this package."""


class InvalidKeyLength(ChaChaPolyError, ValueError):
    pass


class InvalidNonceLength(ChaChaPolyError, ValueError):
    pass


class InputTooShort(ChaChaPolyError, ValueError):
    """Decrypt input cannot even hold a tag."""


class MessageTooLong(ChaChaPolyError, OverflowError):
    """Message needs more keystream than a 32-bit block counter provides."""


class AuthenticationFailed(ChaChaPolyError, InvalidTag):
    """Tag mismatch. No plaintext is released."""
