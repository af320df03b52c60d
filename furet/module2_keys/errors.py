# file: furet/module2_keys/errors.py

"""
Key material error types.
"""

from ..errors import FuretError


class KeyMaterialError(FuretError):
    """Base exception for key generation and key decoding."""
    pass


class EntropyError(KeyMaterialError):
    """Raised when the random source cannot supply key bytes."""
    pass


class InvalidKeyError(KeyMaterialError):
    """Raised when key text is not base64 (or hex) of exactly 32 bytes."""
    pass
