# file: furet/module2_keys/__init__.py

"""
Module 2: Key Material

32-byte symmetric keys (signing key + encryption key) and their text form.
Keys are created once per run, never persisted by this package.
"""

from .key_material import (
    KeyMaterial,
    KEY_SIZE,
    SIGNING_KEY_SIZE,
    ENCRYPTION_KEY_SIZE,
)
from .errors import KeyMaterialError, EntropyError, InvalidKeyError

__version__ = "1.0.0"

__all__ = [
    "KeyMaterial",
    "KEY_SIZE",
    "SIGNING_KEY_SIZE",
    "ENCRYPTION_KEY_SIZE",
    "KeyMaterialError",
    "EntropyError",
    "InvalidKeyError",
]
