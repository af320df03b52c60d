# file: furet/module1_encoding/__init__.py

"""
Module 1: Base64 Encoding

URL-safe base64 with and without padding, shared by key text and token
text.

Public API:
    - encode(data: bytes, padded: bool = True) -> str
    - decode(text, padded: Optional[bool] = None) -> bytes
    - decode_any_alphabet(text, padded: Optional[bool] = None) -> bytes
    - normalize_alphabet(text: str) -> str
"""

from .base64_codec import encode, decode, decode_any_alphabet, normalize_alphabet
from .errors import Base64DecodeError

__version__ = "1.0.0"

__all__ = [
    "encode",
    "decode",
    "decode_any_alphabet",
    "normalize_alphabet",
    "Base64DecodeError",
]
