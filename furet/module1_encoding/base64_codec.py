# file: furet/module1_encoding/base64_codec.py

"""
URL-safe base64 encoding with and without padding.

Used for both key text and token text. Decoding is strict: characters
outside the URL-safe alphabet are rejected instead of being skipped, which
the standard library does silently for some inputs.
"""

import base64
import binascii
import re
from typing import Optional, Union

from .errors import Base64DecodeError


_URLSAFE_UNPADDED = re.compile(r"[A-Za-z0-9_-]*")
_URLSAFE_PADDED = re.compile(r"[A-Za-z0-9_-]*={0,2}")

_TO_URLSAFE = str.maketrans("+/", "-_")


def encode(data: bytes, padded: bool = True) -> str:
    """
    Encode bytes as URL-safe base64 text.

    Args:
        data: Raw bytes
        padded: Keep trailing '=' padding (default) or strip it

    Returns:
        ASCII text using the '-' and '_' alphabet
    """
    text = base64.urlsafe_b64encode(bytes(data)).decode("ascii")
    if not padded:
        text = text.rstrip("=")
    return text


def decode(text: Union[str, bytes], padded: Optional[bool] = None) -> bytes:
    """
    Decode URL-safe base64 text.

    Args:
        text: Base64 text (str or ASCII bytes)
        padded: True requires correct '=' padding, False forbids any
                padding, None accepts both forms

    Returns:
        Decoded bytes

    Raises:
        Base64DecodeError: On foreign characters, bad padding or a length
                           that no byte string encodes to
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as e:
            raise Base64DecodeError("Input contains non-ASCII bytes") from e

    pattern = _URLSAFE_UNPADDED if padded is False else _URLSAFE_PADDED
    if not pattern.fullmatch(text):
        raise Base64DecodeError("Input contains characters outside the URL-safe base64 alphabet")

    stripped = text.rstrip("=")
    padding = len(text) - len(stripped)
    remainder = len(stripped) % 4

    if remainder == 1:
        raise Base64DecodeError(f"Invalid base64 length: {len(stripped)} significant characters")

    expected_padding = (4 - remainder) % 4
    if padded is True and padding != expected_padding:
        raise Base64DecodeError("Incorrect base64 padding")
    if padded is None and padding and padding != expected_padding:
        raise Base64DecodeError("Incorrect base64 padding")

    try:
        return base64.urlsafe_b64decode(stripped + "=" * expected_padding)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(f"Undecodable base64 input: {e}") from e


def normalize_alphabet(text: str) -> str:
    """Map the standard alphabet ('+', '/') onto the URL-safe one."""
    return text.translate(_TO_URLSAFE)


def decode_any_alphabet(text: Union[str, bytes], padded: Optional[bool] = None) -> bytes:
    """
    Decode base64 written in either the standard or the URL-safe alphabet.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as e:
            raise Base64DecodeError("Input contains non-ASCII bytes") from e
    return decode(normalize_alphabet(text), padded=padded)
