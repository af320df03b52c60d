# file: furet/module1_encoding/errors.py

"""
Base64 codec error types.
"""

from ..errors import FuretError


class Base64DecodeError(FuretError):
    """Raised when text is not valid base64 for the requested alphabet."""
    pass
