# file: furet/module2_keys/key_material.py

"""
Symmetric key material: a 32-byte secret split into a signing key and an
encryption key.

Layout of the secret:
    [signing_key:16][encryption_key:16]
"""

import binascii
import os
import string
from dataclasses import dataclass
from typing import Callable, Optional

from ..module1_encoding import Base64DecodeError, decode_any_alphabet, encode as b64_encode
from .errors import EntropyError, InvalidKeyError


KEY_SIZE = 32
SIGNING_KEY_SIZE = 16
ENCRYPTION_KEY_SIZE = 16

# Hex is accepted on input only, for keys produced by other Fernet tools.
_HEX_KEY_LENGTH = KEY_SIZE * 2
_HEX_DIGITS = frozenset(string.hexdigits)


RandomSource = Callable[[int], bytes]


@dataclass(frozen=True)
class KeyMaterial:
    """
    Immutable 32-byte secret.

    The signing key (HMAC-SHA256) is the first half, the encryption key
    (AES-128) the second half.
    """

    secret: bytes

    def __post_init__(self):
        if not isinstance(self.secret, (bytes, bytearray)):
            raise InvalidKeyError(f"Key secret must be bytes, got {type(self.secret).__name__}")
        if len(self.secret) != KEY_SIZE:
            raise InvalidKeyError(
                f"Key must be {KEY_SIZE} bytes, got {len(self.secret)}"
            )
        # Normalize bytearray input so the value stays hashable and immutable
        object.__setattr__(self, "secret", bytes(self.secret))

    def __repr__(self) -> str:
        return "KeyMaterial(<redacted>)"

    @property
    def signing_key(self) -> bytes:
        return self.secret[:SIGNING_KEY_SIZE]

    @property
    def encryption_key(self) -> bytes:
        return self.secret[SIGNING_KEY_SIZE:]

    @classmethod
    def generate(cls, random_source: Optional[RandomSource] = None) -> "KeyMaterial":
        """
        Create a key from a cryptographically secure random source.

        Args:
            random_source: Callable returning n random bytes (default os.urandom)

        Returns:
            Fresh KeyMaterial

        Raises:
            EntropyError: If the source fails or returns the wrong length
        """
        source = random_source or os.urandom
        try:
            secret = source(KEY_SIZE)
        except (OSError, NotImplementedError) as e:
            raise EntropyError(f"Random source failed: {e}") from e

        if not isinstance(secret, (bytes, bytearray)) or len(secret) != KEY_SIZE:
            raise EntropyError(f"Random source did not return {KEY_SIZE} bytes")

        return cls(bytes(secret))

    @classmethod
    def decode(cls, text: str) -> "KeyMaterial":
        """
        Decode key text.

        Accepts URL-safe or standard base64 (padded or not) and 64-digit
        hexadecimal.

        Raises:
            InvalidKeyError: If the text is not one of the accepted forms or
                             does not decode to exactly 32 bytes
        """
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("ascii")
            except UnicodeDecodeError as e:
                raise InvalidKeyError("Key text contains non-ASCII bytes") from e

        text = text.strip()
        if not text:
            raise InvalidKeyError("Empty key")

        if len(text) == _HEX_KEY_LENGTH and all(c in _HEX_DIGITS for c in text):
            try:
                secret = binascii.unhexlify(text)
            except binascii.Error as e:
                raise InvalidKeyError(f"Invalid hexadecimal key: {e}") from e
        else:
            try:
                secret = decode_any_alphabet(text)
            except Base64DecodeError as e:
                raise InvalidKeyError(f"Invalid base64 key: {e}") from e

        if len(secret) != KEY_SIZE:
            raise InvalidKeyError(
                f"Key must decode to {KEY_SIZE} bytes, got {len(secret)}"
            )

        return cls(secret)

    def encode(self) -> str:
        """Return the key as URL-safe base64 text with '=' padding."""
        return b64_encode(self.secret, padded=True)
