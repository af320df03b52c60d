# file: furet/module3_token/__init__.py
"""
Module 3: Token Codec

Authenticated, timestamped encryption of single records (Fernet format):
AES-128-CBC with PKCS7 padding, HMAC-SHA256 over header and ciphertext.
"""

from .token_codec import TokenCodec, encrypt, decrypt, extract_timestamp, DEFAULT_MAX_CLOCK_SKEW
from .framing import VERSION, OVERHEAD, MIN_TOKEN_SIZE
from .token_errors import (
    TokenError,
    EncryptionError,
    InvalidTokenError,
    MalformedTokenError,
    UnsupportedVersionError,
    AuthenticationError,
    PaddingError,
    ExpiredTokenError,
    NotYetValidError,
)


__all__ = [
    'TokenCodec',
    'encrypt',
    'decrypt',
    'extract_timestamp',
    'DEFAULT_MAX_CLOCK_SKEW',
    'VERSION',
    'OVERHEAD',
    'MIN_TOKEN_SIZE',
    'TokenError',
    'EncryptionError',
    'InvalidTokenError',
    'MalformedTokenError',
    'UnsupportedVersionError',
    'AuthenticationError',
    'PaddingError',
    'ExpiredTokenError',
    'NotYetValidError',
]


__version__ = '1.0.0'
