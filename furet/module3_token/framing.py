# file: furet/module3_token/framing.py
"""
Token assembly and parsing.

Token structure (57 + N bytes, N a positive multiple of 16):
    [version:1][timestamp:8][iv:16][ciphertext:N][hmac:32]
"""

import struct
from typing import NamedTuple

from .token_errors import MalformedTokenError, UnsupportedVersionError


VERSION = 0x80
VERSION_SIZE = 1
TIMESTAMP_SIZE = 8
IV_SIZE = 16
HMAC_SIZE = 32
BLOCK_SIZE = 16

HEADER_SIZE = VERSION_SIZE + TIMESTAMP_SIZE + IV_SIZE  # 25
OVERHEAD = HEADER_SIZE + HMAC_SIZE  # 57
MIN_TOKEN_SIZE = OVERHEAD + BLOCK_SIZE  # 73

_TIMESTAMP = struct.Struct(">Q")


class ParsedToken(NamedTuple):
    version: int
    timestamp: int
    iv: bytes
    ciphertext: bytes
    signed: bytes  # everything covered by the HMAC
    mac: bytes


def assemble_header(timestamp: int, iv: bytes, version: int = VERSION) -> bytes:
    """
    Build the 25-byte token header.

    Args:
        timestamp: Unix seconds (unsigned 64-bit)
        iv: 16-byte initialization vector
        version: Version marker byte

    Returns:
        version || timestamp (big-endian) || iv
    """
    if len(iv) != IV_SIZE:
        raise ValueError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")
    if not 0 <= timestamp < 2 ** 64:
        raise ValueError(f"Timestamp out of range: {timestamp}")

    return bytes([version]) + _TIMESTAMP.pack(timestamp) + iv


def parse_token(token: bytes, version: int = VERSION) -> ParsedToken:
    """
    Split raw token bytes into their fields.

    Only structure is checked here; the HMAC is verified by the caller.

    Raises:
        MalformedTokenError: If the length is impossible for a token
        UnsupportedVersionError: If the version byte is not `version`
    """
    if len(token) < MIN_TOKEN_SIZE:
        raise MalformedTokenError(
            f"Token too short: {len(token)} bytes (minimum {MIN_TOKEN_SIZE})"
        )
    if (len(token) - OVERHEAD) % BLOCK_SIZE != 0:
        raise MalformedTokenError(
            f"Ciphertext length {len(token) - OVERHEAD} is not a multiple of {BLOCK_SIZE}"
        )

    if token[0] != version:
        raise UnsupportedVersionError(f"Unsupported version: 0x{token[0]:02x}")

    timestamp = _TIMESTAMP.unpack_from(token, VERSION_SIZE)[0]
    iv = token[VERSION_SIZE + TIMESTAMP_SIZE:HEADER_SIZE]
    ciphertext = token[HEADER_SIZE:-HMAC_SIZE]

    return ParsedToken(
        version=token[0],
        timestamp=timestamp,
        iv=iv,
        ciphertext=ciphertext,
        signed=token[:-HMAC_SIZE],
        mac=token[-HMAC_SIZE:],
    )
