# file: furet/module3_token/primitives.py
"""
Block cipher and MAC primitives: AES-128-CBC with PKCS7 padding and
HMAC-SHA256.
"""

import hashlib
import hmac

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .framing import BLOCK_SIZE


_BLOCK_BITS = BLOCK_SIZE * 8


def encrypt_cbc(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """
    Pad and encrypt plaintext with AES in CBC mode.

    Args:
        key: 16-byte encryption key
        iv: 16-byte initialization vector
        plaintext: Data of any length (empty allowed)

    Returns:
        Ciphertext, a positive multiple of 16 bytes long
    """
    padder = padding.PKCS7(_BLOCK_BITS).padder()
    padded = padder.update(plaintext) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt_cbc(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt AES-CBC ciphertext and strip PKCS7 padding.

    The unpadder checks the padding in constant time.

    Raises:
        ValueError: If the padding is invalid
    """
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


def sign(key: bytes, data: bytes) -> bytes:
    """HMAC-SHA256 of data under key (32 bytes)."""
    return hmac.new(key, data, hashlib.sha256).digest()


def verify(key: bytes, data: bytes, mac: bytes) -> bool:
    """Constant-time check of mac against HMAC-SHA256(key, data)."""
    return hmac.compare_digest(sign(key, data), mac)
