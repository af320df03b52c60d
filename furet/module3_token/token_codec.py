# file: furet/module3_token/token_codec.py
"""
Token Codec

Builds tokens from plaintext and verifies/decrypts them against one or
more candidate keys.

Verification order:
    base64 → length → version → HMAC (each key in turn) → TTL → decrypt/unpad
"""

import os
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError
from ..module1_encoding import Base64DecodeError, decode as b64_decode, encode as b64_encode
from ..module2_keys import KeyMaterial
from .framing import IV_SIZE, ParsedToken, assemble_header, parse_token
from .primitives import decrypt_cbc, encrypt_cbc, sign, verify
from .token_errors import (
    AuthenticationError,
    EncryptionError,
    ExpiredTokenError,
    MalformedTokenError,
    NotYetValidError,
    PaddingError,
)


DEFAULT_MAX_CLOCK_SKEW = 60

Timestamp = Union[int, float, datetime]
Keys = Union[KeyMaterial, Sequence[KeyMaterial]]


def _unix_seconds(now: Optional[Timestamp]) -> int:
    if now is None:
        return int(time.time())
    if isinstance(now, datetime):
        return int(now.timestamp())
    return int(now)


def _candidate_keys(keys: Keys) -> List[KeyMaterial]:
    if isinstance(keys, KeyMaterial):
        return [keys]
    candidates = list(keys)
    if not candidates:
        raise ValueError("At least one candidate key is required")
    return candidates


def encrypt(
    plaintext: bytes,
    key: KeyMaterial,
    now: Optional[Timestamp] = None,
    iv: Optional[bytes] = None,
    random_source: Optional[Callable[[int], bytes]] = None
) -> str:
    """
    Encrypt and sign plaintext into token text.

    Args:
        plaintext: Arbitrary bytes (may be empty)
        key: Key used for both encryption and signing
        now: Token timestamp (default: current time)
        iv: Fixed 16-byte IV (tests only; default: random)
        random_source: Callable returning n random bytes (default os.urandom)

    Returns:
        URL-safe base64 token text with padding

    Raises:
        EncryptionError: If the random source or the cipher fails
    """
    if not isinstance(plaintext, (bytes, bytearray)):
        raise TypeError(f"Plaintext must be bytes, got {type(plaintext).__name__}")

    if iv is None:
        source = random_source or os.urandom
        try:
            iv = source(IV_SIZE)
        except (OSError, NotImplementedError) as e:
            raise EncryptionError(f"Random source failed: {e}") from e
    if not isinstance(iv, (bytes, bytearray)) or len(iv) != IV_SIZE:
        raise EncryptionError(f"IV must be {IV_SIZE} bytes")

    try:
        ciphertext = encrypt_cbc(key.encryption_key, bytes(iv), bytes(plaintext))
    except (ValueError, TypeError) as e:
        raise EncryptionError(f"Cipher failure: {e}") from e

    try:
        header = assemble_header(_unix_seconds(now), bytes(iv))
    except ValueError as e:
        raise EncryptionError(str(e)) from e

    signed = header + ciphertext
    return b64_encode(signed + sign(key.signing_key, signed))


def _verify(
    token: Union[str, bytes],
    keys: Keys,
    ttl: Optional[int],
    now: Optional[Timestamp],
    max_clock_skew: int
) -> Tuple[ParsedToken, KeyMaterial]:
    if ttl is not None and ttl < 0:
        raise ValueError(f"ttl must not be negative, got {ttl}")

    candidates = _candidate_keys(keys)

    try:
        raw = b64_decode(token)
    except Base64DecodeError as e:
        raise MalformedTokenError(f"Token is not valid base64: {e}") from e

    parsed = parse_token(raw)

    verifying_key = None
    for candidate in candidates:
        if verify(candidate.signing_key, parsed.signed, parsed.mac):
            verifying_key = candidate
            break

    if verifying_key is None:
        raise AuthenticationError()

    # ttl of None or 0 disables the age check
    if ttl:
        current = _unix_seconds(now)
        if current - parsed.timestamp > ttl:
            raise ExpiredTokenError(
                f"Token expired: issued {current - parsed.timestamp}s ago (ttl {ttl}s)"
            )
        if parsed.timestamp - current > max_clock_skew:
            raise NotYetValidError(
                f"Token timestamp is {parsed.timestamp - current}s in the future"
            )

    return parsed, verifying_key


def decrypt(
    token: Union[str, bytes],
    keys: Keys,
    ttl: Optional[int] = None,
    now: Optional[Timestamp] = None,
    max_clock_skew: int = DEFAULT_MAX_CLOCK_SKEW
) -> bytes:
    """
    Verify and decrypt token text.

    Args:
        token: Token text (str or ASCII bytes)
        keys: One key or an ordered sequence of candidate keys; the first
              key whose HMAC matches is used
        ttl: Maximum token age in seconds (None or 0 disables the check)
        now: Current time for the TTL check (default: current time)
        max_clock_skew: Tolerated seconds a token may be in the future

    Returns:
        Recovered plaintext

    Raises:
        MalformedTokenError: Bad base64 or impossible length
        UnsupportedVersionError: Version byte is not 0x80
        AuthenticationError: No candidate key verifies the HMAC
        ExpiredTokenError: Token older than ttl
        NotYetValidError: Token timestamp beyond the clock skew
        PaddingError: Decrypted padding is invalid
        ValueError: ttl is negative
    """
    parsed, key = _verify(token, keys, ttl, now, max_clock_skew)

    try:
        return decrypt_cbc(key.encryption_key, parsed.iv, parsed.ciphertext)
    except ValueError:
        # Same message as an HMAC failure
        raise PaddingError() from None


def extract_timestamp(
    token: Union[str, bytes],
    keys: Keys
) -> int:
    """
    Verify a token and return its embedded Unix timestamp without
    decrypting it.
    """
    parsed, _ = _verify(token, keys, ttl=None, now=None, max_clock_skew=DEFAULT_MAX_CLOCK_SKEW)
    return parsed.timestamp


class TokenCodec:
    """
    Token codec bound to a configuration.

    Reads the 'token' section of the configuration dictionary:
        config['token']['ttl_seconds']: Maximum token age, 0 disables (default: 0)
        config['token']['max_clock_skew_seconds']: Future tolerance (default: 60)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        random_source: Optional[Callable[[int], bytes]] = None
    ):
        token_config = (config or {}).get('token', {}) or {}

        ttl = token_config.get('ttl_seconds', 0)
        skew = token_config.get('max_clock_skew_seconds', DEFAULT_MAX_CLOCK_SKEW)

        if ttl is not None and (not isinstance(ttl, int) or ttl < 0):
            raise ConfigurationError(f"token.ttl_seconds must be a non-negative integer, got {ttl!r}")
        if not isinstance(skew, int) or skew < 0:
            raise ConfigurationError(
                f"token.max_clock_skew_seconds must be a non-negative integer, got {skew!r}"
            )

        self.ttl = ttl or None
        self.max_clock_skew = skew
        self.random_source = random_source

    def encrypt(
        self,
        plaintext: bytes,
        key: KeyMaterial,
        now: Optional[Timestamp] = None
    ) -> str:
        return encrypt(plaintext, key, now=now, random_source=self.random_source)

    def decrypt(
        self,
        token: Union[str, bytes],
        keys: Keys,
        now: Optional[Timestamp] = None
    ) -> bytes:
        return decrypt(
            token,
            keys,
            ttl=self.ttl,
            now=now,
            max_clock_skew=self.max_clock_skew
        )

    def extract_timestamp(self, token: Union[str, bytes], keys: Keys) -> int:
        return extract_timestamp(token, keys)
