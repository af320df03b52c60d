# file: furet/module3_token/token_errors.py
"""
Token error types.

Verification failures are grouped under InvalidTokenError. PaddingError is
a subclass of AuthenticationError and reuses its message, so callers that
report errors to the outside cannot tell the two apart.
"""

from ..errors import FuretError


AUTHENTICATION_FAILED = "Token authentication failed"


class TokenError(FuretError):
    """Base exception for token operations."""
    pass


class EncryptionError(TokenError):
    """Raised when the random source or the cipher primitive fails."""
    pass


class InvalidTokenError(TokenError):
    """Base exception for tokens that fail verification."""
    pass


class MalformedTokenError(InvalidTokenError):
    """Raised when token text is not base64 or has an impossible length."""
    pass


class UnsupportedVersionError(InvalidTokenError):
    """Raised when the token version byte is not supported."""
    pass


class AuthenticationError(InvalidTokenError):
    """Raised when no candidate key verifies the token HMAC."""

    def __init__(self, message: str = AUTHENTICATION_FAILED):
        super().__init__(message)


class PaddingError(AuthenticationError):
    """Raised when the decrypted plaintext carries invalid PKCS7 padding."""

    def __init__(self, message: str = AUTHENTICATION_FAILED):
        super().__init__(message)


class ExpiredTokenError(InvalidTokenError):
    """Raised when the token is older than the configured TTL."""
    pass


class NotYetValidError(InvalidTokenError):
    """Raised when the token timestamp is too far in the future."""
    pass
