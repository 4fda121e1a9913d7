"""Authentication errors raised while verifying Firebase ID tokens.

This module defines the exception hierarchy for ID token verification failures.
All verification failures inherit from AuthError to allow catch-all handling.

Error messages are part of the public contract: callers match on them (often by
substring), so the verifier raises them with fixed wording. Signature failures
are always reported as a generic "Token is invalid" so a forged token learns
nothing about why it was rejected.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for all authentication failures.

    Attributes:
        description: Human-readable failure message (same as ``str(error)``).
        error_code: HTTP status a web adapter should answer with.
    """

    error_code: int = 401

    def __init__(self, description: str = "Authentication failed") -> None:
        super().__init__(description)
        self.description = description


class MissingToken(AuthError):  # noqa: N818
    """Raised when no token can be found in the incoming request.

    This occurs when:
    - The Authorization header is missing
    - The Authorization header is not "Bearer <token>"
    - The configured cookie is missing
    """


class InvalidToken(AuthError):  # noqa: N818
    """Raised when a token is present but fails verification.

    This covers:
    - Audience, subject, issuer and time claim checks
    - Unsupported header algorithm (anything but RS256)
    - A key ID that the Google key endpoint does not serve
    - Signature verification failures ("Token is invalid")
    """


class ExpiredToken(AuthError):  # noqa: N818
    """Raised when the token's ``exp`` claim is in the past.

    Kept apart from InvalidToken so callers can prompt a token refresh.
    """


class RevokedToken(AuthError):  # noqa: N818
    """Raised when the token was issued before the account's ``validSince`` time."""


class AccountLookupError(Exception):
    """Raised when the account lookup cannot produce a ``validSince`` timestamp.

    Not an AuthError: a missing account record or field is an upstream failure
    and must never be reported as a revoked token.
    """
