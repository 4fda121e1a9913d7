"""Protocol definitions for the Firebase ID token verifier.

This module defines structural interfaces using Protocol (PEP 544) for:
- Token verification
- Signing-key caching
- Token extraction

Any object that implements the required methods satisfies the protocol, so an
edge KV namespace, a Redis client adapter or a test double can all be passed
as a cache without inheriting from anything here.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypeAlias

# ============================================================================
# Type Aliases
# ============================================================================

Claims: TypeAlias = Mapping[str, Any]
"""Represents the decoded ID token payload as an immutable mapping."""

ViewFunc: TypeAlias = Callable[..., Any]
"""Type alias for Flask view functions (callable that takes any args and returns any)."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyCache(Protocol):
    """Protocol for caching Google signing certificates.

    Entries are keyed by ``"googlePublicKey-{kid}"`` and hold the raw PEM
    certificate string. The store owns expiry; the verifier only supplies the
    TTL advertised by Google's ``Cache-Control`` header.

    Implementations may be slow or eventually consistent. Concurrent writers
    for the same key always write the same certificate, so no locking is
    needed.
    """

    async def get(self, key: str) -> str | None:
        """Return the cached certificate, or None on a miss."""
        ...

    async def put(self, key: str, value: str, *, expiration_ttl: int) -> None:
        """Store a certificate for ``expiration_ttl`` seconds."""
        ...


class TokenVerifier(Protocol):
    """Protocol for ID token verification implementations.

    Implementers must provide an async verify() method that validates the
    token's claims and signature and returns the decoded payload.
    """

    async def verify(self, token: str, *, check_revoked: bool | None = None) -> Claims:
        """Verify an ID token and return its decoded claims.

        Args:
            token: The raw JWT string.
            check_revoked: Override the verifier's default revocation policy.
                None keeps the default.

        Raises:
            InvalidToken: Claims, header or signature are invalid.
            ExpiredToken: The token's exp claim has passed.
            RevokedToken: The account's tokens were revoked after issuance.
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting ID tokens from Flask requests.

    Common implementations:
    - Authorization: Bearer <token> header
    - Cookie-based storage
    """

    def extract(self) -> str:
        """Extract the raw JWT string from the current Flask request.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
