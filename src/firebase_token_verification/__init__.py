"""
Firebase ID token verification with a pluggable signing-key cache.

High-level flow (per call)
--------------------------
1. `validate_jwt_body(token, project_id)` checks aud/sub/iss/exp/iat/auth_time
   on the unverified payload; failures stop before any network call.
2. `validate_jwt_header(token, client, cache)`:
   - Rejects any algorithm but RS256
   - Reads the certificate for `kid` from the cache, or fetches Google's
     certificate set and caches the hit for the advertised `max-age`
3. `verify_signature(token, certificate, project_id)` verifies the RS256
   signature and re-checks issuer/audience with PyJWT.
4. Optionally, `get_valid_since(sub, credential, client)` fetches the
   account's revocation time; tokens issued before it are rejected.

Security notes
--------------
- Never trust claims until signature verification succeeds.
- Signature failures are reported only as "Token is invalid".
- The revocation lookup only ever uses the verified `sub`.

Example usage
-------------

.. code-block:: python

    from firebase_token_verification import (
        AuthExtension,
        FirebaseTokenVerifier,
        FirebaseVerifyOptions,
        InMemoryCache,
        verify_id_token,
    )

    # One-off verification
    claims = await verify_id_token(id_token, "my-project", oauth2_token, InMemoryCache())

    # Reusable verifier + Flask routes
    verifier = FirebaseTokenVerifier(
        FirebaseVerifyOptions(project_id="my-project"),
        cache=InMemoryCache(),
        management_credential=oauth2_token,
    )
    auth = AuthExtension(verifier)

    @app.route("/protected")
    @auth.require(check_revoked=True)
    def protected_route():
        return {"uid": g.firebase_token["uid"]}
"""

# Cache stores
from .cache_stores import InMemoryCache, RedisCache

# Claims
from .claims import ValidationResult, validate_jwt_body

# Configuration
from .config import VerifierSettings

# Errors
from .errors import (
    AccountLookupError,
    AuthError,
    ExpiredToken,
    InvalidToken,
    MissingToken,
    RevokedToken,
)

# Extractors
from .extractors import FIREBASE_HOSTING_COOKIE, BearerExtractor, CookieExtractor

# Flask extension
from .flask_extension import AuthExtension, get_verified_id_claims

# Key providers
from .key_providers import PublicKeySet, fetch_public_keys

# Protocols
from .protocols import Claims, Extractor, KeyCache, TokenVerifier, ViewFunc

# Revocation
from .revocation import get_valid_since

# Signature
from .signature import validate_jwt_header, verify_signature

# Verifier
from .verifier import FirebaseTokenVerifier, FirebaseVerifyOptions, verify_id_token

__all__ = [
    # Errors
    "AccountLookupError",
    "AuthError",
    "ExpiredToken",
    "InvalidToken",
    "MissingToken",
    "RevokedToken",
    # Protocols
    "Claims",
    "Extractor",
    "KeyCache",
    "TokenVerifier",
    "ViewFunc",
    # Extractors
    "BearerExtractor",
    "CookieExtractor",
    "FIREBASE_HOSTING_COOKIE",
    # Claims
    "ValidationResult",
    "validate_jwt_body",
    # Key providers
    "PublicKeySet",
    "fetch_public_keys",
    # Signature
    "validate_jwt_header",
    "verify_signature",
    # Revocation
    "get_valid_since",
    # Verifier
    "FirebaseTokenVerifier",
    "FirebaseVerifyOptions",
    "verify_id_token",
    # Configuration
    "VerifierSettings",
    # Cache stores
    "InMemoryCache",
    "RedisCache",
    # Flask extension
    "AuthExtension",
    "get_verified_id_claims",
]
