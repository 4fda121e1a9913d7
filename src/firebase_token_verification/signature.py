"""Header validation, signing-key resolution and signature verification.

This module bridges key resolution and cryptographic verification:
- Reads the unverified header to check ``alg`` and pick the ``kid``
- Resolves the certificate for that ``kid`` (cache first, then Google)
- Verifies the RS256 signature plus issuer/audience using PyJWT

Only RS256 is accepted. Allowing anything else (notably HS256) would let an
attacker sign a token with the public certificate as an HMAC secret.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

import jwt
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from .claims import ValidationResult, expected_issuer, is_number
from .errors import InvalidToken
from .key_providers import GOOGLE_PUBLIC_KEYS_URL, fetch_public_keys

if TYPE_CHECKING:
    import httpx

    from .protocols import Claims, KeyCache

logger = logging.getLogger(__name__)

ALGORITHM: Final[str] = "RS256"
CACHE_KEY_PREFIX: Final[str] = "googlePublicKey-"

ALGORITHM_NOT_RS256: Final[str] = "Token algorithm is not RS256"
UNKNOWN_KEY_ID: Final[str] = "Token key ID is not in the Google API"
TOKEN_INVALID: Final[str] = "Token is invalid"


def cache_key_for(kid: str) -> str:
    return f"{CACHE_KEY_PREFIX}{kid}"


async def validate_jwt_header(
    token: str,
    client: httpx.AsyncClient,
    cache: KeyCache | None = None,
    *,
    public_keys_url: str = GOOGLE_PUBLIC_KEYS_URL,
) -> ValidationResult:
    """Check the header algorithm and resolve the signing certificate.

    Resolution is cache-aside: a cache hit returns without any network call;
    a miss fetches the whole key set from Google and, when Google advertises a
    positive ``max-age``, stores the resolved certificate for that long.

    Args:
        token: Raw JWT string.
        client: HTTP client for the key endpoint.
        cache: Optional certificate cache. None disables caching.
        public_keys_url: Google certificate endpoint.

    Returns:
        ValidationResult with ``signing_key`` set on success.

    Raises:
        jwt.DecodeError: The header is not decodable.
        httpx.HTTPError: The key endpoint could not be reached.
    """
    header = jwt.get_unverified_header(token)

    if header.get("alg") != ALGORITHM:
        return ValidationResult.fail(ALGORITHM_NOT_RS256)

    kid = header.get("kid")
    if not kid:
        return ValidationResult.fail(UNKNOWN_KEY_ID)

    cache_key = cache_key_for(kid)

    if cache is not None:
        cached = await cache.get(cache_key)
        if cached:
            logger.debug("Signing key %s served from cache", kid)
            return ValidationResult.ok(signing_key=cached)

    logger.debug("Signing key %s not cached, fetching from Google API", kid)
    key_set = await fetch_public_keys(client, public_keys_url)

    signing_key = key_set.keys.get(kid)
    if not signing_key:
        return ValidationResult.fail(UNKNOWN_KEY_ID)

    if cache is not None and key_set.cache_duration > 0:
        try:
            await cache.put(cache_key, signing_key, expiration_ttl=key_set.cache_duration)
        except Exception:
            # Verification must not depend on the cache being writable
            logger.warning("Failed to cache signing key %s", kid, exc_info=True)

    return ValidationResult.ok(signing_key=signing_key)


def load_verification_key(certificate: str) -> RSAPublicKey:
    """Turn a PEM X.509 certificate (or bare PEM public key) into an RSA key.

    Raises:
        ValueError: The PEM cannot be parsed or does not hold an RSA key.
    """
    data = certificate.encode("utf-8")
    if b"BEGIN CERTIFICATE" in data:
        public_key = x509.load_pem_x509_certificate(data).public_key()
    else:
        public_key = load_pem_public_key(data)

    if not isinstance(public_key, RSAPublicKey):
        raise ValueError("Signing certificate does not contain an RSA public key")
    return public_key


def verify_signature(token: str, signing_key: str, project_id: str) -> Claims:
    """Verify the token signature and return its trusted claims.

    PyJWT re-asserts issuer and audience, so a token only passes when both the
    body checks and the cryptographic layer agree. Time windows are owned by
    validate_claims() (ceiling of the current second), so PyJWT's own
    ``exp``/``iat`` comparisons are disabled and only the timestamp types are
    re-checked here.

    Args:
        token: Raw JWT string.
        signing_key: PEM certificate resolved for the token's ``kid``.
        project_id: Firebase project ID (the expected audience).

    Returns:
        The decoded, verified claims.

    Raises:
        InvalidToken: "Token is invalid" for any key or signature failure.
    """
    try:
        public_key = load_verification_key(signing_key)
        payload = jwt.decode(
            token,
            public_key,
            algorithms=[ALGORITHM],
            audience=project_id,
            issuer=expected_issuer(project_id),
            options={"verify_exp": False, "verify_iat": False},
        )
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.debug("Signature verification failed: %s", e)
        raise InvalidToken(TOKEN_INVALID) from e

    for claim in ("exp", "iat"):
        if claim in payload and not is_number(payload[claim]):
            logger.debug("Signature verification failed: %s is not a number", claim)
            raise InvalidToken(TOKEN_INVALID)

    return payload
