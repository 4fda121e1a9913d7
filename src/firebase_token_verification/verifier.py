"""Firebase ID token verification.

This module composes the verification steps into the public operation:

    Received -> BodyChecked -> KeyResolved -> SignatureVerified
             -> [RevocationChecked] -> Accepted

Every step can reject; the first failure ends the call. Steps run one after
another because each outcome gates the next, and the body check runs before
any network I/O. Nothing is retried here: transport errors propagate so the
caller can apply its own retry and deadline policy.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

import httpx

from .claims import TOKEN_EXPIRED, validate_jwt_body
from .errors import AuthError, ExpiredToken, InvalidToken, RevokedToken
from .key_providers import GOOGLE_PUBLIC_KEYS_URL
from .revocation import ACCOUNT_LOOKUP_URL, get_valid_since
from .signature import validate_jwt_header, verify_signature

if TYPE_CHECKING:
    from .protocols import Claims, KeyCache

logger = logging.getLogger(__name__)

TOKEN_REVOKED = "Token is revoked"

CredentialSource: TypeAlias = str | Callable[[], Awaitable[str]]
"""A management bearer token, or an async callable that mints one."""


async def resolve_credential(source: CredentialSource) -> str:
    if isinstance(source, str):
        return source
    credential = source()
    if inspect.isawaitable(credential):
        credential = await credential
    return credential


async def verify_id_token(
    id_token: str,
    project_id: str,
    management_credential: CredentialSource | None,
    cache: KeyCache | None = None,
    check_revoked: bool = False,
    *,
    http_client: httpx.AsyncClient | None = None,
    public_keys_url: str = GOOGLE_PUBLIC_KEYS_URL,
    account_lookup_url: str = ACCOUNT_LOOKUP_URL,
) -> Claims:
    """Verify a Firebase ID token and return its decoded claims.

    Args:
        id_token: The Firebase ID token (JWT) to verify.
        project_id: Firebase project ID; the expected audience.
        management_credential: OAuth2 bearer token for the account lookup,
            or an async callable minting one. Only used when ``check_revoked``
            is True, and only resolved once the signature has been verified.
        cache: Optional certificate cache. None means always fetch.
        check_revoked: Also reject tokens issued before the account's
            ``validSince`` time.
        http_client: Client for outbound calls. When None, a client scoped to
            this call is opened after the body check and closed on return.
        public_keys_url: Google certificate endpoint.
        account_lookup_url: Identity Toolkit ``accounts:lookup`` endpoint.

    Returns:
        The verified claims, with ``uid`` set to the token's ``sub``.

    Raises:
        jwt.DecodeError: The token is not a decodable JWT.
        InvalidToken: Claims, header, key ID or signature are invalid.
        ExpiredToken: "Token expiration date is in the past".
        RevokedToken: "Token is revoked".
        AccountLookupError: The revocation lookup returned no usable record.
        httpx.HTTPError: A key or account endpoint could not be reached.
        ValueError: ``check_revoked`` was requested without a credential.
    """
    if check_revoked and not management_credential:
        raise ValueError("A management credential is required to check revocation")

    body = validate_jwt_body(id_token, project_id)
    if not body.is_valid:
        error_message = body.error_message or "Token is invalid"
        if error_message == TOKEN_EXPIRED:
            raise ExpiredToken(error_message)
        raise InvalidToken(error_message)

    if http_client is None:
        async with httpx.AsyncClient() as client:
            return await _verify_signed_token(
                id_token,
                project_id,
                management_credential,
                cache,
                check_revoked,
                client,
                public_keys_url,
                account_lookup_url,
            )

    return await _verify_signed_token(
        id_token,
        project_id,
        management_credential,
        cache,
        check_revoked,
        http_client,
        public_keys_url,
        account_lookup_url,
    )


async def _verify_signed_token(
    id_token: str,
    project_id: str,
    management_credential: CredentialSource | None,
    cache: KeyCache | None,
    check_revoked: bool,
    client: httpx.AsyncClient,
    public_keys_url: str,
    account_lookup_url: str,
) -> Claims:
    header = await validate_jwt_header(
        id_token, client, cache, public_keys_url=public_keys_url
    )
    if not header.is_valid or header.signing_key is None:
        raise InvalidToken(header.error_message or "Token is invalid")

    payload = verify_signature(id_token, header.signing_key, project_id)

    if check_revoked:
        # sub is only trusted once the signature has been verified
        valid_since = await get_valid_since(
            payload["sub"],
            await resolve_credential(management_credential or ""),
            client,
            account_lookup_url=account_lookup_url,
        )
        if valid_since > payload.get("iat", 0):
            raise RevokedToken(TOKEN_REVOKED)

    claims: dict[str, Any] = dict(payload)
    claims.setdefault("uid", payload["sub"])
    return claims


@dataclass(frozen=True, slots=True)
class FirebaseVerifyOptions:
    """What counts as a valid ID token for this application.

    Attributes:
        project_id: Firebase project ID. Tokens must carry it as ``aud`` and
            ``https://securetoken.google.com/<project_id>`` as ``iss``.
        check_revoked: Default revocation policy for verify(). Costs one extra
            account lookup per call.
        public_keys_url: Google certificate endpoint.
        account_lookup_url: Identity Toolkit ``accounts:lookup`` endpoint.
    """

    project_id: str
    check_revoked: bool = False
    public_keys_url: str = GOOGLE_PUBLIC_KEYS_URL
    account_lookup_url: str = ACCOUNT_LOOKUP_URL

    def __post_init__(self) -> None:
        if not self.project_id:
            raise ValueError("project_id must be a non-empty string")


class FirebaseTokenVerifier:
    """Reusable ID token verifier bound to one Firebase project.

    Implements the TokenVerifier protocol on top of verify_id_token(), so the
    Flask extension (or any other adapter) only needs a ``verify`` call.

    Example:
        ```python
        verifier = FirebaseTokenVerifier(
            FirebaseVerifyOptions(project_id="my-project"),
            cache=InMemoryCache(),
            management_credential=mint_oauth2_token,  # async callable or str
        )
        claims = await verifier.verify(id_token, check_revoked=True)
        ```

    Attributes:
        _opt: Immutable verification options.
        _cache: Optional certificate cache shared by every call.
        _credential: Management credential or the async callable producing it.
        _client: Optional shared HTTP client; None opens one per call.
    """

    def __init__(
        self,
        options: FirebaseVerifyOptions,
        *,
        cache: KeyCache | None = None,
        management_credential: CredentialSource | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._opt = options
        self._cache = cache
        self._credential = management_credential
        self._client = http_client

    @property
    def options(self) -> FirebaseVerifyOptions:
        return self._opt

    async def verify(self, token: str, *, check_revoked: bool | None = None) -> Claims:
        """Verify an ID token and return its decoded claims.

        Args:
            token: Raw JWT string.
            check_revoked: Override ``options.check_revoked`` for this call.

        Raises:
            Everything verify_id_token() raises.
        """
        revoked_check = self._opt.check_revoked if check_revoked is None else check_revoked

        try:
            return await verify_id_token(
                token,
                self._opt.project_id,
                self._credential,
                self._cache,
                revoked_check,
                http_client=self._client,
                public_keys_url=self._opt.public_keys_url,
                account_lookup_url=self._opt.account_lookup_url,
            )
        except AuthError as e:
            logger.warning("Rejected ID token for %s: %s", self._opt.project_id, e)
            raise
