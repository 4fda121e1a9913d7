"""Flask extension for Firebase ID token authentication.

Key Components:
- AuthExtension: Decorator class for protecting Flask routes
- get_verified_id_claims: Utility for verifying ID tokens from cookies

Per request:
1. Extract the token from the request (header or cookie)
2. Verify claims, signature and (optionally) revocation
3. Store verified claims in ``flask.g.firebase_token`` for the view
4. Convert auth errors to HTTP responses (401)

Verification is async; views stay synchronous and the verifier coroutine is
run through ``Flask.ensure_sync``, which needs the ``flask[async]`` extra.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, current_app, g

from .errors import AuthError
from .extractors import DEFAULT_COOKIE, BearerExtractor, CookieExtractor

if TYPE_CHECKING:
    from .protocols import Claims, Extractor, TokenVerifier, ViewFunc

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "firebase_auth"
"""Flask extensions registry key for AuthExtension."""


def _verify(verifier: TokenVerifier, token: str, check_revoked: bool | None) -> Claims:
    return current_app.ensure_sync(verifier.verify)(token, check_revoked=check_revoked)


class AuthExtension:
    """
    Flask decorator glue for Firebase ID token authentication.

    Responsibilities:
    - Extract token from request
    - Verify token (TokenVerifier)
    - Store verified claims in `flask.g.firebase_token`
    - Convert domain errors to HTTP responses (abort)

    Usage:
        auth = AuthExtension(verifier)
        auth.init_app(app)

        @app.get("/me")
        @auth.require()
        def me(): ...

        @app.post("/payout")
        @auth.require(check_revoked=True)
        def payout(): ...
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        extractor: Extractor | None = None,
    ) -> None:
        self._verifier: TokenVerifier = verifier
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        verifier: TokenVerifier | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register the extension on a Flask app, optionally swapping components."""
        if verifier is not None:
            self._verifier = verifier
        if extractor is not None:
            self._extractor = extractor

        app.extensions[_EXT_KEY] = self

    def require(self, *, check_revoked: bool | None = None):
        """Decorator to protect Flask routes with ID token authentication.

        Error mapping:
        - ``MissingToken``  -> HTTP 401 ("Missing Authorization header", ...)
        - ``InvalidToken``  -> HTTP 401 (the verification message)
        - ``ExpiredToken``  -> HTTP 401 ("Token expiration date is in the past")
        - ``RevokedToken``  -> HTTP 401 ("Token is revoked")
        - Any other error   -> HTTP 401 ("Authentication failed")

        Args:
            check_revoked: Override the verifier's revocation policy for this
                route. None keeps the verifier's default.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    token = self._extractor.extract()
                    g.firebase_token = _verify(self._verifier, token, check_revoked)
                except AuthError as e:
                    abort(e.error_code, description=e.description)
                except Exception:
                    logger.exception("ID token verification failed unexpectedly")
                    abort(401, description="Authentication failed")

                return current_app.ensure_sync(view)(*args, **kwargs)

            return wrapper

        return decorator


def get_verified_id_claims(
    verifier: TokenVerifier,
    *,
    cookie_name: str = DEFAULT_COOKIE,
    check_revoked: bool | None = None,
) -> Claims:
    """
    Return verified ID token claims from the current Flask request.

    - Extracts the ID token from a cookie (default "id_token")
    - Verifies claims, signature and optionally revocation
    - Returns decoded claims

    Aborts with 401 when the cookie is missing or verification fails.
    """
    try:
        token = CookieExtractor(cookie_name).extract()
        claims = _verify(verifier, token, check_revoked)
    except AuthError as e:
        abort(e.error_code, description=e.description)
    except Exception:
        logger.exception("ID token verification failed unexpectedly")
        abort(401, description="Authentication failed")
    return claims
