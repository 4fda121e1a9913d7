"""Where a request carries its Firebase ID token.

- BearerExtractor: ``Authorization: Bearer <ID token>``, as sent by clients
  calling ``getIdToken()`` before each API request
- CookieExtractor: a cookie holding the ID token for browser pages. Behind
  Firebase Hosting only the ``__session`` cookie reaches the backend, see
  FIREBASE_HOSTING_COOKIE.
"""

from __future__ import annotations

from typing import Final

from flask import request

from .errors import MissingToken

FIREBASE_HOSTING_COOKIE: Final[str] = "__session"
DEFAULT_COOKIE: Final[str] = "id_token"


class BearerExtractor:
    def extract(self) -> str:
        """Return the ID token from the Authorization header.

        Raises:
            MissingToken: No header, another scheme, or an empty credential.
        """
        header = request.headers.get("Authorization", "").strip()
        if not header:
            raise MissingToken("Missing Authorization header")

        scheme, _, id_token = header.partition(" ")
        if scheme.lower() != "bearer":
            raise MissingToken("Invalid authorization scheme (expected 'Bearer')")

        id_token = id_token.strip()
        if not id_token:
            raise MissingToken("Authorization header carries no ID token")
        return id_token


class CookieExtractor:
    """Reads the ID token from a named cookie.

    The cookie should be HttpOnly, Secure and SameSite, and the app needs CSRF
    protection. ``CookieExtractor.for_hosting()`` targets the one cookie
    Firebase Hosting forwards to Cloud Functions and Cloud Run.
    """

    def __init__(self, cookie_name: str = DEFAULT_COOKIE) -> None:
        if not cookie_name or not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self.cookie_name = cookie_name

    @classmethod
    def for_hosting(cls) -> CookieExtractor:
        return cls(FIREBASE_HOSTING_COOKIE)

    def extract(self) -> str:
        id_token = request.cookies.get(self.cookie_name, "").strip()
        if not id_token:
            raise MissingToken(f"Missing cookie '{self.cookie_name}'")
        return id_token
