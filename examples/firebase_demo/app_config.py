import os
from pathlib import Path

from firebase_token_verification import (
    AuthExtension,
    CookieExtractor,
    FirebaseTokenVerifier,
    InMemoryCache,
    VerifierSettings,
)

# Reads FIREBASE_PROJECT_ID, FIREBASE_MANAGEMENT_TOKEN, ... (and .env)
settings = VerifierSettings.from_env()

# OAuth2 access tokens expire after about an hour. Point this at a file kept
# fresh by something outside the app (a sidecar, a cron'd
# `gcloud auth print-access-token`) and every revocation check reads it anew.
TOKEN_FILE = os.environ.get("FIREBASE_MANAGEMENT_TOKEN_FILE")


async def management_token() -> str:
    if TOKEN_FILE:
        return Path(TOKEN_FILE).read_text(encoding="utf-8").strip()
    if settings.management_credential is None:
        raise RuntimeError("Set FIREBASE_MANAGEMENT_TOKEN_FILE or FIREBASE_MANAGEMENT_TOKEN")
    return settings.management_credential


# Flask runs each verification on a fresh event loop, so no shared http client
key_cache = InMemoryCache()
verifier = FirebaseTokenVerifier(
    settings.verify_options(),
    cache=key_cache,
    management_credential=management_token,
)

# auth will be the ext imported in the Flask app (Authorization: Bearer <id token>)
auth = AuthExtension(verifier=verifier)

# browser sessions that keep the ID token in a cookie
cookie_auth = AuthExtension(verifier=verifier, extractor=CookieExtractor("id_token"))
