"""Revocation lookup against the Identity Toolkit account API.

Firebase revokes tokens by moving an account's ``validSince`` timestamp
forward; any token issued before it is revoked. The timestamp is fetched on
every check and never cached, since it must reflect the latest revocation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from .errors import AccountLookupError

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

ACCOUNT_LOOKUP_URL: Final[str] = "https://identitytoolkit.googleapis.com/v1/accounts:lookup"


async def get_valid_since(
    subject: str,
    management_credential: str,
    client: httpx.AsyncClient,
    *,
    account_lookup_url: str = ACCOUNT_LOOKUP_URL,
) -> int:
    """Return the ``validSince`` time (Unix seconds) for an account.

    Args:
        subject: Verified ``sub`` of the token (the Firebase user ID).
        management_credential: OAuth2 bearer token for the account API,
            forwarded verbatim.
        client: HTTP client for the lookup call.
        account_lookup_url: Identity Toolkit ``accounts:lookup`` endpoint.

    Raises:
        AccountLookupError: No account record, or no usable ``validSince``.
        httpx.HTTPError: Network failure or non-2xx status.
    """
    response = await client.post(
        account_lookup_url,
        json={"localId": [subject]},
        headers={"Authorization": f"Bearer {management_credential}"},
    )
    response.raise_for_status()

    body = response.json()
    users = body.get("users") if isinstance(body, dict) else None
    if not users:
        raise AccountLookupError(f"User not found: {subject}")

    logger.debug("Account lookup returned %d record(s) for %s", len(users), subject)

    valid_since = users[0].get("validSince")
    if not isinstance(valid_since, str) or not valid_since:
        raise AccountLookupError("Token valid since time is not a string")

    try:
        return int(valid_since)
    except ValueError as e:
        raise AccountLookupError(
            f"Token valid since time is not a number: {valid_since!r}"
        ) from e
