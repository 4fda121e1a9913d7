"""
Google public key source for Firebase ID tokens.

Fetches the current certificate set Google signs Firebase ID tokens with, and
the lifetime Google advertises for it through ``Cache-Control: max-age``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

import httpx

logger = logging.getLogger(__name__)

GOOGLE_PUBLIC_KEYS_URL: Final[str] = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

_MAX_AGE_RE: Final = re.compile(r"(?:^|[,\s])max-age\s*=\s*\"?(\d+)\"?", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class PublicKeySet:
    """Key-id to PEM certificate mapping plus its cache lifetime.

    Attributes:
        keys: Mapping of ``kid`` to X.509 certificate (PEM).
        cache_duration: Seconds the set may be cached; 0 means do not cache.
    """

    keys: Mapping[str, str]
    cache_duration: int = 0


def parse_max_age(cache_control: str | None) -> int:
    """Return the ``max-age`` directive of a Cache-Control value, or 0.

    Google sends e.g. ``public, max-age=19845, must-revalidate, no-transform``.
    """
    if not cache_control:
        return 0
    match = _MAX_AGE_RE.search(cache_control)
    if match is None:
        return 0
    return int(match.group(1))


async def fetch_public_keys(
    client: httpx.AsyncClient,
    url: str = GOOGLE_PUBLIC_KEYS_URL,
) -> PublicKeySet:
    """Fetch Google's current signing certificates.

    Transport errors and non-2xx responses propagate as ``httpx.HTTPError``;
    retry policy belongs to the caller.

    Args:
        client: HTTP client used for the request.
        url: Key endpoint returning ``{kid: certificate}`` JSON.

    Returns:
        The fetched PublicKeySet.

    Raises:
        httpx.HTTPError: Network failure or non-2xx status.
        ValueError: The body is not a JSON object of strings.
    """
    response = await client.get(url)
    response.raise_for_status()

    body = response.json()
    if not isinstance(body, dict):
        raise ValueError("Google public key response is not a JSON object")

    keys = {kid: cert for kid, cert in body.items() if isinstance(cert, str)}
    cache_duration = parse_max_age(response.headers.get("cache-control"))

    logger.debug(
        "Fetched %d Google public keys (cache duration %ss)", len(keys), cache_duration
    )
    return PublicKeySet(keys=keys, cache_duration=cache_duration)
