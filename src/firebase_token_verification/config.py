"""Environment-driven configuration for the ID token verifier.

Values are read from the process environment after loading a ``.env`` file
with python-dotenv:

- ``FIREBASE_PROJECT_ID`` (required)
- ``FIREBASE_MANAGEMENT_TOKEN``: OAuth2 bearer token for revocation checks
- ``FIREBASE_CHECK_REVOKED``: 1/true/yes/on to check revocation by default
- ``FIREBASE_PUBLIC_KEYS_URL``: override Google's certificate endpoint
- ``FIREBASE_ACCOUNT_LOOKUP_URL``: override the accounts:lookup endpoint
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from dotenv import load_dotenv

from .key_providers import GOOGLE_PUBLIC_KEYS_URL
from .revocation import ACCOUNT_LOOKUP_URL
from .verifier import FirebaseVerifyOptions

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class VerifierSettings:
    project_id: str
    management_credential: str | None = None
    check_revoked: bool = False
    public_keys_url: str = GOOGLE_PUBLIC_KEYS_URL
    account_lookup_url: str = ACCOUNT_LOOKUP_URL

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True
    ) -> VerifierSettings:
        """Build settings from the environment.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            dotenv: Load a ``.env`` file into ``os.environ`` first.

        Raises:
            ValueError: FIREBASE_PROJECT_ID is missing or empty.
        """
        if dotenv:
            load_dotenv()
        env = os.environ if environ is None else environ

        project_id = (env.get("FIREBASE_PROJECT_ID") or "").strip()
        if not project_id:
            raise ValueError("FIREBASE_PROJECT_ID must be set")

        return cls(
            project_id=project_id,
            management_credential=env.get("FIREBASE_MANAGEMENT_TOKEN") or None,
            check_revoked=_env_flag(env.get("FIREBASE_CHECK_REVOKED")),
            public_keys_url=env.get("FIREBASE_PUBLIC_KEYS_URL") or GOOGLE_PUBLIC_KEYS_URL,
            account_lookup_url=env.get("FIREBASE_ACCOUNT_LOOKUP_URL") or ACCOUNT_LOOKUP_URL,
        )

    def verify_options(self) -> FirebaseVerifyOptions:
        return FirebaseVerifyOptions(
            project_id=self.project_id,
            check_revoked=self.check_revoked,
            public_keys_url=self.public_keys_url,
            account_lookup_url=self.account_lookup_url,
        )
