"""Firebase ID token body validation.

Cheap, synchronous checks on the *unverified* token payload, run before any
network call so foreign or stale tokens are rejected without touching the key
endpoint. The same issuer/audience rules are asserted again by PyJWT once the
signature has been verified.

Checks run in a fixed order and the first failure wins:

1. ``aud`` equals the project ID
2. ``sub`` is a string
3. ``sub`` is not empty
4. ``iss`` equals ``https://securetoken.google.com/<project ID>``
5. ``exp`` (if present) is not in the past
6. ``iat`` (if present) is not in the future
7. ``auth_time`` (if present) is a number
8. ``auth_time`` is not in the future
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Final

import jwt

ISSUER_PREFIX: Final[str] = "https://securetoken.google.com/"

SUBJECT_NOT_STRING: Final[str] = "Token subject is not a string"
SUBJECT_EMPTY: Final[str] = "Token subject is empty"
TOKEN_EXPIRED: Final[str] = "Token expiration date is in the past"
ISSUED_IN_FUTURE: Final[str] = "Token issued at date is in the future"
AUTH_TIME_NOT_NUMBER: Final[str] = "Token auth time is not a number"
AUTH_TIME_IN_FUTURE: Final[str] = "Token auth time is in the future"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a non-throwing validation step.

    Attributes:
        is_valid: Whether the step passed.
        error_message: Failure reason when ``is_valid`` is False.
        signing_key: Resolved certificate, set only by header validation.
    """

    is_valid: bool
    error_message: str | None = None
    signing_key: str | None = None

    @classmethod
    def ok(cls, signing_key: str | None = None) -> ValidationResult:
        return cls(is_valid=True, signing_key=signing_key)

    @classmethod
    def fail(cls, error_message: str) -> ValidationResult:
        return cls(is_valid=False, error_message=error_message)


def expected_issuer(project_id: str) -> str:
    return f"{ISSUER_PREFIX}{project_id}"


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid timestamp
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def decode_unverified_claims(token: str) -> dict[str, Any]:
    """Decode the payload without verifying the signature.

    Raises:
        jwt.DecodeError: The token is not a decodable JWT.
    """
    return jwt.decode(token, options={"verify_signature": False})


def validate_claims(claims: dict[str, Any], project_id: str) -> ValidationResult:
    """Run the ordered body checks against an already-decoded payload."""
    audience = claims.get("aud")
    if audience != project_id:
        return ValidationResult.fail(
            f"Token audience does not match project ID, expected {project_id}, got {audience}"
        )

    subject = claims.get("sub")
    if not isinstance(subject, str):
        return ValidationResult.fail(SUBJECT_NOT_STRING)
    if subject == "":
        return ValidationResult.fail(SUBJECT_EMPTY)

    issuer = expected_issuer(project_id)
    if claims.get("iss") != issuer:
        return ValidationResult.fail(
            f"Token issuer does not match project ID, expected {issuer}, got {claims.get('iss')}"
        )

    # ceil so sub-second truncation never expires a token early
    now = math.ceil(time.time())

    expires_at = claims.get("exp")
    if is_number(expires_at) and expires_at < now:
        return ValidationResult.fail(TOKEN_EXPIRED)

    issued_at = claims.get("iat")
    if is_number(issued_at) and issued_at > now:
        return ValidationResult.fail(ISSUED_IN_FUTURE)

    auth_time = claims.get("auth_time")
    if auth_time is not None and not is_number(auth_time):
        return ValidationResult.fail(AUTH_TIME_NOT_NUMBER)
    if auth_time is not None and auth_time > now:
        return ValidationResult.fail(AUTH_TIME_IN_FUTURE)

    return ValidationResult.ok()


def validate_jwt_body(token: str, project_id: str) -> ValidationResult:
    """Validate the body of a Firebase ID token against a project.

    Never raises for decodable-but-wrong claims; those come back as a failed
    ValidationResult carrying the reason.

    Args:
        token: Raw JWT string.
        project_id: Firebase project ID (the expected audience).

    Returns:
        ValidationResult with ``is_valid`` and, on failure, ``error_message``.

    Raises:
        jwt.DecodeError: The token is not a decodable JWT.
    """
    return validate_claims(decode_unverified_claims(token), project_id)
