from collections.abc import Callable
from typing import Any

import jwt
import pytest
from conftest import ISSUER, PROJECT_ID

from firebase_token_verification import claims as claims_module
from firebase_token_verification.claims import ValidationResult, validate_claims, validate_jwt_body


def test_valid_body_passes(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(), PROJECT_ID)
    assert result == ValidationResult(is_valid=True)


def test_audience_mismatch(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(aud="someone-else"), PROJECT_ID)
    assert result.is_valid is False
    assert result.error_message == (
        "Token audience does not match project ID, expected proj-1, got someone-else"
    )


def test_audience_checked_before_everything_else(make_token: Callable[..., str]):
    token = make_token(aud="x", sub="", iss="https://evil.example", exp=1)
    result = validate_jwt_body(token, PROJECT_ID)
    assert result.error_message is not None
    assert result.error_message.startswith("Token audience does not match project ID")


def test_subject_not_string():
    result = validate_claims({"aud": PROJECT_ID, "sub": 42, "iss": ISSUER}, PROJECT_ID)
    assert result.error_message == "Token subject is not a string"


def test_missing_subject_is_not_string(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(drop=("sub",)), PROJECT_ID)
    assert result.error_message == "Token subject is not a string"


def test_subject_empty(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(sub=""), PROJECT_ID)
    assert result.error_message == "Token subject is empty"


def test_issuer_mismatch_reports_both_values(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(iss="https://securetoken.google.com/other"), PROJECT_ID)
    assert result.error_message == (
        f"Token issuer does not match project ID, expected {ISSUER}, "
        "got https://securetoken.google.com/other"
    )


def test_expired(make_token: Callable[..., str], valid_claims: dict[str, Any]):
    token = make_token(exp=valid_claims["iat"] - 1, iat=valid_claims["iat"] - 7200)
    result = validate_jwt_body(token, PROJECT_ID)
    assert result.error_message == "Token expiration date is in the past"


def test_expiry_uses_ceiling_of_current_time(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(claims_module.time, "time", lambda: 1000.2)
    base = {"aud": PROJECT_ID, "sub": "u", "iss": ISSUER}

    # ceil(1000.2) == 1001, so exp=1000 is already past but exp=1001 is not
    assert validate_claims({**base, "exp": 1000}, PROJECT_ID).error_message == (
        "Token expiration date is in the past"
    )
    assert validate_claims({**base, "exp": 1001}, PROJECT_ID).is_valid is True


def test_issued_in_future(make_token: Callable[..., str], valid_claims: dict[str, Any]):
    result = validate_jwt_body(make_token(iat=valid_claims["iat"] + 3600), PROJECT_ID)
    assert result.error_message == "Token issued at date is in the future"


def test_expiry_checked_before_issued_at(make_token: Callable[..., str], valid_claims: dict[str, Any]):
    now = valid_claims["iat"]
    result = validate_jwt_body(make_token(exp=now - 10, iat=now + 3600), PROJECT_ID)
    assert result.error_message == "Token expiration date is in the past"


def test_missing_time_claims_are_not_checked(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(drop=("exp", "iat", "auth_time")), PROJECT_ID)
    assert result.is_valid is True


def test_auth_time_not_a_number(make_token: Callable[..., str]):
    result = validate_jwt_body(make_token(auth_time="yesterday"), PROJECT_ID)
    assert result.error_message == "Token auth time is not a number"


def test_auth_time_boolean_is_not_a_number():
    base = {"aud": PROJECT_ID, "sub": "u", "iss": ISSUER, "auth_time": True}
    assert validate_claims(base, PROJECT_ID).error_message == "Token auth time is not a number"


def test_auth_time_in_future(make_token: Callable[..., str], valid_claims: dict[str, Any]):
    result = validate_jwt_body(make_token(auth_time=valid_claims["iat"] + 3600), PROJECT_ID)
    assert result.error_message == "Token auth time is in the future"


def test_passthrough_claims_are_ignored(make_token: Callable[..., str]):
    token = make_token(email=None, custom={"admin": True}, firebase="anything")
    assert validate_jwt_body(token, PROJECT_ID).is_valid is True


def test_malformed_token_raises_decode_error():
    with pytest.raises(jwt.DecodeError):
        validate_jwt_body("not-a-jwt", PROJECT_ID)
