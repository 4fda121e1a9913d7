import datetime
import time
from collections.abc import Callable
from typing import Any

import httpx
import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from flask import Flask

PROJECT_ID = "proj-1"
ISSUER = f"https://securetoken.google.com/{PROJECT_ID}"
KID = "k1"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


def _self_signed_certificate(key: rsa.RSAPrivateKey) -> str:
    name = x509.Name(
        [x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.system.gserviceaccount.com")]
    )
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture(scope="session")
def signing_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def certificate(signing_key: rsa.RSAPrivateKey) -> str:
    return _self_signed_certificate(signing_key)


@pytest.fixture(scope="session")
def other_certificate() -> str:
    """Certificate for a key that did NOT sign the test tokens."""
    return _self_signed_certificate(
        rsa.generate_private_key(public_exponent=65537, key_size=2048)
    )


@pytest.fixture
def valid_claims() -> dict[str, Any]:
    now = int(time.time())
    return {
        "iss": ISSUER,
        "aud": PROJECT_ID,
        "sub": "user-42",
        "iat": now,
        "exp": now + 3600,
        "auth_time": now,
        "email": "user42@example.com",
        "firebase": {"sign_in_provider": "password"},
    }


@pytest.fixture
def make_token(
    signing_key: rsa.RSAPrivateKey, valid_claims: dict[str, Any]
) -> Callable[..., str]:
    """
    Factory fixture that returns a function.

    Usage in tests:
        token = make_token(aud="other")          # override claims
        token = make_token(drop=["exp"])         # remove claims
        token = make_token(kid="unknown")        # change header kid
    """

    def _make(*, kid: str | None = KID, drop: tuple[str, ...] = (), **overrides: Any) -> str:
        claims = {**valid_claims, **overrides}
        for name in drop:
            claims.pop(name, None)
        headers = {"kid": kid} if kid is not None else {}
        return jwt.encode(claims, signing_key, algorithm="RS256", headers=headers)

    return _make


class RecordingCache:
    """KeyCache double that records every put with its TTL."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._store: dict[str, str] = dict(initial or {})
        self.get_calls: list[str] = []
        self.put_calls: list[tuple[str, str, int]] = []

    async def get(self, key: str) -> str | None:
        self.get_calls.append(key)
        return self._store.get(key)

    async def put(self, key: str, value: str, *, expiration_ttl: int) -> None:
        self.put_calls.append((key, value, expiration_ttl))
        self._store[key] = value


class BrokenWriteCache(RecordingCache):
    async def put(self, key: str, value: str, *, expiration_ttl: int) -> None:
        raise RuntimeError("KV write quota exceeded")


class FakeGoogle:
    """
    httpx transport standing in for Google's key endpoint and the
    Identity Toolkit accounts:lookup endpoint.
    """

    def __init__(
        self,
        keys: dict[str, str] | None = None,
        *,
        cache_control: str | None = "public, max-age=3600, must-revalidate, no-transform",
        users: list[dict[str, Any]] | None = None,
        lookup_status: int = 200,
    ):
        self.keys = keys or {}
        self.cache_control = cache_control
        self.users = users if users is not None else []
        self.lookup_status = lookup_status
        self.requests: list[httpx.Request] = []

    @property
    def key_fetches(self) -> int:
        return sum(1 for r in self.requests if r.method == "GET")

    @property
    def lookups(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            headers = {"cache-control": self.cache_control} if self.cache_control else {}
            return httpx.Response(200, json=self.keys, headers=headers)
        if self.lookup_status != 200:
            return httpx.Response(self.lookup_status, json={"error": {"message": "denied"}})
        return httpx.Response(200, json={"users": self.users} if self.users else {})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def recording_cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def fake_google(certificate: str) -> FakeGoogle:
    return FakeGoogle({KID: certificate})


class FakeRedis:
    """
    Minimal async redis stub for RedisCache tests.
    Stores bytes under keys and supports setex.
    """

    def __init__(self):
        self._store: dict[str, tuple[bytes, int]] = {}

    async def get(self, key: str):
        item = self._store.get(key)
        if item is None:
            return None
        data, expires_at = item
        if int(time.time()) >= expires_at:
            self._store.pop(key, None)
            return None
        return data

    async def setex(self, key: str, ttl_seconds: int, value: str | bytes):
        expires_at = int(time.time()) + int(ttl_seconds)
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = (value, expires_at)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
