"""
Test configuration and fixtures.
Cloudflare KV is replaced by an in-memory namespace behind httpx.MockTransport;
R2 presigning runs offline against fake credentials.
"""
import os

# Set test environment before any imports
os.environ["ENVIRONMENT"] = "test"
os.environ["R2_ACCOUNT_ID"] = "testaccount"
os.environ["R2_ACCESS_KEY"] = "test-access-key"
os.environ["R2_SECRET_KEY"] = "test-secret-key"
os.environ["R2_BUCKET"] = "qrlink-test"
os.environ["CF_KV_NAMESPACE_ID"] = "test-namespace"
os.environ["CF_KV_API_TOKEN"] = "test-token"
os.environ["ACCESS_PASSWORD"] = "test-password"
for name in ("R2_ENDPOINT", "R2_PUBLIC_DOMAIN", "DOWNLOAD_STRATEGY", "MAX_UPLOAD_SIZE"):
    os.environ.pop(name, None)

import random
import pytest
import httpx
from typing import AsyncGenerator

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from qrlink.storage.kv_client import KVClient
from qrlink.storage.r2_client import R2Client
from qrlink.services.shortlink_service import ShortLinkService


ACCESS_PASSWORD = "test-password"
KV_VALUES_PATH = "/client/v4/accounts/testaccount/storage/kv/namespaces/test-namespace/values/"


class FakeKVNamespace:
    """
    In-memory stand-in for the Cloudflare KV REST API.

    Honors expiration_ttl against its own clock; advance() moves time forward.
    """

    def __init__(self):
        self.values = {}  # key -> (value, expires_at)
        self.now = 1_700_000_000.0
        self.requests = []
        self.fail_with = None  # (status_code, body) returned for every request

    def advance(self, seconds: float):
        self.now += seconds

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("authorization") != "Bearer test-token":
            return httpx.Response(401, json={"success": False, "errors": [{"message": "Authentication error"}]})

        if self.fail_with is not None:
            status_code, body = self.fail_with
            return httpx.Response(status_code, text=body)

        path = request.url.path
        if not path.startswith(KV_VALUES_PATH):
            return httpx.Response(400, json={"success": False})
        key = path[len(KV_VALUES_PATH):]

        if request.method == "PUT":
            ttl = int(request.url.params["expiration_ttl"])
            self.values[key] = (request.content.decode("utf-8"), self.now + ttl)
            return httpx.Response(200, json={"success": True, "errors": [], "messages": [], "result": None})

        if request.method == "GET":
            entry = self.values.get(key)
            if entry is None or entry[1] <= self.now:
                return httpx.Response(404, json={"success": False, "errors": [{"code": 10009, "message": "key not found"}]})
            return httpx.Response(200, text=entry[0])

        return httpx.Response(405)


@pytest.fixture
def fake_kv() -> FakeKVNamespace:
    """Fresh in-memory KV namespace."""
    return FakeKVNamespace()


@pytest.fixture
def kv_client(fake_kv: FakeKVNamespace) -> KVClient:
    """KV client wired to the fake namespace."""
    return KVClient(transport=httpx.MockTransport(fake_kv.handler))


@pytest.fixture
def short_link_service(kv_client: KVClient) -> ShortLinkService:
    """Short link service with a seeded code generator."""
    return ShortLinkService(kv_client, rng=random.Random(1234))


@pytest.fixture
def r2_client() -> R2Client:
    """R2 client built from the test environment (signs offline)."""
    return R2Client()


@pytest.fixture
def auth_headers() -> dict:
    """Correct access password header."""
    return {"x-access-password": ACCESS_PASSWORD}


def get_test_app(short_link_service: ShortLinkService, r2_client: R2Client) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    from qrlink.main import app
    from qrlink.services.shortlink_service import get_short_link_service
    from qrlink.storage.r2_client import get_r2_client

    app.dependency_overrides[get_short_link_service] = lambda: short_link_service
    app.dependency_overrides[get_r2_client] = lambda: r2_client

    return app


@pytest.fixture
async def app(short_link_service: ShortLinkService, r2_client: R2Client) -> AsyncGenerator[FastAPI, None]:
    """FastAPI app with test dependencies; overrides cleared afterwards."""
    test_app = get_test_app(short_link_service, r2_client)
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
