"""Pytest configuration and fixtures"""
from typing import Callable, Generator, List, Optional

import fakeredis
import httpx
import pytest
from fastapi.testclient import TestClient

from keyrelay.api.deps import get_http_transport
from keyrelay.config import Settings, get_settings
from keyrelay.database import get_redis
from keyrelay.main import app

ADMIN_PASSWORD = "test-login-passwd"
PUBLISH_PASSWORD = "test-publish-password"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with known secrets and shared platform credentials"""
    return Settings(
        LOGIN_PASSWD=ADMIN_PASSWORD,
        PUBLISH_PASSWORD=PUBLISH_PASSWORD,
        API_KEYS_JWT_SECRET_KEY="test-jwt-secret",
        DEV_TO_API_KEY="shared-devto-key",
        MEDIUM_API_KEY="shared-medium-key",
    )


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    """A private in-memory Redis server per test"""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server: fakeredis.FakeServer) -> fakeredis.FakeAsyncRedis:
    return fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)


class PlatformStub:
    """Serves dev.to and Medium API calls through ``httpx.MockTransport``.

    Every request is recorded; set ``devto_status`` / ``medium_status`` to make
    a platform reject the publish call.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.devto_status = 201
        self.medium_status = 201
        self.medium_me_status = 200
        self.medium_user: Optional[dict] = {"id": "medium-user-1"}
        self.fail_transport_for: Optional[str] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if self.fail_transport_for and self.fail_transport_for in host:
            raise httpx.ConnectError("connection refused", request=request)

        if host == "dev.to":
            if self.devto_status >= 400:
                return httpx.Response(self.devto_status, json={"error": "Tag is invalid", "status": self.devto_status})
            return httpx.Response(self.devto_status, json={"id": 101, "url": "https://dev.to/someone/article-101"})

        if host == "api.medium.com":
            if request.url.path.endswith("/me"):
                if self.medium_me_status >= 400:
                    return httpx.Response(self.medium_me_status, json={"errors": [{"message": "Token was invalid."}]})
                return httpx.Response(200, json={"data": self.medium_user})
            if self.medium_status >= 400:
                return httpx.Response(self.medium_status, json={"errors": [{"message": "Duplicate title"}]})
            return httpx.Response(self.medium_status, json={"data": {"id": "post-1", "url": "https://medium.com/p/post-1"}})

        return httpx.Response(404, text="not found")

    def requests_to(self, host: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.host == host]


@pytest.fixture
def platforms() -> PlatformStub:
    return PlatformStub()


@pytest.fixture
def transport(platforms: PlatformStub) -> httpx.MockTransport:
    return httpx.MockTransport(platforms.handler)


@pytest.fixture(scope="function")
def client(
    redis_client: fakeredis.FakeAsyncRedis,
    test_settings: Settings,
    transport: httpx.MockTransport,
) -> Generator[TestClient, None, None]:
    """Create test client with Redis, settings and outbound HTTP overridden"""
    app.dependency_overrides[get_redis] = lambda: redis_client
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_transport] = lambda: transport
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    """Admin authentication headers"""
    return {"X-Login-Passwd": ADMIN_PASSWORD}


@pytest.fixture
def publish_headers() -> dict:
    return {"X-Publish-Password": PUBLISH_PASSWORD}


@pytest.fixture
def issue_key(client: TestClient, admin_headers: dict) -> Callable[..., dict]:
    """Issue an API key through the API and return the response body"""

    def _issue(name: Optional[str] = None) -> dict:
        body = {"name": name} if name is not None else None
        response = client.put("/keys", json=body, headers=admin_headers)
        assert response.status_code == 200
        return response.json()

    return _issue


@pytest.fixture
def sample_article() -> dict:
    """Sample article payload for tests"""
    return {
        "title": "Test Article",
        "content": "# Hello\n\nPublished from the test suite.",
        "tags": ["test", "python"],
        "is_draft": True,
    }
