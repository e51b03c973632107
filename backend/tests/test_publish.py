"""Tests for publishing endpoints"""
import json

import fakeredis
import pytest
from fastapi.testclient import TestClient

from keyrelay.api.deps import get_media_key_service
from keyrelay.config import Settings, get_settings
from keyrelay.main import app
from keyrelay.services.media_keys import MediaKeyService
from keyrelay.stores.media_keys import MediaKeyStore


@pytest.fixture
def api_headers(client: TestClient, issue_key) -> dict:
    """An API key holding both platform credentials as media keys"""
    headers = {"X-API-Key": issue_key("publisher")["token"]}
    client.put("/mediakeys", json={"key": "DEV_TO_APIKEY", "value": "own-devto-key"}, headers=headers)
    client.put("/mediakeys", json={"key": "MEDIUM_APIKEY", "value": "own-medium-key"}, headers=headers)
    return headers


# ---------------------------------------------------------------------------
# POST /publish/{platform}
# ---------------------------------------------------------------------------

def test_publish_to_devto(client: TestClient, api_headers: dict, sample_article: dict, platforms):
    """Test publishing to dev.to with the caller's stored key"""
    response = client.post("/publish/devto", json=sample_article, headers=api_headers)
    assert response.status_code == 200

    data = response.json()
    assert data["done"] is True
    assert data["article"]["id"] == 101

    [request] = platforms.requests_to("dev.to")
    assert request.method == "POST"
    assert request.url.path == "/api/articles"
    assert request.headers["api-key"] == "own-devto-key"
    assert json.loads(request.content) == {
        "article": {
            "title": sample_article["title"],
            "body_markdown": sample_article["content"],
            "tags": sample_article["tags"],
            "published": False,
        }
    }


def test_publish_to_medium(client: TestClient, api_headers: dict, sample_article: dict, platforms):
    """Test that Medium publishing looks up the user before posting"""
    response = client.post("/publish/medium", json=sample_article, headers=api_headers)
    assert response.status_code == 200
    assert response.json()["article"]["data"]["id"] == "post-1"

    me, post = platforms.requests_to("api.medium.com")
    assert me.method == "GET" and me.url.path == "/v1/me"
    assert post.url.path == "/v1/users/medium-user-1/posts"
    assert post.headers["authorization"] == "Bearer own-medium-key"

    body = json.loads(post.content)
    assert body["contentFormat"] == "markdown"
    assert body["content"] == sample_article["content"]
    assert body["publishStatus"] == "draft"


def test_publish_public_when_not_draft(client: TestClient, api_headers: dict, sample_article: dict, platforms):
    """Test that is_draft defaults to false and maps to a published article"""
    del sample_article["is_draft"]
    client.post("/publish/devto", json=sample_article, headers=api_headers)

    [request] = platforms.requests_to("dev.to")
    assert json.loads(request.content)["article"]["published"] is True


def test_publish_without_stored_credential(client: TestClient, issue_key, sample_article: dict, platforms):
    """Test that a missing media key fails without calling the platform"""
    headers = {"X-API-Key": issue_key()["token"]}

    response = client.post("/publish/devto", json=sample_article, headers=headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "DevTo API key not found"
    assert platforms.requests == []


def test_publish_platform_rejection_passes_error_through(
    client: TestClient, api_headers: dict, sample_article: dict, platforms
):
    """Test that the platform's error body is surfaced to the caller"""
    platforms.devto_status = 422

    response = client.post("/publish/devto", json=sample_article, headers=api_headers)
    assert response.status_code == 500
    assert "Tag is invalid" in response.json()["detail"]


def test_publish_credential_store_failure_is_generic(
    client: TestClient, api_headers: dict, sample_article: dict, test_settings: Settings, platforms
):
    """Test that a Redis failure during credential lookup does not leak its message"""
    down = fakeredis.FakeServer()
    down.connected = False
    unreachable = fakeredis.FakeAsyncRedis(server=down, decode_responses=True)
    app.dependency_overrides[get_media_key_service] = lambda: MediaKeyService(
        MediaKeyStore(unreachable, test_settings)
    )

    response = client.post("/publish/devto", json=sample_article, headers=api_headers)
    assert response.status_code == 500
    assert response.json()["detail"] == "An internal server error occurred"
    assert "FakeRedis" not in response.text
    assert platforms.requests == []


def test_publish_unknown_platform(client: TestClient, api_headers: dict, sample_article: dict):
    """Test that an unsupported platform is not found"""
    response = client.post("/publish/myspace", json=sample_article, headers=api_headers)
    assert response.status_code == 404


def test_publish_requires_api_key(client: TestClient, sample_article: dict):
    """Test that single-platform publishing requires X-API-Key"""
    assert client.post("/publish/devto", json=sample_article).status_code == 401


def test_publish_with_revoked_key(client: TestClient, admin_headers: dict, issue_key, sample_article: dict, platforms):
    """Test that a revoked key cannot publish"""
    issued = issue_key()
    client.delete("/keys", params={"key": issued["jti"]}, headers=admin_headers)

    response = client.post("/publish/devto", json=sample_article, headers={"X-API-Key": issued["token"]})
    assert response.status_code == 401
    assert platforms.requests == []


def test_publish_missing_fields(client: TestClient, api_headers: dict):
    """Test that title, content and tags are required"""
    response = client.post("/publish/devto", json={"content": "x", "tags": []}, headers=api_headers)
    assert response.status_code == 400

    response = client.post("/publish/devto", json={"title": "t", "content": "x", "tags": "nope"}, headers=api_headers)
    assert response.status_code == 400


# ---------------------------------------------------------------------------
# POST /publish-multi
# ---------------------------------------------------------------------------

def test_publish_multi_all_succeed(client: TestClient, publish_headers: dict, sample_article: dict, platforms):
    """Test publishing to both platforms with shared credentials"""
    body = {**sample_article, "platforms": ["devto", "medium"]}

    response = client.post("/publish-multi", json=body, headers=publish_headers)
    assert response.status_code == 200

    results = {result["platform"]: result for result in response.json()["results"]}
    assert set(results) == {"devto", "medium"}
    assert all(result["success"] for result in results.values())
    assert all("error" not in result for result in results.values())

    [devto_request] = platforms.requests_to("dev.to")
    assert devto_request.headers["api-key"] == "shared-devto-key"
    assert platforms.requests_to("api.medium.com")[0].headers["authorization"] == "Bearer shared-medium-key"


def test_publish_multi_partial_failure(client: TestClient, publish_headers: dict, sample_article: dict, platforms):
    """Test that one platform failing does not affect the other"""
    platforms.devto_status = 422
    body = {**sample_article, "platforms": ["devto", "medium"]}

    response = client.post("/publish-multi", json=body, headers=publish_headers)
    assert response.status_code == 200

    devto_result, medium_result = response.json()["results"]
    assert devto_result["platform"] == "devto"
    assert devto_result["success"] is False
    assert "Tag is invalid" in devto_result["error"]
    assert "article" not in devto_result

    assert medium_result["platform"] == "medium"
    assert medium_result["success"] is True
    assert medium_result["article"]["data"]["url"] == "https://medium.com/p/post-1"


def test_publish_multi_medium_identity_lookup_fails(
    client: TestClient, publish_headers: dict, sample_article: dict, platforms
):
    """Test that a rejected Medium user lookup is captured and no post is attempted"""
    platforms.medium_me_status = 401
    body = {**sample_article, "platforms": ["medium", "devto"]}

    results = client.post("/publish-multi", json=body, headers=publish_headers).json()["results"]
    assert results[0]["success"] is False
    assert "Token was invalid" in results[0]["error"]
    assert results[1]["success"] is True
    assert len(platforms.requests_to("api.medium.com")) == 1


def test_publish_multi_medium_user_missing(
    client: TestClient, publish_headers: dict, sample_article: dict, platforms
):
    """Test that a Medium identity without a user id is reported plainly"""
    platforms.medium_user = None
    body = {**sample_article, "platforms": ["medium"]}

    [result] = client.post("/publish-multi", json=body, headers=publish_headers).json()["results"]
    assert result == {"platform": "medium", "success": False, "error": "Could not fetch Medium user ID"}
    assert len(platforms.requests_to("api.medium.com")) == 1


def test_publish_multi_transport_error_isolated(
    client: TestClient, publish_headers: dict, sample_article: dict, platforms
):
    """Test that a network failure on one platform is captured per result"""
    platforms.fail_transport_for = "dev.to"
    body = {**sample_article, "platforms": ["devto", "medium"]}

    devto_result, medium_result = client.post("/publish-multi", json=body, headers=publish_headers).json()["results"]
    assert devto_result["success"] is False
    assert devto_result["error"]
    assert medium_result["success"] is True


def test_publish_multi_unsupported_platform(client: TestClient, publish_headers: dict, sample_article: dict):
    """Test that unknown platforms get their own failed result"""
    body = {**sample_article, "platforms": ["devto", "myspace"]}

    devto_result, other = client.post("/publish-multi", json=body, headers=publish_headers).json()["results"]
    assert devto_result["success"] is True
    assert other == {"platform": "myspace", "success": False, "error": "Unsupported platform: myspace"}


def test_publish_multi_duplicate_platforms_collapse(
    client: TestClient, publish_headers: dict, sample_article: dict, platforms
):
    """Test that a platform listed twice is published once"""
    body = {**sample_article, "platforms": ["devto", "devto"]}

    results = client.post("/publish-multi", json=body, headers=publish_headers).json()["results"]
    assert len(results) == 1
    assert len(platforms.requests_to("dev.to")) == 1


def test_publish_multi_unconfigured_credential(
    client: TestClient, publish_headers: dict, sample_article: dict, test_settings: Settings
):
    """Test that a platform without a configured key fails on its own"""
    settings = test_settings.model_copy(update={"DEV_TO_API_KEY": None})
    app.dependency_overrides[get_settings] = lambda: settings
    body = {**sample_article, "platforms": ["devto", "medium"]}

    devto_result, medium_result = client.post("/publish-multi", json=body, headers=publish_headers).json()["results"]
    assert devto_result == {"platform": "devto", "success": False, "error": "DEV_TO_API_KEY not configured"}
    assert medium_result["success"] is True


def test_publish_multi_requires_password(client: TestClient, sample_article: dict, api_headers: dict):
    """Test that multi-publish requires the publish password, not an API key"""
    body = {**sample_article, "platforms": ["devto"]}

    assert client.post("/publish-multi", json=body).status_code == 401
    assert client.post("/publish-multi", json=body, headers={"X-Publish-Password": "wrong"}).status_code == 401
    assert client.post("/publish-multi", json=body, headers=api_headers).status_code == 401


def test_publish_multi_requires_platforms(client: TestClient, publish_headers: dict, sample_article: dict):
    """Test that at least one platform must be given"""
    response = client.post("/publish-multi", json={**sample_article, "platforms": []}, headers=publish_headers)
    assert response.status_code == 400

    response = client.post("/publish-multi", json=sample_article, headers=publish_headers)
    assert response.status_code == 400


def test_publish_multi_missing_title(client: TestClient, publish_headers: dict, sample_article: dict):
    """Test that a missing title is a bad request"""
    del sample_article["title"]
    response = client.post("/publish-multi", json={**sample_article, "platforms": ["devto"]}, headers=publish_headers)
    assert response.status_code == 400
