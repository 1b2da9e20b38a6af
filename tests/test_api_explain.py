"""Tests for the HTTP layer — explain router, error shapes and auth.

The app is built with ``create_app(pipeline=..., authenticator=...)`` so the
lifespan never constructs a real chat model or Supabase client.  Supabase
itself is exercised through ``respx`` in ``TestSupabaseAuthenticator``.
"""

from __future__ import annotations

from typing import Generator, Optional

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from clarifyr.api.app import create_app
from clarifyr.api.auth import AuthUnavailable, SupabaseAuthenticator
from clarifyr.errors import FetchError, ModelError
from clarifyr.explain.pipeline import ExplainPipeline, Identity

from conftest import FakeExplainer, FakeFetcher

_AUTH = {"Authorization": "Bearer good-token"}


class FakeAuthenticator:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.tokens: list[str] = []

    def verify(self, token: str) -> Optional[Identity]:
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        if token == "good-token":
            return Identity(id="user-1", email="learner@example.com")
        return None


def _client(pipeline: ExplainPipeline, authenticator=None) -> TestClient:
    app = create_app(pipeline=pipeline, authenticator=authenticator or FakeAuthenticator())
    return TestClient(app)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(pipeline: ExplainPipeline) -> Generator[TestClient, None, None]:
    with _client(pipeline) as c:
        yield c


# ---------------------------------------------------------------------------
# Explain endpoint
# ---------------------------------------------------------------------------

class TestExplainEndpoint:
    def test_root_reports_running(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        assert "running" in resp.text

    def test_text_request(self, client: TestClient, fetcher: FakeFetcher) -> None:
        resp = client.post(
            "/api/explain",
            json={"text": "Photosynthesis converts light into energy."},
            headers=_AUTH,
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "explainedForUser": "learner@example.com",
            "source": "text",
            "explanation": "A friendly explanation.",
        }
        assert fetcher.calls == []

    def test_url_request(self, client: TestClient, fetcher: FakeFetcher) -> None:
        resp = client.post(
            "/api/explain", json={"url": "https://example.com/article"}, headers=_AUTH
        )
        assert resp.status_code == 200
        assert resp.json()["source"] == "url"
        assert fetcher.calls == ["https://example.com/article"]

    def test_missing_content_is_400(self, client: TestClient, explainer: FakeExplainer) -> None:
        resp = client.post("/api/explain", json={}, headers=_AUTH)
        assert resp.status_code == 400
        assert resp.json() == {"error": "No content to explain"}
        assert explainer.prompts == []

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        resp = client.post("/api/explain", json=["not", "an", "object"], headers=_AUTH)
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_fetch_failure_is_400_with_details(self, explainer: FakeExplainer) -> None:
        pipeline = ExplainPipeline(
            fetcher=FakeFetcher(error=FetchError("Request timed out after 10s: https://example.com")),
            explainer=explainer,
        )
        with _client(pipeline) as c:
            resp = c.post("/api/explain", json={"url": "https://example.com"}, headers=_AUTH)

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Failed to fetch URL content"
        assert "timed out" in body["details"]
        assert explainer.prompts == []

    def test_model_failure_is_500(self, fetcher: FakeFetcher) -> None:
        pipeline = ExplainPipeline(
            fetcher=fetcher, explainer=FakeExplainer(error=ModelError("quota"))
        )
        with _client(pipeline) as c:
            resp = c.post("/api/explain", json={"text": "Hi"}, headers=_AUTH)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to generate explanation"}

    def test_unknown_route_uses_error_shape(self, client: TestClient) -> None:
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert "error" in resp.json()


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------

class TestAuthDependency:
    def test_missing_token_is_401(self, client: TestClient, explainer: FakeExplainer) -> None:
        resp = client.post("/api/explain", json={"text": "Hi"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized: No token provided"}
        assert explainer.prompts == []

    def test_non_bearer_header_is_401(self, client: TestClient) -> None:
        resp = client.post(
            "/api/explain", json={"text": "Hi"}, headers={"Authorization": "Basic abc"}
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized: No token provided"}

    def test_invalid_token_is_401(self, client: TestClient) -> None:
        resp = client.post(
            "/api/explain", json={"text": "Hi"}, headers={"Authorization": "Bearer bad"}
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized: Invalid token"}

    def test_auth_provider_down_is_500(self, pipeline: ExplainPipeline) -> None:
        auth = FakeAuthenticator(error=AuthUnavailable("connection refused"))
        with _client(pipeline, auth) as c:
            resp = c.post("/api/explain", json={"text": "Hi"}, headers=_AUTH)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal Server Error"}

    def test_unconfigured_auth_is_500(self, pipeline: ExplainPipeline, monkeypatch) -> None:
        monkeypatch.setattr("clarifyr.config.settings.supabase_url", "")
        app = create_app(pipeline=pipeline)
        with TestClient(app) as c:
            resp = c.post("/api/explain", json={"text": "Hi"}, headers=_AUTH)
        assert resp.status_code == 500


# ---------------------------------------------------------------------------
# SupabaseAuthenticator
# ---------------------------------------------------------------------------

class TestSupabaseAuthenticator:
    _USER_URL = "https://project.supabase.co/auth/v1/user"

    def _auth(self) -> SupabaseAuthenticator:
        return SupabaseAuthenticator("https://project.supabase.co/", "service-key")

    def test_valid_token_returns_identity(self) -> None:
        with respx.mock:
            route = respx.get(self._USER_URL).mock(
                return_value=httpx.Response(200, json={"id": "u-1", "email": "a@b.c"})
            )
            identity = self._auth().verify("tok")

        assert identity == Identity(id="u-1", email="a@b.c")
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["apikey"] == "service-key"

    def test_rejected_token_returns_none(self) -> None:
        with respx.mock:
            respx.get(self._USER_URL).mock(return_value=httpx.Response(401, json={}))
            assert self._auth().verify("tok") is None

    def test_server_error_raises(self) -> None:
        with respx.mock:
            respx.get(self._USER_URL).mock(return_value=httpx.Response(503))
            with pytest.raises(AuthUnavailable):
                self._auth().verify("tok")

    def test_non_json_body_raises(self) -> None:
        with respx.mock:
            respx.get(self._USER_URL).mock(
                return_value=httpx.Response(200, text="<html>Bad Gateway</html>")
            )
            with pytest.raises(AuthUnavailable):
                self._auth().verify("tok")

    def test_non_object_payload_raises(self) -> None:
        with respx.mock:
            respx.get(self._USER_URL).mock(
                return_value=httpx.Response(200, json=[{"id": "u-1"}])
            )
            with pytest.raises(AuthUnavailable):
                self._auth().verify("tok")

    def test_garbled_auth_reply_keeps_error_shape(self, pipeline: ExplainPipeline) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="proxy error page")
        )
        auth = SupabaseAuthenticator(
            "https://project.supabase.co",
            "service-key",
            client=httpx.Client(transport=transport),
        )
        with _client(pipeline, auth) as c:
            resp = c.post("/api/explain", json={"text": "Hi"}, headers=_AUTH)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal Server Error"}

    def test_network_error_raises(self) -> None:
        with respx.mock:
            respx.get(self._USER_URL).mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(AuthUnavailable):
                self._auth().verify("tok")
