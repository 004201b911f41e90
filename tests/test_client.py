#!/usr/bin/env python3
"""Tests for the rental API client and session renewal."""
import json

import httpx
import pytest

from availability import (
    ApiClient,
    ApiError,
    ApiIntervalStore,
    AuthError,
    FetchError,
    IntervalFeed,
    Session,
)

BASE_URL = "http://api.test/api"

AVAILABILITY = [
    {"id": "r1", "startDate": "2024-03-01T03:00:00.000Z", "endDateExpected": "2024-03-10T03:00:00.000Z",
     "endDateActual": None, "status": "active"},
    {"id": "r2", "startDate": "2024-03-15", "endDateExpected": "2024-03-16", "status": "maintenance"},
]


class Recorder:
    """Mock transport handler that records requests and replays responses."""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def paths(self):
        return [r.url.path for r in self.requests]


def make_client(handler, session=None):
    recorder = Recorder(handler)
    client = ApiClient(BASE_URL, session or Session("old-token", "refresh-1"), transport=httpx.MockTransport(recorder))
    return client, recorder


class TestSession:
    """Tests for Session."""

    def test_renew_keeps_refresh_when_not_rotated(self):
        session = Session("a", "r")
        session.renew("b")
        assert session.access_token == "b"
        assert session.refresh_token == "r"

    def test_clear(self):
        session = Session("a", "r", {"tenantId": "t1"})
        assert session.is_authenticated
        assert session.tenant_id == "t1"
        session.clear()
        assert not session.is_authenticated
        assert session.refresh_token is None
        assert session.tenant_id is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RENTAL_API_TOKEN", "tok")
        monkeypatch.setenv("RENTAL_API_REFRESH_TOKEN", "ref")
        session = Session.from_env()
        assert session.access_token == "tok"
        assert session.refresh_token == "ref"


class TestGetAvailability:
    """Tests for ApiClient.get_availability."""

    def test_sends_bearer_and_parses_intervals(self):
        def handler(request):
            assert request.headers["Authorization"] == "Bearer old-token"
            return httpx.Response(200, json={"success": True, "data": AVAILABILITY})

        client, recorder = make_client(handler)
        intervals = client.get_availability("tool-1")
        assert recorder.paths == ["/api/rentals/availability/tool-1"]
        assert [i.code for i in intervals] == ["r1", "r2"]
        assert intervals[1].is_maintenance

    def test_non_list_payload_rejected(self):
        client, _ = make_client(lambda r: httpx.Response(200, json={"success": True, "data": {}}))
        with pytest.raises(FetchError):
            client.get_availability("tool-1")

    def test_missing_envelope_rejected(self):
        client, _ = make_client(lambda r: httpx.Response(200, json=AVAILABILITY))
        with pytest.raises(FetchError):
            client.get_availability("tool-1")

    def test_invalid_json_rejected(self):
        client, _ = make_client(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(FetchError):
            client.get_availability("tool-1")

    def test_error_response_raises_api_error(self):
        client, _ = make_client(
            lambda r: httpx.Response(400, json={"success": False, "message": "invalid tool"})
        )
        with pytest.raises(ApiError) as exc_info:
            client.get_availability("tool-1")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "invalid tool"

    def test_transport_error_raises_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(handler)
        with pytest.raises(FetchError):
            client.get_availability("tool-1")


class TestRenewal:
    """Tests for the single retry on 401."""

    def test_refresh_then_retry_once(self):
        def handler(request):
            if request.url.path.endswith("/auth/refresh"):
                assert json.loads(request.content) == {"refreshToken": "refresh-1"}
                return httpx.Response(200, json={"success": True, "data": {"accessToken": "new-token", "refreshToken": "refresh-2"}})
            if request.headers.get("Authorization") == "Bearer new-token":
                return httpx.Response(200, json={"success": True, "data": AVAILABILITY})
            return httpx.Response(401, json={"success": False, "message": "expired"})

        client, recorder = make_client(handler)
        intervals = client.get_availability("tool-1")
        assert len(intervals) == 2
        assert recorder.paths == [
            "/api/rentals/availability/tool-1",
            "/api/auth/refresh",
            "/api/rentals/availability/tool-1",
        ]
        assert client.session.access_token == "new-token"
        assert client.session.refresh_token == "refresh-2"

    def test_second_401_clears_session(self):
        def handler(request):
            if request.url.path.endswith("/auth/refresh"):
                return httpx.Response(200, json={"success": True, "data": {"accessToken": "new-token"}})
            return httpx.Response(401, json={"success": False, "message": "nope"})

        client, recorder = make_client(handler)
        with pytest.raises(AuthError):
            client.get_availability("tool-1")
        assert len(recorder.requests) == 3
        assert not client.session.is_authenticated

    def test_failed_refresh_clears_session(self):
        def handler(request):
            if request.url.path.endswith("/auth/refresh"):
                return httpx.Response(401, json={"success": False, "message": "Refresh token invalid"})
            return httpx.Response(401)

        client, recorder = make_client(handler)
        with pytest.raises(AuthError) as exc_info:
            client.get_availability("tool-1")
        assert "Refresh token invalid" in str(exc_info.value)
        assert len(recorder.requests) == 2
        assert client.session.refresh_token is None

    @pytest.mark.parametrize("payload", [{}, None, "token", {"accessToken": ""}])
    def test_refresh_without_access_token(self, payload):
        def handler(request):
            if request.url.path.endswith("/auth/refresh"):
                return httpx.Response(200, json={"success": True, "data": payload})
            return httpx.Response(401)

        client, recorder = make_client(handler)
        with pytest.raises(AuthError) as exc_info:
            client.get_availability("tool-1")
        assert "Session renewal failed" in str(exc_info.value)
        assert len(recorder.requests) == 2
        assert not client.session.is_authenticated
        assert client.session.refresh_token is None

    def test_bad_refresh_payload_gives_failed_feed(self):
        def handler(request):
            if request.url.path.endswith("/auth/refresh"):
                return httpx.Response(200, json={"success": True, "data": {}})
            return httpx.Response(401)

        client, _ = make_client(handler)
        feed = IntervalFeed.fetch(ApiIntervalStore(client, "tool-1").fetch)
        assert not feed.is_loading
        assert feed.intervals == ()
        assert "Session renewal failed" in feed.error

    def test_no_refresh_token_no_retry(self):
        client, recorder = make_client(lambda r: httpx.Response(401), session=Session("old-token"))
        with pytest.raises(AuthError):
            client.get_availability("tool-1")
        assert len(recorder.requests) == 1


class TestLogin:
    """Tests for ApiClient.login."""

    def test_login_stores_tokens_and_user(self):
        def handler(request):
            assert request.url.path == "/api/auth/login"
            return httpx.Response(200, json={"success": True, "data": {
                "user": {"id": "u1", "tenantId": "t1"},
                "accessToken": "a1",
                "refreshToken": "r1",
            }})

        client, _ = make_client(handler, session=Session())
        session = client.login("owner@example.com", "secret")
        assert session is client.session
        assert session.access_token == "a1"
        assert session.tenant_id == "t1"

    def test_login_failure(self):
        client, _ = make_client(lambda r: httpx.Response(401, json={"message": "bad credentials"}), session=Session())
        with pytest.raises(AuthError):
            client.login("owner@example.com", "wrong")

    def test_login_without_token(self):
        client, _ = make_client(
            lambda r: httpx.Response(200, json={"success": True, "data": {"user": {"id": "u1"}}}),
            session=Session(),
        )
        with pytest.raises(AuthError):
            client.login("owner@example.com", "secret")
        assert client.session.user is None

    def test_base_url_from_env(self, monkeypatch):
        monkeypatch.setenv("RENTAL_API_URL", "http://env.test/api")
        with ApiClient() as client:
            assert client.base_url == "http://env.test/api"
