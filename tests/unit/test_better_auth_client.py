"""Unit tests for BetterAuthClient.

Requests go through ``httpx.MockTransport`` so each test sees exactly
what the client sends and controls what the auth server answers.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from acmeauth.auth.better_auth import (
    SECURE_SESSION_COOKIE,
    SESSION_COOKIE,
    BetterAuthClient,
)
from acmeauth.auth.errors import ProviderUnavailableError
from acmeauth.auth.headers import session_headers

BASE_URL = "http://auth.acme.io"


class Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.response.status_code,
            headers=self.response.headers,
            content=self.response.content,
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _client(recorder: Recorder, **kwargs) -> BetterAuthClient:
    kwargs.setdefault("origin", "http://localhost:8080")
    return BetterAuthClient(
        BASE_URL, transport=httpx.MockTransport(recorder), **kwargs
    )


class TestSignUp:
    """Tests for BetterAuthClient.sign_up()."""

    async def test_posts_email_sign_up(self):
        """The sign-up body carries name, email, password and callbackURL."""
        recorder = Recorder(
            httpx.Response(200, json={"token": "tok-1", "user": {"id": "u-1"}})
        )

        await _client(recorder).sign_up(
            name="Jane Doe",
            email="jane@acme.io",
            password="longenough1",
            callback_url="/profile",
        )

        request = recorder.last
        assert request.method == "POST"
        assert request.url == f"{BASE_URL}/api/auth/sign-up/email"
        assert json.loads(request.content) == {
            "name": "Jane Doe",
            "email": "jane@acme.io",
            "password": "longenough1",
            "callbackURL": "/profile",
        }
        assert request.headers["origin"] == "http://localhost:8080"

    async def test_success_returns_token_and_user(self):
        """The token and user id come from the response body."""
        recorder = Recorder(
            httpx.Response(200, json={"token": "tok-1", "user": {"id": "u-1"}})
        )

        result = await _client(recorder).sign_up(
            name="Jane Doe",
            email="jane@acme.io",
            password="longenough1",
            callback_url="/profile",
        )

        assert result.status == 200
        assert result.token == "tok-1"
        assert result.user_id == "u-1"

    async def test_null_token_is_none(self):
        """Email verification flows answer with token null."""
        recorder = Recorder(
            httpx.Response(200, json={"token": None, "user": {"id": "u-1"}})
        )

        result = await _client(recorder).sign_up(
            name="Jane Doe",
            email="jane@acme.io",
            password="longenough1",
            callback_url="/profile",
        )

        assert result.token is None
        assert result.user_id == "u-1"

    async def test_rejection_keeps_error_body(self):
        """A 422 keeps the server's error body and has no token."""
        body = {"code": "USER_ALREADY_EXISTS", "message": "User already exists"}
        recorder = Recorder(httpx.Response(422, json=body))

        result = await _client(recorder).sign_up(
            name="Jane Doe",
            email="jane@acme.io",
            password="longenough1",
            callback_url="/profile",
        )

        assert result.status == 422
        assert result.token is None
        assert result.error_body == body

    async def test_signed_cookie_preferred_over_body_token(self):
        """Sign-up stores the same signed cookie value sign-in would."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={"token": "raw", "user": {"id": "u-1"}},
                headers={"set-cookie": f"{SESSION_COOKIE}=raw.SIG; Path=/"},
            )
        )

        result = await _client(recorder).sign_up(
            name="Jane Doe",
            email="jane@acme.io",
            password="longenough1",
            callback_url="/profile",
        )

        assert result.token == "raw.SIG"


class TestSignIn:
    """Tests for BetterAuthClient.sign_in()."""

    async def test_token_from_session_cookie(self):
        """The signed session cookie is preferred over the body token."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={"token": "body-token", "redirect": False},
                headers={"set-cookie": f"{SESSION_COOKIE}=cookie-token; Path=/"},
            )
        )

        result = await _client(recorder).sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )

        assert result.ok is True
        assert result.session_token == "cookie-token"
        assert json.loads(recorder.last.content) == {
            "email": "a@b.com",
            "password": "longenough1",
            "callbackURL": "/profile",
        }
        assert recorder.last.url.path == "/api/auth/sign-in/email"

    async def test_token_from_secure_cookie(self):
        """Servers behind HTTPS use the __Secure- prefixed cookie."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={},
                headers={
                    "set-cookie": (
                        f"{SECURE_SESSION_COOKIE}=secure-token; Path=/; Secure"
                    )
                },
            )
        )
        client = BetterAuthClient(
            "https://auth.acme.io", transport=httpx.MockTransport(recorder)
        )

        result = await client.sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )

        assert result.session_token == "secure-token"

    async def test_token_from_body_without_cookie(self):
        """Without a cookie the body token is used."""
        recorder = Recorder(httpx.Response(200, json={"token": "body-token"}))

        result = await _client(recorder).sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )

        assert result.session_token == "body-token"

    async def test_redirect_status_is_ok(self):
        """3xx responses count as a successful sign-in."""
        recorder = Recorder(
            httpx.Response(302, headers={"location": "/profile"}, content=b"")
        )

        result = await _client(recorder).sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )

        assert result.ok is True
        assert result.status == 302
        assert result.session_token is None

    async def test_invalid_credentials(self):
        """A 401 carries the server's message and no token."""
        recorder = Recorder(
            httpx.Response(
                401,
                json={
                    "code": "INVALID_EMAIL_OR_PASSWORD",
                    "message": "Invalid email or password",
                },
            )
        )

        result = await _client(recorder).sign_in(
            email="a@b.com", password="wrongpass1", callback_url="/profile"
        )

        assert result.ok is False
        assert result.session_token is None
        assert result.error_body["message"] == "Invalid email or password"

    async def test_non_json_error_body(self):
        """An HTML error page yields an empty error body."""
        recorder = Recorder(httpx.Response(500, text="<html>Bad gateway</html>"))

        result = await _client(recorder).sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )

        assert result.status == 500
        assert result.error_body == {}

    async def test_non_object_json_body(self):
        """A JSON list is not an error body."""
        recorder = Recorder(httpx.Response(400, json=["unexpected"]))

        result = await _client(recorder).sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )

        assert result.error_body == {}


class TestGetSession:
    """Tests for BetterAuthClient.get_session()."""

    async def test_parses_session_payload(self):
        """A get-session payload becomes a Session."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "session": {
                        "id": "s-1",
                        "token": "tok-1",
                        "expiresAt": "2030-01-01T00:00:00+00:00",
                    },
                    "user": {
                        "id": "u-1",
                        "email": "jane@acme.io",
                        "name": "Jane Doe",
                        "emailVerified": True,
                    },
                },
            )
        )

        session = await _client(recorder).get_session(
            {"Authorization": "Bearer tok-1"}
        )

        assert session is not None
        assert session.session_id == "s-1"
        assert session.token == "tok-1"
        assert session.expires_at == datetime(2030, 1, 1, tzinfo=UTC)
        assert session.user.email == "jane@acme.io"
        assert session.user.email_verified is True
        assert recorder.last.method == "GET"
        assert recorder.last.url.path == "/api/auth/get-session"

    async def test_null_body_means_no_session(self):
        """Better Auth answers 200 null when signed out."""
        recorder = Recorder(httpx.Response(200, content=b"null"))

        assert await _client(recorder).get_session({}) is None

    async def test_non_200_means_no_session(self):
        """Any other status means no session."""
        recorder = Recorder(httpx.Response(401, json={"message": "Unauthorized"}))

        assert await _client(recorder).get_session({}) is None

    async def test_incomplete_payload(self):
        """A payload missing required fields is treated as no session."""
        recorder = Recorder(
            httpx.Response(200, json={"session": {}, "user": {"id": "u-1"}})
        )

        assert await _client(recorder).get_session({}) is None

    async def test_unparseable_expiry(self):
        """A bad expiresAt is dropped rather than failing the session."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "session": {"id": "s-1", "expiresAt": "soon"},
                    "user": {"id": "u-1", "email": "jane@acme.io"},
                },
            )
        )

        session = await _client(recorder).get_session({})

        assert session is not None
        assert session.expires_at is None
        assert session.user.name == ""

    async def test_forwards_only_session_headers(self):
        """Cookie and Authorization are forwarded; nothing else is."""
        recorder = Recorder(httpx.Response(200, content=b"null"))

        await _client(recorder).get_session(
            {
                "Cookie": f"{SESSION_COOKIE}=tok-1",
                "Authorization": "Bearer tok-1",
                "X-Forwarded-For": "10.0.0.1",
                "Host": "app.acme.io",
            }
        )

        headers = recorder.last.headers
        assert headers["cookie"] == f"{SESSION_COOKIE}=tok-1"
        assert headers["authorization"] == "Bearer tok-1"
        assert "x-forwarded-for" not in headers
        assert headers["host"] == "auth.acme.io"

    async def test_cookies_are_not_shared_between_calls(self):
        """A cookie set for one caller is never sent for the next."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={"token": "t"},
                headers={"set-cookie": f"{SESSION_COOKIE}=first-user; Path=/"},
            )
        )
        client = _client(recorder)

        await client.sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )
        await client.get_session({})

        assert "cookie" not in recorder.last.headers


class TestSignOut:
    """Tests for BetterAuthClient.sign_out()."""

    async def test_success(self):
        """A 200 is a successful sign-out."""
        recorder = Recorder(httpx.Response(200, json={"success": True}))

        result = await _client(recorder).sign_out({"Authorization": "Bearer t"})

        assert result.success is True
        assert result.error is None
        assert recorder.last.method == "POST"
        assert recorder.last.url.path == "/api/auth/sign-out"

    async def test_failure_uses_server_message(self):
        """The server's message becomes the error."""
        recorder = Recorder(httpx.Response(400, json={"message": "No session"}))

        result = await _client(recorder).sign_out({})

        assert result.success is False
        assert result.error == "No session"

    async def test_failure_without_message(self):
        """Without a message the status is reported."""
        recorder = Recorder(httpx.Response(500, text="oops"))

        result = await _client(recorder).sign_out({})

        assert result.error == "Sign out failed (500)"


class TestTransportFailure:
    """Transport errors surface as ProviderUnavailableError."""

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    async def test_raises_provider_unavailable(self, error: httpx.HTTPError):
        """Connection and timeout errors are not swallowed."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        client = BetterAuthClient(BASE_URL, transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await client.sign_in(
                email="a@b.com", password="longenough1", callback_url="/profile"
            )

        assert exc_info.value.operation == "sign_in"


class TestStoredSessionReplay:
    """A token kept by the pages reaches the server as its session cookie."""

    async def test_sign_in_token_sent_as_cookie_to_get_session(self):
        """The token from sign-in is presented as better-auth.session_token."""
        sign_in = Recorder(
            httpx.Response(
                200,
                json={"token": "raw"},
                headers={"set-cookie": f"{SESSION_COOKIE}=raw.SIG; Path=/"},
            )
        )
        result = await _client(sign_in).sign_in(
            email="a@b.com", password="longenough1", callback_url="/profile"
        )
        lookup = Recorder(httpx.Response(200, content=b"null"))

        await _client(lookup).get_session(session_headers(result.session_token))

        headers = lookup.last.headers
        assert headers["cookie"] == (
            f"{SESSION_COOKIE}=raw.SIG; {SECURE_SESSION_COOKIE}=raw.SIG"
        )
        assert headers["authorization"] == "Bearer raw.SIG"

    async def test_sign_out_sends_session_cookie(self):
        """Sign-out presents the stored token the same way."""
        recorder = Recorder(httpx.Response(200, json={"success": True}))

        await _client(recorder).sign_out(session_headers("tok-1"))

        assert recorder.last.headers["cookie"].startswith(f"{SESSION_COOKIE}=tok-1")

    async def test_existing_cookie_is_not_replaced(self):
        """A caller's own Cookie header wins over the bearer token."""
        recorder = Recorder(httpx.Response(200, content=b"null"))

        await _client(recorder).get_session(
            {"Cookie": f"{SESSION_COOKIE}=from-browser", "Authorization": "Bearer x"}
        )

        assert recorder.last.headers["cookie"] == f"{SESSION_COOKIE}=from-browser"

    async def test_no_token_no_cookie(self):
        """Signed-out lookups carry no session cookie."""
        recorder = Recorder(httpx.Response(200, content=b"null"))

        await _client(recorder).get_session(session_headers(None))

        assert "cookie" not in recorder.last.headers
