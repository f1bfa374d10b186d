"""Unit tests for identity provider result models."""

from __future__ import annotations

import json

import pytest

from acmeauth.auth.models import Session, SessionUser, SignInResult


class TestSignInResultOk:
    """Tests for SignInResult.ok status classification."""

    @pytest.mark.parametrize("status", [200, 204, 301, 302, 399])
    def test_ok_statuses(self, status: int):
        """2xx and 3xx are ok."""
        assert SignInResult(status=status).ok is True

    @pytest.mark.parametrize("status", [0, 101, 199, 400, 401, 500])
    def test_not_ok_statuses(self, status: int):
        """Everything else is not ok."""
        assert SignInResult(status=status).ok is False

    def test_error_body_defaults_to_empty(self):
        """Each result gets its own empty error body."""
        first = SignInResult(status=401)
        second = SignInResult(status=401)

        assert first.error_body == {}
        assert first.error_body is not second.error_body


class TestSessionToJson:
    """Tests for Session.to_json()."""

    def test_renders_user_and_expiry(self, sample_session: Session):
        """The rendering includes the user and an ISO expiry."""
        payload = json.loads(sample_session.to_json())

        assert payload == {
            "user": {
                "id": "user-123",
                "email": "jane@acme.io",
                "name": "Jane Doe",
                "email_verified": True,
            },
            "session_id": "session-456",
            "expires_at": "2030-01-01T00:00:00+00:00",
        }

    def test_token_is_redacted(self, sample_session: Session):
        """The session token never appears in the rendering or repr."""
        assert "secret-session-token" not in sample_session.to_json()
        assert "secret-session-token" not in repr(sample_session)

    def test_indented(self):
        """Output is indented for display."""
        session = Session(user=SessionUser(id="u", email="u@acme.io"), session_id="s")

        assert "\n  " in session.to_json()
        assert json.loads(session.to_json())["expires_at"] is None
