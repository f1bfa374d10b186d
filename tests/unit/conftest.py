"""Shared fixtures for unit tests."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from acmeauth.auth.models import (
    Session,
    SessionUser,
    SignInResult,
    SignOutResult,
    SignUpResult,
)


@pytest.fixture
def sample_session() -> Session:
    """A signed-in session for jane@acme.io."""
    return Session(
        user=SessionUser(
            id="user-123",
            email="jane@acme.io",
            name="Jane Doe",
            email_verified=True,
        ),
        session_id="session-456",
        expires_at=datetime(2030, 1, 1, tzinfo=UTC),
        token="secret-session-token",
    )


@pytest.fixture
def provider() -> MagicMock:
    """Identity provider double whose calls all succeed by default."""
    fake = MagicMock()
    fake.sign_up = AsyncMock(
        return_value=SignUpResult(status=200, token="new-token", user_id="user-123")
    )
    fake.sign_in = AsyncMock(
        return_value=SignInResult(status=200, session_token="session-token")
    )
    fake.get_session = AsyncMock(return_value=None)
    fake.sign_out = AsyncMock(return_value=SignOutResult(success=True))
    return fake
