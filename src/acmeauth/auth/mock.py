"""Mock identity provider for development and testing.

This module provides an in-memory implementation of
IdentityProviderProtocol that can be used without a running
Better Auth server or Stytch project.

Accounts and sessions live only as long as the instance.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from acmeauth.auth.headers import session_token_from_headers
from acmeauth.auth.models import (
    Session,
    SessionUser,
    SignInResult,
    SignOutResult,
    SignUpResult,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

MOCK_SESSION_COOKIE = "mock_session"
MOCK_SESSION_LIFETIME = timedelta(days=7)


def _email_to_user_id(email: str) -> str:
    """Generate a deterministic user ID from an email."""
    return f"mock-user-{hashlib.md5(email.encode()).hexdigest()[:8]}"


def _hash_password(email: str, password: str) -> str:
    # Not a real password hash; the mock never leaves the process.
    return hashlib.sha256(f"{email}:{password}".encode()).hexdigest()


@dataclass
class _MockAccount:
    user_id: str
    name: str
    email: str
    password_hash: str


class MockIdentityProvider:
    """In-memory implementation of IdentityProviderProtocol.

    Behaviour mirrors a Better Auth server closely enough for the auth
    flow: duplicate sign-ups get 422, bad credentials get 401, and a
    successful sign-up signs the new user straight in.
    """

    def __init__(self) -> None:
        """Initialize the mock provider."""
        # email -> account
        self._accounts: dict[str, _MockAccount] = {}
        # session_token -> (email, expires_at)
        self._sessions: dict[str, tuple[str, datetime]] = {}
        # Track calls for testing
        self._calls: list[dict[str, str]] = []

    def _start_session(self, email: str) -> str:
        now = datetime.now(UTC)
        expired = [t for t, (_, expires) in self._sessions.items() if expires <= now]
        for stale in expired:
            del self._sessions[stale]

        token = f"mock-session-{secrets.token_hex(12)}"
        self._sessions[token] = (email, now + MOCK_SESSION_LIFETIME)
        return token

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignUpResult:
        """Create an account and sign it in."""
        self._calls.append(
            {"operation": "sign_up", "email": email, "callback_url": callback_url}
        )
        key = email.lower()
        if key in self._accounts:
            return SignUpResult(
                status=422,
                error_body={
                    "code": "USER_ALREADY_EXISTS",
                    "message": "User already exists",
                },
            )

        account = _MockAccount(
            user_id=_email_to_user_id(key),
            name=name,
            email=email,
            password_hash=_hash_password(key, password),
        )
        self._accounts[key] = account
        return SignUpResult(
            status=200,
            token=self._start_session(key),
            user_id=account.user_id,
        )

    async def sign_in(
        self,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignInResult:
        """Check the password and start a session."""
        self._calls.append(
            {"operation": "sign_in", "email": email, "callback_url": callback_url}
        )
        key = email.lower()
        account = self._accounts.get(key)
        if account is None or account.password_hash != _hash_password(key, password):
            return SignInResult(
                status=401,
                error_body={
                    "code": "INVALID_EMAIL_OR_PASSWORD",
                    "message": "Invalid email or password",
                },
            )
        return SignInResult(status=200, session_token=self._start_session(key))

    async def get_session(self, headers: Mapping[str, str]) -> Session | None:
        """Return the live session for the token in the headers, if any."""
        token = session_token_from_headers(headers, (MOCK_SESSION_COOKIE,))
        if token is None or token not in self._sessions:
            return None

        email, expires_at = self._sessions[token]
        if expires_at <= datetime.now(UTC):
            del self._sessions[token]
            return None

        account = self._accounts[email]
        return Session(
            user=SessionUser(
                id=account.user_id,
                email=account.email,
                name=account.name,
            ),
            session_id=f"mock-session-id-{hashlib.md5(token.encode()).hexdigest()[:8]}",
            expires_at=expires_at,
            token=token,
        )

    async def sign_out(self, headers: Mapping[str, str]) -> SignOutResult:
        """Forget the session for the token in the headers."""
        token = session_token_from_headers(headers, (MOCK_SESSION_COOKIE,))
        if token is None or self._sessions.pop(token, None) is None:
            return SignOutResult(success=False, error="Session not found")
        return SignOutResult(success=True)

    # Test helper methods

    def get_calls(self) -> list[dict[str, str]]:
        """Return the sign-up/sign-in calls made so far (for test assertions)."""
        return self._calls.copy()

    def active_session_count(self) -> int:
        """Number of sessions currently held."""
        return len(self._sessions)
