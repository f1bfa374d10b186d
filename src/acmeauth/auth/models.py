"""Data models for identity provider results.

These dataclasses represent the outcomes of provider operations,
providing a consistent interface between the Better Auth, Stytch
and mock adapters.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class SignUpResult:
    """Result of creating an account.

    Attributes:
        status: HTTP-style status code reported by the provider.
        token: Session token issued for the new account, if any.
        user_id: The provider's ID for the new user.
        error_body: Parsed error payload when the provider rejected the call.
    """

    status: int
    token: str | None = None
    user_id: str | None = None
    error_body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SignInResult:
    """Result of a password sign-in.

    Adapters fold both successful responses and provider rejections into
    this one type. ``ok`` is the only success test callers should use.

    Attributes:
        status: HTTP-style status code reported by the provider.
        session_token: Session token established by the sign-in.
        error_body: Parsed error payload; empty when absent or malformed.
    """

    status: int
    session_token: str | None = None
    error_body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True for 2xx and 3xx statuses (a redirect still means signed in)."""
        return 200 <= self.status < 400


@dataclass(frozen=True)
class SignOutResult:
    """Result of revoking the current session."""

    success: bool
    error: str | None = None


@dataclass(frozen=True)
class SessionUser:
    """The identity a session belongs to."""

    id: str
    email: str
    name: str = ""
    email_verified: bool = False


@dataclass(frozen=True)
class Session:
    """An authenticated session as reported by the provider.

    Attributes:
        user: The signed-in user.
        session_id: Provider ID for the session record.
        expires_at: When the provider will stop honouring the session.
        token: The session token itself (redacted when serialised).
    """

    user: SessionUser
    session_id: str
    expires_at: datetime | None = None
    token: str | None = field(default=None, repr=False)

    def to_json(self) -> str:
        """Render the session for display, without the token."""
        payload = asdict(self)
        payload.pop("token", None)
        return json.dumps(payload, indent=2, default=_json_default)


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
