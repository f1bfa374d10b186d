"""Stytch consumer client wrapper for password authentication.

This module provides a wrapper around the Stytch SDK that implements
IdentityProviderProtocol, exposing Stytch's password and session APIs
through the same result types as the other adapters.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from stytch import Client
from stytch.core.response_base import StytchError

from acmeauth.auth.errors import ProviderUnavailableError
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

logger = logging.getLogger(__name__)

# Cookie set by Stytch's frontend SDKs
STYTCH_SESSION_COOKIE = "stytch_session"


def _error_body(error: StytchError) -> dict[str, Any]:
    """Shape a StytchError like the JSON error bodies other providers send."""
    return {
        "code": error.details.error_type,
        "message": error.details.error_message,
    }


def _raise_if_unavailable(operation: str, error: StytchError) -> None:
    """Server-side Stytch failures count as the provider being unavailable."""
    if error.details.status_code >= 500:
        raise ProviderUnavailableError(operation, error.details.error_type) from error


def _display_name(user: Any) -> str:
    name = getattr(user, "name", None)
    if name is None:
        return ""
    parts = [
        getattr(name, "first_name", "") or "",
        getattr(name, "last_name", "") or "",
    ]
    return " ".join(p for p in parts if p)


def _primary_email(user: Any) -> tuple[str, bool]:
    emails = getattr(user, "emails", None) or []
    if not emails:
        return "", False
    return emails[0].email, bool(getattr(emails[0], "verified", False))


class StytchPasswordClient:
    """Wrapper around the Stytch consumer Client for password auth.

    This class implements IdentityProviderProtocol. ``callback_url`` is
    accepted for interface parity; Stytch password calls do not redirect.
    """

    def __init__(
        self,
        project_id: str,
        secret: str,
        *,
        environment: str = "test",
        session_duration_minutes: int = 60 * 24 * 7,
    ) -> None:
        """Initialize the Stytch client.

        Args:
            project_id: Stytch project ID.
            secret: Stytch secret key.
            environment: Either "test" or "live".
            session_duration_minutes: Lifetime of sessions created at sign-in.
        """
        self._client = Client(
            project_id=project_id,
            secret=secret,
            environment=environment,
        )
        self._session_duration_minutes = session_duration_minutes

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignUpResult:
        """Create a user with a password and start a session for them."""
        try:
            response = await self._client.passwords.create_async(
                email=email,
                password=password,
                session_duration_minutes=self._session_duration_minutes,
                name={"first_name": name},
            )
        except StytchError as e:
            _raise_if_unavailable("sign_up", e)
            logger.warning(
                "Password sign-up failed",
                extra={"email": email, "error_type": e.details.error_type},
            )
            return SignUpResult(status=e.details.status_code, error_body=_error_body(e))
        except OSError as e:
            raise ProviderUnavailableError("sign_up", str(e)) from e

        return SignUpResult(
            status=response.status_code,
            token=response.session_token or None,
            user_id=response.user_id,
        )

    async def sign_in(
        self,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignInResult:
        """Authenticate an email/password pair."""
        try:
            response = await self._client.passwords.authenticate_async(
                email=email,
                password=password,
                session_duration_minutes=self._session_duration_minutes,
            )
        except StytchError as e:
            _raise_if_unavailable("sign_in", e)
            logger.warning(
                "Password sign-in failed",
                extra={"email": email, "error_type": e.details.error_type},
            )
            return SignInResult(status=e.details.status_code, error_body=_error_body(e))
        except OSError as e:
            raise ProviderUnavailableError("sign_in", str(e)) from e

        return SignInResult(
            status=response.status_code,
            session_token=response.session_token or None,
        )

    async def get_session(self, headers: Mapping[str, str]) -> Session | None:
        """Validate the session token carried by the request headers."""
        token = session_token_from_headers(headers, (STYTCH_SESSION_COOKIE,))
        if token is None:
            return None

        try:
            response = await self._client.sessions.authenticate_async(
                session_token=token,
            )
        except StytchError as e:
            _raise_if_unavailable("get_session", e)
            logger.debug(
                "Session validation failed",
                extra={"error_type": e.details.error_type},
            )
            return None
        except OSError as e:
            raise ProviderUnavailableError("get_session", str(e)) from e

        email, verified = _primary_email(response.user)
        return Session(
            user=SessionUser(
                id=response.user.user_id,
                email=email,
                name=_display_name(response.user),
                email_verified=verified,
            ),
            session_id=response.session.session_id,
            expires_at=response.session.expires_at,
            token=token,
        )

    async def sign_out(self, headers: Mapping[str, str]) -> SignOutResult:
        """Revoke the session carried by the request headers."""
        token = session_token_from_headers(headers, (STYTCH_SESSION_COOKIE,))
        if token is None:
            return SignOutResult(success=False, error="Not signed in")

        try:
            await self._client.sessions.revoke_async(session_token=token)
        except StytchError as e:
            _raise_if_unavailable("sign_out", e)
            logger.warning(
                "Session revoke failed",
                extra={"error_type": e.details.error_type},
            )
            return SignOutResult(success=False, error=e.details.error_message)
        except OSError as e:
            raise ProviderUnavailableError("sign_out", str(e)) from e

        return SignOutResult(success=True)
