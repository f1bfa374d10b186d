"""Better Auth HTTP client.

Talks to the email/password endpoints of a Better Auth server and
implements IdentityProviderProtocol on top of them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

from acmeauth.auth.errors import ProviderUnavailableError
from acmeauth.auth.headers import bearer_token, get_header
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

SESSION_COOKIE = "better-auth.session_token"
SECURE_SESSION_COOKIE = f"__Secure-{SESSION_COOKIE}"

# Only these request headers identify a session to the server
_FORWARDED_HEADERS = ("cookie", "authorization")


def _session_cookie(token: str) -> str:
    """Cookie header value that presents ``token`` as the session cookie.

    Both names are sent: the server reads the __Secure- one when it is
    served over HTTPS and the plain one otherwise.
    """
    return f"{SESSION_COOKIE}={token}; {SECURE_SESSION_COOKIE}={token}"


def _issued_token(response: httpx.Response, body: dict[str, Any]) -> str | None:
    """Session token set by the server, preferring the signed cookie value."""
    return (
        response.cookies.get(SESSION_COOKIE)
        or response.cookies.get(SECURE_SESSION_COOKIE)
        or body.get("token")
        or None
    )


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Parse a JSON object body, or return {} when it is anything else."""
    try:
        body = response.json()
    except ValueError:
        logger.debug(
            "Non-JSON body from auth server",
            extra={"status": response.status_code},
        )
        return {}
    return body if isinstance(body, dict) else {}


def _parse_datetime(raw: object) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _parse_session(body: dict[str, Any]) -> Session | None:
    """Build a Session from a get-session payload, or None if incomplete."""
    session = body.get("session")
    user = body.get("user")
    if not isinstance(session, dict) or not isinstance(user, dict):
        return None
    try:
        return Session(
            user=SessionUser(
                id=str(user["id"]),
                email=str(user["email"]),
                name=str(user.get("name") or ""),
                email_verified=bool(user.get("emailVerified", False)),
            ),
            session_id=str(session["id"]),
            expires_at=_parse_datetime(session.get("expiresAt")),
            token=session.get("token"),
        )
    except KeyError as e:
        logger.warning("Session payload missing field %s", e)
        return None


class BetterAuthClient:
    """Client for a Better Auth server's email/password API.

    A fresh ``httpx.AsyncClient`` is opened per call so that cookies set
    for one user never leak into another user's request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        origin: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Public base URL of the Better Auth server.
            timeout: Transport timeout in seconds for each call.
            origin: Origin header to send (Better Auth checks it on
                cookie-bearing requests).
            transport: Optional httpx transport, used by tests.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._origin = origin
        self._transport = transport

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        request_headers: dict[str, str] = {}
        if self._origin:
            request_headers["Origin"] = self._origin
        if headers:
            for name in _FORWARDED_HEADERS:
                value = get_header(headers, name)
                if value:
                    request_headers[name] = value
            # Better Auth reads Authorization only with its bearer plugin
            token = bearer_token(headers)
            if token and "cookie" not in request_headers:
                request_headers["cookie"] = _session_cookie(token)

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                return await client.request(
                    method, path, headers=request_headers, json=json
                )
        except httpx.HTTPError as e:
            logger.warning(
                "Auth server request failed",
                extra={"operation": operation, "error": str(e)},
            )
            raise ProviderUnavailableError(operation, str(e)) from e

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignUpResult:
        """Create an account via ``POST /api/auth/sign-up/email``."""
        response = await self._request(
            "sign_up",
            "POST",
            "/api/auth/sign-up/email",
            json={
                "name": name,
                "email": email,
                "password": password,
                "callbackURL": callback_url,
            },
        )
        body = _json_body(response)

        if not response.is_success:
            logger.warning(
                "Sign-up rejected",
                extra={"status": response.status_code, "code": body.get("code")},
            )
            return SignUpResult(status=response.status_code, error_body=body)

        user = body.get("user")
        user_id = None
        if isinstance(user, dict) and "id" in user:
            user_id = str(user["id"])
        return SignUpResult(
            status=response.status_code,
            token=_issued_token(response, body),
            user_id=user_id,
        )

    async def sign_in(
        self,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignInResult:
        """Sign in via ``POST /api/auth/sign-in/email``.

        The session token comes from the Set-Cookie header when present
        (that value carries the server's signature), else from the body.
        """
        response = await self._request(
            "sign_in",
            "POST",
            "/api/auth/sign-in/email",
            json={
                "email": email,
                "password": password,
                "callbackURL": callback_url,
            },
        )
        body = _json_body(response)

        if not 200 <= response.status_code < 400:
            return SignInResult(status=response.status_code, error_body=body)

        return SignInResult(
            status=response.status_code,
            session_token=_issued_token(response, body),
        )

    async def get_session(self, headers: Mapping[str, str]) -> Session | None:
        """Fetch the current session via ``GET /api/auth/get-session``."""
        response = await self._request(
            "get_session", "GET", "/api/auth/get-session", headers=headers
        )
        if response.status_code != 200:
            logger.debug("get-session returned %d", response.status_code)
            return None
        return _parse_session(_json_body(response))

    async def sign_out(self, headers: Mapping[str, str]) -> SignOutResult:
        """Revoke the current session via ``POST /api/auth/sign-out``."""
        response = await self._request(
            "sign_out", "POST", "/api/auth/sign-out", headers=headers, json={}
        )
        if response.is_success:
            return SignOutResult(success=True)

        body = _json_body(response)
        message = body.get("message") or f"Sign out failed ({response.status_code})"
        return SignOutResult(success=False, error=str(message))
