"""Session token extraction from request headers.

Providers identify a session either by a cookie set at sign-in or by an
``Authorization: Bearer`` header. Server-rendered pages hold the token in
per-user storage and replay it with ``session_headers()``.
"""

from __future__ import annotations

import logging
from http.cookies import CookieError, SimpleCookie
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

# Tokens beyond this length are rejected outright
_MAX_TOKEN_LENGTH = 1000


def _validate_token(token: str | None) -> bool:
    """Validate that a token is safe to forward to a provider."""
    if not token:
        return False
    if len(token) > _MAX_TOKEN_LENGTH:
        logger.warning("Token exceeds max length: %d chars", len(token))
        return False
    return True


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup that works for plain dicts too."""
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for key, candidate in headers.items():
        if key.lower() == wanted:
            return candidate
    return None


def bearer_token(headers: Mapping[str, str]) -> str | None:
    """Return the token from an ``Authorization: Bearer`` header."""
    authorization = get_header(headers, "authorization")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token if _validate_token(token) else None


def cookie_value(headers: Mapping[str, str], names: Iterable[str]) -> str | None:
    """Return the first of ``names`` present in the ``Cookie`` header."""
    raw = get_header(headers, "cookie")
    if not raw:
        return None
    jar: SimpleCookie = SimpleCookie()
    try:
        jar.load(raw)
    except CookieError:
        logger.debug("Ignoring unparseable cookie header")
        return None
    for name in names:
        morsel = jar.get(name)
        if morsel is not None and _validate_token(morsel.value):
            return morsel.value
    return None


def session_token_from_headers(
    headers: Mapping[str, str],
    cookie_names: Iterable[str] = (),
) -> str | None:
    """Find the session token, preferring the bearer header over cookies."""
    return bearer_token(headers) or cookie_value(headers, cookie_names)


def session_headers(token: str | None) -> dict[str, str]:
    """Build request headers that identify the session ``token``.

    Returns an empty dict when there is no usable token, which every
    provider treats as "not signed in".
    """
    if not _validate_token(token):
        return {}
    return {"Authorization": f"Bearer {token}"}
