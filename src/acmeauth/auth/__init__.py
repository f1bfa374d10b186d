"""Identity provider access for acmeauth.

Provides email/password authentication against:
- A Better Auth server over HTTP
- Stytch's password and session APIs
- An in-memory mock for development and testing

Usage:
    from acmeauth.auth import get_identity_provider

    provider = get_identity_provider()
    result = await provider.sign_in(
        email="user@acme.io",
        password="correct horse",
        callback_url="/profile",
    )
"""

from __future__ import annotations

from acmeauth.auth.errors import IdentityProviderError, ProviderUnavailableError
from acmeauth.auth.factory import clear_provider_cache, get_identity_provider
from acmeauth.auth.headers import session_headers
from acmeauth.auth.models import (
    Session,
    SessionUser,
    SignInResult,
    SignOutResult,
    SignUpResult,
)
from acmeauth.auth.protocol import IdentityProviderProtocol

__all__ = [
    "IdentityProviderError",
    "IdentityProviderProtocol",
    "ProviderUnavailableError",
    "Session",
    "SessionUser",
    "SignInResult",
    "SignOutResult",
    "SignUpResult",
    "clear_provider_cache",
    "get_identity_provider",
    "session_headers",
]
