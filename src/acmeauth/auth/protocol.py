"""Protocol defining the identity provider interface.

BetterAuthClient, StytchPasswordClient and MockIdentityProvider all
implement this protocol, allowing them to be used interchangeably.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from acmeauth.auth.models import (
        Session,
        SignInResult,
        SignOutResult,
        SignUpResult,
    )


class IdentityProviderProtocol(Protocol):
    """Protocol for identity provider clients.

    Every method makes exactly one round trip to the provider. Transport
    failures raise ProviderUnavailableError; rejections come back as results.
    """

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignUpResult:
        """Create an account with email and password.

        Args:
            name: Display name for the new user.
            email: The user's email address.
            password: The plaintext password, hashed by the provider.
            callback_url: Where the provider should send the user afterwards.

        Returns:
            SignUpResult, with a token if a session was issued.
        """
        ...

    async def sign_in(
        self,
        email: str,
        password: str,
        callback_url: str,
    ) -> SignInResult:
        """Sign in with email and password.

        Args:
            email: The user's email address.
            password: The plaintext password.
            callback_url: Where the provider should send the user afterwards.

        Returns:
            SignInResult carrying the provider status and session token.
        """
        ...

    async def get_session(self, headers: Mapping[str, str]) -> Session | None:
        """Look up the session identified by the request headers.

        Args:
            headers: Request headers (cookie and/or authorization).

        Returns:
            The current Session, or None when not signed in.
        """
        ...

    async def sign_out(self, headers: Mapping[str, str]) -> SignOutResult:
        """Revoke the session identified by the request headers.

        Args:
            headers: Request headers (cookie and/or authorization).

        Returns:
            SignOutResult with the provider's error message on failure.
        """
        ...
