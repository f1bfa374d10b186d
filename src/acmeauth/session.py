"""Session lookup for protected views.

SessionPresenter asks the identity provider for the current session on
every access. Nothing is cached: a revoked session is gone on the next
request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from acmeauth.auth.errors import ProviderUnavailableError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from acmeauth.auth.models import Session
    from acmeauth.auth.protocol import IdentityProviderProtocol

logger = logging.getLogger(__name__)

UNAUTHORISED_PLACEHOLDER = "Not authorised"


@dataclass(frozen=True)
class ProtectedView:
    """What a protected page should show."""

    authorized: bool
    body: str
    session: Session | None = None


class SessionPresenter:
    """Read-only access to the caller's session."""

    def __init__(self, provider: IdentityProviderProtocol) -> None:
        self._provider = provider

    async def current_session(self, headers: Mapping[str, str]) -> Session | None:
        """Return the caller's session, or None when signed out.

        An unreachable provider is treated as "no session".
        """
        try:
            return await self._provider.get_session(headers)
        except ProviderUnavailableError as e:
            logger.warning(
                "Session lookup failed, treating as signed out",
                extra={"reason": e.reason},
            )
            return None

    async def protected_view(self, headers: Mapping[str, str]) -> ProtectedView:
        """Gate protected content on the presence of a session."""
        session = await self.current_session(headers)
        if session is None:
            return ProtectedView(authorized=False, body=UNAUTHORISED_PLACEHOLDER)
        return ProtectedView(authorized=True, body=session.to_json(), session=session)
