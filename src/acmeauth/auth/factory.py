"""Identity provider factory.

Provides a factory function to get the configured identity provider
(Better Auth server, Stytch, or the in-memory mock).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from acmeauth.config import get_settings

if TYPE_CHECKING:
    from acmeauth.auth.protocol import IdentityProviderProtocol


# Cached mock instance to preserve accounts and sessions across requests
_mock_provider_instance: IdentityProviderProtocol | None = None


def get_identity_provider() -> IdentityProviderProtocol:
    """Get the identity provider selected by configuration.

    If DEV__AUTH_MOCK=true or AUTH__PROVIDER=mock, returns
    MockIdentityProvider (singleton to preserve sessions).

    Returns:
        A provider implementing IdentityProviderProtocol.

    Raises:
        ValueError: If AUTH__PROVIDER=stytch and STYTCH__PROJECT_ID is empty.
    """
    global _mock_provider_instance  # noqa: PLW0603
    settings = get_settings()

    if settings.dev.auth_mock or settings.auth.provider == "mock":
        if _mock_provider_instance is None:
            from acmeauth.auth.mock import MockIdentityProvider

            _mock_provider_instance = MockIdentityProvider()
        return _mock_provider_instance

    if settings.auth.provider == "stytch":
        stytch = settings.stytch
        if not stytch.project_id:
            msg = (
                "STYTCH__PROJECT_ID is required when AUTH__PROVIDER=stytch. "
                "Set STYTCH__PROJECT_ID and STYTCH__SECRET in your .env file."
            )
            raise ValueError(msg)

        from acmeauth.auth.client import StytchPasswordClient

        return StytchPasswordClient(
            project_id=stytch.project_id,
            secret=stytch.secret.get_secret_value(),
            environment=stytch.environment,
            session_duration_minutes=stytch.session_duration_minutes,
        )

    from acmeauth.auth.better_auth import BetterAuthClient

    return BetterAuthClient(
        settings.auth.base_url,
        timeout=settings.auth.timeout_seconds,
        origin=settings.app.base_url,
    )


def clear_provider_cache() -> None:
    """Clear the configuration and mock provider caches.

    Useful for testing when you need to reload configuration
    or reset mock account and session state.
    """
    global _mock_provider_instance  # noqa: PLW0603
    get_settings.cache_clear()
    _mock_provider_instance = None
