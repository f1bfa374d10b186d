"""Form actions for registration, login and sign-out.

AuthActions validates submitted forms, makes one identity provider call
per action and folds every outcome (invalid input, provider rejection,
provider outage) into an ActionResult. Nothing here raises to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from acmeauth.auth.errors import ProviderUnavailableError
from acmeauth.validation import (
    LoginCredentials,
    SignUpCredentials,
    validate_login,
    validate_sign_up,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from acmeauth.auth.protocol import IdentityProviderProtocol

logger = logging.getLogger(__name__)

FIX_ERRORS_MESSAGE = "Please fix the errors below"
REGISTRATION_SUCCESS_MESSAGE = "Registration successful!"
REGISTRATION_FAILED_MESSAGE = "Registration failed. Please try again."
LOGIN_FAILED_MESSAGE = "Login failed. Please check your credentials."
SIGN_OUT_SUCCESS_MESSAGE = "Signed out successfully"
SIGN_OUT_FAILED_MESSAGE = "Sign out failed. Please try again."
PROVIDER_UNAVAILABLE_MESSAGE = (
    "Authentication service is unavailable. Please try again."
)

# Error body keys that map onto login form fields
_LOGIN_ERROR_FIELDS = ("email", "password")


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one user-initiated auth action.

    Attributes:
        success: Whether the action achieved its goal.
        message: Human-readable summary for the user.
        field_errors: Per-field messages; never set on a successful result.
        session_token: Token issued by the provider on register/login, for
            the caller to keep in server-side storage. Not part of to_dict().
    """

    success: bool
    message: str | None = None
    field_errors: dict[str, list[str]] | None = None
    session_token: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.success and self.field_errors is not None:
            msg = "A successful ActionResult cannot carry field errors"
            raise ValueError(msg)

    def errors_for(self, field_name: str) -> list[str]:
        """Messages for one form field (empty when it has none)."""
        if not self.field_errors:
            return []
        return list(self.field_errors.get(field_name, []))

    def to_dict(self) -> dict[str, Any]:
        """Serialise for the client, omitting unset keys and the token."""
        payload: dict[str, Any] = {"success": self.success}
        if self.message is not None:
            payload["message"] = self.message
        if self.field_errors is not None:
            payload["fieldErrors"] = self.field_errors
        return payload


def _unavailable_result(error: ProviderUnavailableError) -> ActionResult:
    logger.error(
        "Identity provider unavailable",
        extra={"operation": error.operation, "reason": error.reason},
    )
    return ActionResult(
        success=False, message=PROVIDER_UNAVAILABLE_MESSAGE, field_errors={}
    )


class AuthActions:
    """Registration, login and sign-out against one identity provider.

    The provider is passed in rather than looked up, so tests and pages can
    hand in whichever implementation they need.
    """

    def __init__(
        self,
        provider: IdentityProviderProtocol,
        *,
        callback_url: str = "/profile",
    ) -> None:
        self._provider = provider
        self._callback_url = callback_url

    @property
    def callback_url(self) -> str:
        """Where the provider sends the user after registering or signing in."""
        return self._callback_url

    async def register(self, form: Mapping[str, object]) -> ActionResult:
        """Create an account from a submitted registration form.

        Success requires the provider to have issued a session token; an
        account created without one (e.g. pending email verification) is
        reported as a failed registration.
        """
        credentials = validate_sign_up(form)
        if not isinstance(credentials, SignUpCredentials):
            return ActionResult(
                success=False,
                message=FIX_ERRORS_MESSAGE,
                field_errors=credentials,
            )

        logger.info("Registration requested for email=%s", credentials.email)
        try:
            result = await self._provider.sign_up(
                name=credentials.name,
                email=credentials.email,
                password=credentials.password,
                callback_url=self._callback_url,
            )
        except ProviderUnavailableError as e:
            return _unavailable_result(e)

        if result.token:
            logger.info(
                "Registration successful: email=%s, user_id=%s",
                credentials.email,
                result.user_id,
            )
            return ActionResult(
                success=True,
                message=REGISTRATION_SUCCESS_MESSAGE,
                session_token=result.token,
            )

        logger.warning(
            "Registration failed: email=%s, status=%d, code=%s",
            credentials.email,
            result.status,
            result.error_body.get("code"),
        )
        return ActionResult(success=False, message=REGISTRATION_FAILED_MESSAGE)

    async def login(self, form: Mapping[str, object]) -> ActionResult:
        """Sign in from a submitted login form."""
        credentials = validate_login(form)
        if not isinstance(credentials, LoginCredentials):
            return ActionResult(
                success=False,
                message=FIX_ERRORS_MESSAGE,
                field_errors=credentials,
            )

        logger.info("Login requested for email=%s", credentials.email)
        try:
            result = await self._provider.sign_in(
                email=credentials.email,
                password=credentials.password,
                callback_url=self._callback_url,
            )
        except ProviderUnavailableError as e:
            return _unavailable_result(e)

        if result.ok:
            logger.info("Login successful: email=%s", credentials.email)
            return ActionResult(success=True, session_token=result.session_token)

        body = result.error_body
        logger.warning(
            "Login failed: email=%s, status=%d, code=%s",
            credentials.email,
            result.status,
            body.get("code"),
        )
        field_errors = {
            name: [str(body[name])] for name in _LOGIN_ERROR_FIELDS if body.get(name)
        }
        return ActionResult(
            success=False,
            message=str(body.get("message") or LOGIN_FAILED_MESSAGE),
            field_errors=field_errors,
        )

    async def sign_out(
        self,
        headers: Mapping[str, str],
        *,
        on_success: Callable[[], object] | None = None,
        on_error: Callable[[str], object] | None = None,
    ) -> ActionResult:
        """Revoke the current session.

        Args:
            headers: Request headers identifying the session.
            on_success: Called once the provider confirms the sign-out
                (pages notify the user and navigate home).
            on_error: Called with the error message when sign-out fails.

        Returns:
            ActionResult describing the outcome; never raises.
        """
        try:
            result = await self._provider.sign_out(headers)
        except ProviderUnavailableError as e:
            failed = _unavailable_result(e)
        else:
            if result.success:
                logger.info("Sign-out successful")
                if on_success is not None:
                    on_success()
                return ActionResult(success=True, message=SIGN_OUT_SUCCESS_MESSAGE)

            logger.warning("Sign-out failed: %s", result.error)
            failed = ActionResult(
                success=False,
                message=result.error or SIGN_OUT_FAILED_MESSAGE,
            )

        if on_error is not None:
            on_error(failed.message or SIGN_OUT_FAILED_MESSAGE)
        return failed
