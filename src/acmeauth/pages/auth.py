"""Authentication pages for acmeauth.

Provides register, login and profile pages using NiceGUI. The pages only
collect form values and show outcomes; AuthActions and SessionPresenter
do the work.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from nicegui import app, ui

from acmeauth.actions import SIGN_OUT_SUCCESS_MESSAGE, ActionResult, AuthActions
from acmeauth.auth import get_identity_provider, session_headers
from acmeauth.config import get_settings
from acmeauth.session import SessionPresenter

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

_SESSION_TOKEN_KEY = "session_token"


def get_session_token() -> str | None:
    """Get the provider session token from per-user storage."""
    return app.storage.user.get(_SESSION_TOKEN_KEY)


def _set_session_token(token: str | None) -> None:
    if token:
        app.storage.user[_SESSION_TOKEN_KEY] = token


def _clear_session() -> None:
    """Clear the current session."""
    app.storage.user.pop(_SESSION_TOKEN_KEY, None)


def _session_request_headers() -> dict[str, str]:
    """Headers that identify the stored session to the provider."""
    return session_headers(get_session_token())


def _auth_actions() -> AuthActions:
    return AuthActions(
        get_identity_provider(),
        callback_url=get_settings().auth.callback_path,
    )


def _form_payload(inputs: Mapping[str, Any]) -> dict[str, object]:
    """Collect the current value of each named input."""
    return {name: element.value for name, element in inputs.items()}


def _show_result(inputs: Mapping[str, Any], result: ActionResult) -> None:
    """Put field errors under their inputs and the message in a toast."""
    for name, element in inputs.items():
        errors = result.errors_for(name)
        element.error = errors[0] if errors else None

    if result.message:
        ui.notify(result.message, type="positive" if result.success else "negative")


def _return_button(href: str, label: str) -> None:
    ui.button(label, icon="arrow_back", on_click=lambda: ui.navigate.to(href)).props(
        "outline size=sm"
    )


@ui.page("/auth/register")
async def register_page() -> None:
    """Registration form."""
    if get_session_token():
        ui.navigate.to("/profile")
        return

    _return_button("/", "Home")
    ui.label("Register").classes("text-3xl font-bold mb-8")

    with ui.card().classes("w-96 p-4"):
        inputs = {
            "name": ui.input(label="Name").props('data-testid="name-input"'),
            "email": ui.input(label="Email", placeholder="you@acme.io").props(
                'data-testid="email-input"'
            ),
            "password": ui.input(
                label="Password", password=True, password_toggle_button=True
            ).props('data-testid="password-input"'),
        }
        for element in inputs.values():
            element.classes("w-full")

        async def submit() -> None:
            actions = _auth_actions()
            result = await actions.register(_form_payload(inputs))
            _show_result(inputs, result)
            if result.success:
                _set_session_token(result.session_token)
                ui.navigate.to(actions.callback_url)

        ui.button("Register", on_click=submit).props(
            'data-testid="register-btn"'
        ).classes("w-full mt-2")

    ui.link("Already have an account? Login", "/auth/login").classes("mt-4")


@ui.page("/auth/login")
async def login_page() -> None:
    """Login form."""
    if get_session_token():
        ui.navigate.to("/profile")
        return

    _return_button("/", "Home")
    ui.label("Login").classes("text-3xl font-bold mb-8")

    with ui.card().classes("w-96 p-4"):
        inputs = {
            "email": ui.input(label="Email", placeholder="you@acme.io").props(
                'data-testid="email-input"'
            ),
            "password": ui.input(
                label="Password", password=True, password_toggle_button=True
            ).props('data-testid="password-input"'),
        }
        for element in inputs.values():
            element.classes("w-full")

        async def submit() -> None:
            actions = _auth_actions()
            result = await actions.login(_form_payload(inputs))
            _show_result(inputs, result)
            if result.success:
                _set_session_token(result.session_token)
                ui.navigate.to(actions.callback_url)

        ui.button("Login", on_click=submit).props('data-testid="login-btn"').classes(
            "w-full mt-2"
        )

    ui.link("Don't have an account? Register", "/auth/register").classes("mt-4")


@ui.page("/profile")
async def profile_page() -> None:
    """Protected page showing the current session."""
    presenter = SessionPresenter(get_identity_provider())
    view = await presenter.protected_view(_session_request_headers())

    if not view.authorized:
        if get_session_token():
            logger.info("Stored session no longer valid, clearing it")
            _clear_session()
        ui.label(view.body)
        return

    ui.label("Profile").classes("text-3xl font-bold mb-8")
    ui.code(view.body, language="json").classes("w-full max-w-3xl")

    def signed_out() -> None:
        _clear_session()
        ui.notify(SIGN_OUT_SUCCESS_MESSAGE, type="positive")
        ui.navigate.to("/")

    def sign_out_failed(message: str) -> None:
        ui.notify(message, type="negative")

    async def sign_out() -> None:
        await _auth_actions().sign_out(
            _session_request_headers(),
            on_success=signed_out,
            on_error=sign_out_failed,
        )

    ui.button("Sign Out", on_click=sign_out).props(
        'color=negative size=sm data-testid="sign-out-btn"'
    ).classes("mt-4")
