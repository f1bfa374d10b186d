"""Index page for acmeauth."""

from nicegui import ui

from acmeauth.pages.auth import get_session_token


@ui.page("/")
async def index_page() -> None:
    """Home page linking to the auth forms."""
    ui.label("Home").classes("text-2xl font-bold mb-4")

    with ui.row().classes("gap-2"):
        if get_session_token():
            ui.button("Profile", on_click=lambda: ui.navigate.to("/profile")).props(
                "outline"
            )
        else:
            ui.button(
                "Register", on_click=lambda: ui.navigate.to("/auth/register")
            ).props("outline")
            ui.button("Login", on_click=lambda: ui.navigate.to("/auth/login")).props(
                "outline"
            )
