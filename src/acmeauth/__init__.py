"""acmeauth - email and password authentication pages.

Registration, login, profile and sign-out over an external identity
provider (Better Auth, Stytch, or an in-memory mock).
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


def _setup_logging() -> None:
    """Configure logging to both console and rotating file."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"acmeauth.{os.getpid()}.log"

    # Root logger config
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())


def main() -> None:
    """Entry point for the acmeauth application."""
    from nicegui import ui

    from acmeauth.config import get_settings

    _setup_logging()

    import acmeauth.pages  # noqa: F401 - registers routes

    settings = get_settings()
    logging.getLogger(__name__).info(
        "Identity provider: %s (%s)",
        "mock" if settings.dev.auth_mock else settings.auth.provider,
        settings.auth.base_url,
    )

    port = settings.app.port
    storage_secret = settings.app.storage_secret.get_secret_value()

    print(f"acmeauth v{__version__}")
    print(f"Starting application on http://0.0.0.0:{port}")

    reload = os.environ.get("ACMEAUTH_RELOAD", "1") != "0"
    ui.run(
        host="0.0.0.0",  # nosec B104
        port=port,
        reload=reload,
        storage_secret=storage_secret,
        title="Acme Inc.",
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
