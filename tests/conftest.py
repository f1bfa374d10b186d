"""Shared pytest fixtures for acmeauth tests."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio
from dotenv import load_dotenv

from acmeauth.auth import clear_provider_cache

load_dotenv()


@pytest.fixture(autouse=True)
def _reset_provider_cache():
    """Start every test with fresh settings and no cached mock provider."""
    clear_provider_cache()
    yield
    clear_provider_cache()


@pytest_asyncio.fixture
async def mock_stytch_client():
    """Create a mocked Stytch Client for unit tests.

    Patches the Client constructor to return a mock, allowing
    tests to set up expected responses without making real API calls.

    Made async to ensure proper event loop handling with pytest-asyncio.
    """
    with patch("acmeauth.auth.client.Client") as mock_cls:
        mock_client = MagicMock()
        mock_cls.return_value = mock_client
        yield mock_client
