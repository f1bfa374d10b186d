"""Exceptions raised by identity provider adapters."""

from __future__ import annotations


class IdentityProviderError(Exception):
    """Base exception for identity provider failures."""


class ProviderUnavailableError(IdentityProviderError):
    """The provider could not be reached or did not answer in time.

    Rejections (bad credentials, duplicate accounts) are not errors: adapters
    report those through their result types.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Identity provider unavailable during {operation}: {reason}")
