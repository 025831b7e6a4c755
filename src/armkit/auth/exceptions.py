"""Error taxonomy for credentials.

Both leaf errors derive from :class:`azure.core.exceptions.ClientAuthenticationError`
so code written against Azure SDK clients keeps catching them with one clause.
"""

from __future__ import annotations

from typing import Sequence

from azure.core.exceptions import ClientAuthenticationError


class CredentialUnavailableError(ClientAuthenticationError):
    """The credential's prerequisites are absent (not configured)."""


class AuthenticationFailedError(ClientAuthenticationError):
    """The credential was configured but the token exchange was rejected."""


class CredentialChainError(AuthenticationFailedError):
    """Every credential in a chain failed.

    Attributes:
        errors: ``(credential_name, exception)`` pairs in chain order.
    """

    def __init__(
        self,
        message: str,
        errors: Sequence[tuple[str, ClientAuthenticationError]] = (),
    ) -> None:
        self.errors: list[tuple[str, ClientAuthenticationError]] = list(errors)
        super().__init__(message=message)


class CredentialChainUnavailableError(CredentialChainError, CredentialUnavailableError):
    """Every credential in a chain was unavailable."""


__all__ = [
    "CredentialUnavailableError",
    "AuthenticationFailedError",
    "CredentialChainError",
    "CredentialChainUnavailableError",
]
