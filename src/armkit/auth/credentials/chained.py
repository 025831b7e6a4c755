from __future__ import annotations

import logging
from typing import Any

from azure.core.credentials import AccessToken, TokenCredential
from azure.core.exceptions import ClientAuthenticationError

from ..exceptions import (
    CredentialChainError,
    CredentialChainUnavailableError,
    CredentialUnavailableError,
)

logger = logging.getLogger(__name__)

NO_CREDENTIALS = "No credentials configured"


def _credential_name(credential: TokenCredential) -> str:
    return type(credential).__name__


class ChainedTokenCredential:
    """A sequence of credentials that is itself a credential.

    ``get_token`` calls each credential in order and returns the first token
    received. A credential that is unavailable or whose authentication fails
    is recorded and the next one is tried. Every call starts again from the
    first credential.

    Args:
        credentials: Credential instances in the order to try them. They are
            not owned by the chain; the caller may share them.
    """

    def __init__(self, *credentials: TokenCredential) -> None:
        self.credentials: tuple[TokenCredential, ...] = credentials

    def __enter__(self):
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close every credential in the chain."""
        for credential in self.credentials:
            close = getattr(credential, "close", None)
            if close is not None:
                close()

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        """Request a token from each chained credential, in order.

        Raises:
            CredentialChainError: No credential in the chain provided a token.
                The message lists each credential's failure, in chain order.
            CredentialChainUnavailableError: As above, when every credential
                was unavailable rather than rejected.
        """
        errors: list[tuple[str, ClientAuthenticationError]] = []
        for credential in self.credentials:
            name = _credential_name(credential)
            try:
                token = credential.get_token(*scopes, **kwargs)
            except ClientAuthenticationError as ex:
                errors.append((name, ex))
                continue
            logger.info("%s acquired a token from %s", type(self).__name__, name)
            return token

        error = self._chain_error(errors)
        logger.warning("%s", error.message)
        raise error

    def _message_prefix(self) -> str:
        return f"{type(self).__name__} failed to retrieve a token from the included credentials."

    def _chain_error(
        self, errors: list[tuple[str, ClientAuthenticationError]]
    ) -> CredentialChainError:
        if not errors:
            return CredentialChainUnavailableError(f"{self._message_prefix()} {NO_CREDENTIALS}.")

        attempts = "\n".join(f"\t{name}: {ex.message}" for name, ex in errors)
        message = f"{self._message_prefix()}\nAttempted credentials:\n{attempts}"
        if all(isinstance(ex, CredentialUnavailableError) for _, ex in errors):
            return CredentialChainUnavailableError(message, errors)
        return CredentialChainError(message, errors)
