from __future__ import annotations

import abc
import logging
from typing import Any

from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError

from ..exceptions import CredentialUnavailableError
from ..token_cache import TokenCache

logger = logging.getLogger(__name__)


class CredentialBase(abc.ABC):
    """Shared ``get_token`` plumbing for every credential.

    Subclasses implement :meth:`_request_token`; this class validates the
    request, consults the per-instance :class:`TokenCache` and logs the
    outcome. Secrets never reach the log.
    """

    def __init__(self, *, cache: TokenCache | None = None) -> None:
        self._cache = cache if cache is not None else TokenCache()

    def __enter__(self):
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release transport resources held by the credential."""

    def get_token(
        self,
        *scopes: str,
        claims: str | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> AccessToken:
        """Request an access token for ``scopes``.

        Args:
            scopes: Desired scopes, e.g. ``"https://management.azure.com/.default"``.
            claims: Additional claims required in the token, such as those
                returned in a resource provider's claims challenge. A claims
                request always goes to the identity provider.
            timeout: Seconds to wait for the network call, subprocess or
                user interaction behind this request.

        Returns:
            An :class:`AccessToken` that has not expired.

        Raises:
            CredentialUnavailableError: The credential is not configured here.
            AuthenticationFailedError: Authentication was attempted and rejected.
            ValueError: No scopes were given.
        """
        if not scopes:
            raise ValueError('"get_token" requires at least one scope')

        name = type(self).__name__
        try:
            if claims:
                token = self._request_token(scopes, claims=claims, timeout=timeout)
            else:
                token = self._cache.get_or_acquire(
                    scopes,
                    lambda: self._request_token(scopes, claims=None, timeout=timeout),
                )
        except CredentialUnavailableError as ex:
            logger.debug("%s.get_token unavailable: %s", name, ex.message)
            raise
        except ClientAuthenticationError as ex:
            logger.warning("%s.get_token failed: %s", name, ex.message)
            raise

        logger.info("%s.get_token succeeded", name)
        return token

    @abc.abstractmethod
    def _request_token(
        self,
        scopes: tuple[str, ...],
        *,
        claims: str | None,
        timeout: float | None,
    ) -> AccessToken:
        """Perform the actual exchange, bypassing the cache."""
