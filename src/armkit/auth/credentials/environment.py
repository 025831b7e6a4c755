from __future__ import annotations

import logging
from typing import Any

from azure.core.credentials import AccessToken

from ..config import EnvironmentSettings
from ..exceptions import AuthenticationFailedError, CredentialUnavailableError
from .base import CredentialBase
from .client_certificate import CertificateCredential
from .client_secret import ClientSecretCredential
from .msal_base import ORGANIZATIONS_TENANT
from .username_password import UsernamePasswordCredential

logger = logging.getLogger(__name__)

EXPECTED_VARIABLES = (
    "AZURE_CLIENT_ID",
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_SECRET",
    "AZURE_CLIENT_CERTIFICATE_PATH",
    "AZURE_USERNAME",
    "AZURE_PASSWORD",
)


class EnvironmentCredential(CredentialBase):
    """A credential configured by environment variables.

    Variables are read once, at construction. The first complete set wins:

    Service principal with secret:
        - AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET
    Service principal with certificate:
        - AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_CERTIFICATE_PATH
        - AZURE_CLIENT_CERTIFICATE_PASSWORD (optional)
    User with username and password:
        - AZURE_CLIENT_ID, AZURE_USERNAME, AZURE_PASSWORD
        - AZURE_TENANT_ID (optional, defaults to ``organizations``)

    ``AZURE_AUTHORITY_HOST`` selects a sovereign cloud for all three.
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(cache=kwargs.pop("cache", None))
        self._settings = EnvironmentSettings()
        self._credential: CredentialBase | None = None
        self._construction_error: Exception | None = None
        try:
            self._credential = self._select(self._settings, kwargs)
        except (ValueError, OSError) as ex:
            # configured, but unusable: report it when a token is requested
            self._construction_error = ex

        if self._credential is not None:
            logger.info(
                "Environment is configured for %s", type(self._credential).__name__
            )
        elif self._construction_error is None:
            logger.debug(
                "Incomplete environment configuration. These variables are set: %s",
                ", ".join(self._set_variables()) or "none",
            )

    @staticmethod
    def _select(s: EnvironmentSettings, kwargs: dict[str, Any]) -> CredentialBase | None:
        kwargs = dict(kwargs)
        authority = kwargs.pop("authority", None) or s.authority_host
        if s.client_id and s.tenant_id and s.client_secret:
            return ClientSecretCredential(
                s.tenant_id,
                s.client_id,
                s.client_secret.get_secret_value(),
                authority=authority,
                **kwargs,
            )
        if s.client_id and s.tenant_id and s.client_certificate_path:
            return CertificateCredential(
                s.tenant_id,
                s.client_id,
                s.client_certificate_path,
                password=(
                    s.client_certificate_password.get_secret_value()
                    if s.client_certificate_password
                    else None
                ),
                authority=authority,
                **kwargs,
            )
        if s.client_id and s.username and s.password:
            return UsernamePasswordCredential(
                s.client_id,
                s.username,
                s.password.get_secret_value(),
                tenant_id=s.tenant_id or ORGANIZATIONS_TENANT,
                authority=authority,
                **kwargs,
            )
        return None

    @property
    def credential(self) -> CredentialBase | None:
        """The credential the environment selected, if any."""
        return self._credential

    def _set_variables(self) -> list[str]:
        fields = self._settings.model_dump()
        return [
            name
            for name in EXPECTED_VARIABLES
            if fields.get(name.removeprefix("AZURE_").lower()) is not None
        ]

    def close(self) -> None:
        if self._credential is not None:
            self._credential.close()

    def _request_token(self, scopes, *, claims, timeout) -> AccessToken:
        if self._construction_error is not None:
            raise AuthenticationFailedError(
                message=f"EnvironmentCredential authentication failed. {self._construction_error}"
            ) from self._construction_error
        if self._credential is None:
            raise CredentialUnavailableError(
                message=(
                    "EnvironmentCredential authentication unavailable. Environment variables are not fully configured. "
                    f"Set variables: {', '.join(self._set_variables()) or 'none'}. "
                    "Expected AZURE_CLIENT_ID with AZURE_TENANT_ID and AZURE_CLIENT_SECRET, "
                    "or AZURE_TENANT_ID and AZURE_CLIENT_CERTIFICATE_PATH, "
                    "or AZURE_USERNAME and AZURE_PASSWORD."
                )
            )
        return self._credential._request_token(scopes, claims=claims, timeout=timeout)
