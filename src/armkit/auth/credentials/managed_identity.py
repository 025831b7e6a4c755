from __future__ import annotations

import logging
import time
from typing import Any

import requests
from azure.core.credentials import AccessToken

from ..config import ManagedIdentitySettings
from ..exceptions import AuthenticationFailedError, CredentialUnavailableError
from ..scopes import resource_from_scope, single_scope
from .base import CredentialBase

logger = logging.getLogger(__name__)

IMDS_ENDPOINT = "http://169.254.169.254/metadata/identity/oauth2/token"
IMDS_API_VERSION = "2018-02-01"
APP_SERVICE_API_VERSION = "2019-08-01"
# IMDS answers within milliseconds on an Azure host; elsewhere the address is unroutable
IMDS_CONNECT_TIMEOUT = 1.0
DEFAULT_READ_TIMEOUT = 10.0


class ManagedIdentityCredential(CredentialBase):
    """Authenticates with the managed identity of the hosting Azure resource.

    Uses the App Service / Functions identity endpoint when ``IDENTITY_ENDPOINT``
    and ``IDENTITY_HEADER`` are set, otherwise the Instance Metadata Service
    (IMDS) available on VMs, scale sets and AKS nodes.

    Args:
        client_id: Client ID of a user-assigned identity. Omit for the
            system-assigned identity.
        session: ``requests.Session`` used for the endpoint calls.
    """

    def __init__(
        self,
        *,
        client_id: str | None = None,
        session: requests.Session | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(cache=kwargs.pop("cache", None))
        self._client_id = client_id
        self._settings = ManagedIdentitySettings()
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    @property
    def _uses_app_service(self) -> bool:
        return bool(self._settings.identity_endpoint and self._settings.identity_header)

    def _request_token(self, scopes, *, claims, timeout) -> AccessToken:
        resource = resource_from_scope(single_scope(scopes, type(self).__name__))
        if self._uses_app_service:
            return self._request_app_service(resource, timeout)
        return self._request_imds(resource, timeout)

    def _request_app_service(self, resource: str, timeout: float | None) -> AccessToken:
        params = {"api-version": APP_SERVICE_API_VERSION, "resource": resource}
        if self._client_id:
            params["client_id"] = self._client_id
        headers = {"X-IDENTITY-HEADER": self._settings.identity_header.get_secret_value()}
        try:
            response = self._session.get(
                self._settings.identity_endpoint,
                params=params,
                headers=headers,
                timeout=timeout or DEFAULT_READ_TIMEOUT,
            )
        except requests.RequestException as ex:
            raise CredentialUnavailableError(
                message=f"ManagedIdentityCredential authentication unavailable. The identity endpoint could not be reached: {ex}"
            ) from ex
        return self._parse(response)

    def _request_imds(self, resource: str, timeout: float | None) -> AccessToken:
        params = {"api-version": IMDS_API_VERSION, "resource": resource}
        if self._client_id:
            params["client_id"] = self._client_id
        try:
            response = self._session.get(
                IMDS_ENDPOINT,
                params=params,
                headers={"Metadata": "true"},
                timeout=(IMDS_CONNECT_TIMEOUT, timeout or DEFAULT_READ_TIMEOUT),
            )
        except requests.RequestException as ex:
            raise CredentialUnavailableError(
                message="ManagedIdentityCredential authentication unavailable, no response from the IMDS endpoint."
            ) from ex

        if response.status_code == 400:
            # IMDS is up but no identity with the requested id is assigned to this host
            raise CredentialUnavailableError(
                message=f"ManagedIdentityCredential authentication unavailable. The requested identity has not been assigned to this resource. {_error_text(response)}"
            )
        return self._parse(response)

    @staticmethod
    def _parse(response: requests.Response) -> AccessToken:
        if not response.ok:
            raise AuthenticationFailedError(
                message=f"ManagedIdentityCredential authentication failed ({response.status_code}): {_error_text(response)}"
            )
        try:
            content = response.json()
            token = content["access_token"]
            if "expires_on" in content:
                expires_on = int(content["expires_on"])
            else:
                expires_on = int(time.time()) + int(content["expires_in"])
        except (KeyError, ValueError, TypeError) as ex:
            raise AuthenticationFailedError(
                message="ManagedIdentityCredential received an unexpected token response"
            ) from ex
        logger.debug("Managed identity token expires at %d", expires_on)
        return AccessToken(token, expires_on)


def _error_text(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return body.get("error_description") or body.get("message") or response.text
    return response.text
