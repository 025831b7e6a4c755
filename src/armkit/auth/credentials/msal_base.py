"""msal application plumbing shared by the Entra ID credentials."""

from __future__ import annotations

import abc
import functools
import threading
import time
from typing import Any, Mapping

import msal
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError
from pydantic import BaseModel, ConfigDict

from ..exceptions import AuthenticationFailedError
from ..scopes import ARM_DEFAULT_SCOPE, tenant_authority
from ..token_cache import TokenCache
from .base import CredentialBase

# Public client id of the Azure CLI, usable for user sign-in without an app registration
DEVELOPER_SIGN_ON_CLIENT_ID = "04b07795-8ddb-461a-bbee-02f9e1bf7b46"
ORGANIZATIONS_TENANT = "organizations"


def wrap_exceptions(fn):
    """Re-raise anything msal lets escape as :class:`AuthenticationFailedError`.

    msal raises transport errors from ``requests`` and ``ValueError`` for an
    unknown authority; callers and chains only understand the
    ``ClientAuthenticationError`` family.
    """

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ClientAuthenticationError:
            raise
        except Exception as ex:
            raise AuthenticationFailedError(message=f"Authentication failed: {ex}") from ex

    return wrapper


class AuthenticationRecord(BaseModel):
    """Non-secret account information from a user sign-in."""

    model_config = ConfigDict(frozen=True)

    authority: str
    client_id: str
    home_account_id: str
    tenant_id: str
    username: str


def token_from_result(result: Mapping[str, Any] | None) -> AccessToken:
    """Turn an msal result dict into an :class:`AccessToken`.

    Raises:
        AuthenticationFailedError: If the result carries an error instead of a token.
    """
    if result and "access_token" in result:
        return AccessToken(
            result["access_token"], int(time.time()) + int(result["expires_in"])
        )
    if not result:
        raise AuthenticationFailedError("Authentication failed: no response from the identity provider")
    error = result.get("error", "unknown_error")
    description = result.get("error_description") or ""
    raise AuthenticationFailedError(f"Authentication failed: {error}: {description}".rstrip(": "))


class MsalCredential(CredentialBase):
    """Credential backed by a lazily created msal application.

    The application is built on first use, so constructing a credential never
    performs network I/O (msal fetches tenant metadata when the application is
    created).
    """

    def __init__(
        self,
        client_id: str,
        *,
        tenant_id: str,
        authority: str | None = None,
        client_credential: str | Mapping[str, str] | None = None,
        cache: TokenCache | None = None,
        **kwargs: Any,
    ) -> None:
        if not client_id:
            raise ValueError("client_id should be the id of an app registration")
        super().__init__(cache=cache)
        self._client_id = client_id
        self._tenant_id = tenant_id
        self._authority = tenant_authority(authority, tenant_id)
        self._client_credential = client_credential
        self._app: msal.ClientApplication | None = None
        self._app_lock = threading.Lock()

    def _create_app(self) -> msal.ClientApplication:
        if self._client_credential is not None:
            return msal.ConfidentialClientApplication(
                self._client_id,
                client_credential=self._client_credential,
                authority=self._authority,
            )
        return msal.PublicClientApplication(self._client_id, authority=self._authority)

    def _get_app(self) -> msal.ClientApplication:
        with self._app_lock:
            if self._app is None:
                self._app = self._create_app()
            return self._app

    @wrap_exceptions
    def _request_token(self, scopes, *, claims, timeout) -> AccessToken:
        # client credentials grant; user credentials override this
        result = self._get_app().acquire_token_for_client(
            list(scopes), claims_challenge=claims
        )
        return token_from_result(result)


class UserCredential(MsalCredential):
    """A credential signing in a user, able to refresh silently afterwards.

    After the first sign-in the account is remembered and msal's refresh
    token serves requests for new scopes without prompting again.
    """

    def __init__(self, client_id: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("tenant_id", ORGANIZATIONS_TENANT)
        super().__init__(client_id or DEVELOPER_SIGN_ON_CLIENT_ID, **kwargs)
        self._record: AuthenticationRecord | None = None

    @wrap_exceptions
    def authenticate(self, *scopes: str, timeout: float | None = None) -> AuthenticationRecord:
        """Sign in the user and return the account record.

        Args:
            scopes: Scopes to request during sign-in. Defaults to Azure Resource Manager.
        """
        scopes = scopes or (ARM_DEFAULT_SCOPE,)
        token = self._acquire_interactive(scopes, claims=None, timeout=timeout)
        self._cache.set(scopes, token)
        if self._record is None:
            raise AuthenticationFailedError("The sign-in response carried no account information")
        return self._record

    @wrap_exceptions
    def _request_token(self, scopes, *, claims, timeout) -> AccessToken:
        app = self._get_app()
        if self._record is not None:
            for account in app.get_accounts(username=self._record.username):
                if account.get("home_account_id") != self._record.home_account_id:
                    continue
                result = app.acquire_token_silent_with_error(
                    list(scopes), account=account, claims_challenge=claims
                )
                if result and "access_token" in result:
                    return token_from_result(result)
        return self._acquire_interactive(scopes, claims=claims, timeout=timeout)

    def _acquire_interactive(self, scopes, *, claims, timeout) -> AccessToken:
        result = self._acquire_user_token(self._get_app(), list(scopes), claims, timeout)
        token = token_from_result(result)
        self._remember_account(result)
        return token

    def _remember_account(self, result: Mapping[str, Any]) -> None:
        claims = result.get("id_token_claims") or {}
        oid, tid = claims.get("oid"), claims.get("tid")
        if not (oid and tid):
            return
        self._record = AuthenticationRecord(
            authority=self._authority,
            client_id=self._client_id,
            home_account_id=f"{oid}.{tid}",
            tenant_id=tid,
            username=claims.get("preferred_username", ""),
        )

    @abc.abstractmethod
    def _acquire_user_token(
        self,
        app: msal.ClientApplication,
        scopes: list[str],
        claims: str | None,
        timeout: float | None,
    ) -> Mapping[str, Any]:
        """Run the user-facing flow and return the msal result dict."""
