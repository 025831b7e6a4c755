from __future__ import annotations

import webbrowser
from typing import Any
from urllib.parse import urlparse

import msal

from ..exceptions import AuthenticationFailedError, CredentialUnavailableError
from .msal_base import UserCredential

DEFAULT_TIMEOUT = 300


class InteractiveBrowserCredential(UserCredential):
    """Opens a browser to interactively authenticate a user.

    The identity provider redirects to a loopback server the credential starts
    on ``redirect_uri``'s port (a free port when not given).

    Args:
        client_id: Client ID of an application users sign in to. Defaults to
            the Azure CLI's public client.
        tenant_id: Tenant ID or a domain associated with a tenant. Defaults to
            ``organizations``.
        redirect_uri: Loopback redirect URI registered for the application,
            e.g. ``http://localhost:8400``.
        login_hint: Username suggested on the sign-in page.
        timeout: Seconds to wait for the user to complete sign-in.
        authority: Authority host. Defaults to the public cloud.

    Raises:
        ValueError: If ``redirect_uri`` is not a loopback http URI.
    """

    def __init__(
        self,
        client_id: str | None = None,
        *,
        redirect_uri: str | None = None,
        login_hint: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        **kwargs: Any,
    ) -> None:
        super().__init__(client_id, **kwargs)
        self._port: int | None = None
        if redirect_uri:
            parsed = urlparse(redirect_uri)
            if parsed.scheme != "http" or parsed.hostname not in ("localhost", "127.0.0.1"):
                raise ValueError("redirect_uri must be a loopback http URI")
            self._port = parsed.port
        self._login_hint = login_hint
        self._timeout = timeout

    def _acquire_user_token(self, app, scopes, claims, timeout):
        # msal swallows a failure to launch the browser and waits out the timeout
        try:
            webbrowser.get()
        except webbrowser.Error as ex:
            raise CredentialUnavailableError(message=f"Failed to open a browser: {ex}") from ex

        try:
            return app.acquire_token_interactive(
                scopes,
                prompt="select_account",
                login_hint=self._login_hint,
                claims_challenge=claims,
                port=self._port,
                timeout=int(timeout if timeout is not None else self._timeout),
            )
        except msal.BrowserInteractionTimeoutError as ex:
            raise AuthenticationFailedError(
                message="Timed out waiting for the user to complete sign-in in the browser"
            ) from ex

