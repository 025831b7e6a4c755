from __future__ import annotations

from typing import Any

from .msal_base import UserCredential


class UsernamePasswordCredential(UserCredential):
    """Authenticates a user with a username and password (resource owner password flow).

    This flow does not support multi-factor authentication; accounts that
    require MFA are rejected by the identity provider. Prefer
    :class:`DeviceCodeCredential` or :class:`InteractiveBrowserCredential`.

    Args:
        client_id: The application's client ID.
        username: The user's username, usually an email address.
        password: The user's password.
        tenant_id: Tenant ID or a domain associated with a tenant. Defaults to
            ``organizations``.
        client_secret: Client secret of a confidential application, when the
            app registration requires one.
        authority: Authority host. Defaults to the public cloud.
    """

    def __init__(
        self,
        client_id: str,
        username: str,
        password: str,
        *,
        client_secret: str | None = None,
        **kwargs: Any,
    ) -> None:
        if not username or not password:
            raise ValueError("username and password are required")
        super().__init__(client_id, client_credential=client_secret, **kwargs)
        self._username = username
        self._password = password

    def _acquire_user_token(self, app, scopes, claims, timeout):
        return app.acquire_token_by_username_password(
            username=self._username,
            password=self._password,
            scopes=scopes,
            claims_challenge=claims,
        )
