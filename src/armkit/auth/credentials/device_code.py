from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable

from ..exceptions import AuthenticationFailedError
from .msal_base import UserCredential

PromptCallback = Callable[[str, str, datetime], None]


class DeviceCodeCredential(UserCredential):
    """Authenticates users through the device code flow.

    The user is shown a URL and a code to enter in a browser on any device.
    When the user completes sign-in there, the credential receives a token.

    Args:
        client_id: Client ID of an application users sign in to. Defaults to
            the Azure CLI's public client.
        tenant_id: Tenant ID or a domain associated with a tenant. Defaults to
            ``organizations``.
        timeout: Seconds to wait for the user to authenticate. Defaults to the
            validity period of the device code.
        prompt_callback: Called with ``(verification_uri, user_code,
            expires_on)`` to show the user what to do. Defaults to printing the
            identity provider's instruction.
        authority: Authority host. Defaults to the public cloud.
    """

    def __init__(
        self,
        client_id: str | None = None,
        *,
        timeout: float | None = None,
        prompt_callback: PromptCallback | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(client_id, **kwargs)
        self._timeout = timeout
        self._prompt_callback = prompt_callback

    def _acquire_user_token(self, app, scopes, claims, timeout):
        flow = app.initiate_device_flow(scopes)
        if "user_code" not in flow:
            raise AuthenticationFailedError(
                f"Couldn't begin authentication: {flow.get('error_description') or flow.get('error')}"
            )

        if self._prompt_callback:
            expires_on = datetime.fromtimestamp(flow["expires_at"], timezone.utc)
            self._prompt_callback(flow["verification_uri"], flow["user_code"], expires_on)
        else:
            print(flow["message"])

        deadline = timeout if timeout is not None else self._timeout
        if deadline is not None:
            # msal polls until expires_at
            flow["expires_at"] = min(flow["expires_at"], time.time() + deadline)

        result = app.acquire_token_by_device_flow(flow, claims_challenge=claims)
        if result and result.get("error") == "authorization_pending":
            raise AuthenticationFailedError("Timed out waiting for user to authenticate")
        return result
