from __future__ import annotations

from typing import Any

from .msal_base import MsalCredential


class ClientSecretCredential(MsalCredential):
    """Authenticates as a service principal using a client secret.

    Args:
        tenant_id: ID of the service principal's tenant.
        client_id: The service principal's client ID.
        client_secret: One of the service principal's client secrets.
        authority: Authority host, e.g. ``login.microsoftonline.us``. Defaults
            to the public cloud.
    """

    def __init__(
        self, tenant_id: str, client_id: str, client_secret: str, **kwargs: Any
    ) -> None:
        if not tenant_id:
            raise ValueError("tenant_id should be the id of a Microsoft Entra tenant")
        if not client_secret:
            raise ValueError("client_secret should be an Entra application secret")
        super().__init__(
            client_id, tenant_id=tenant_id, client_credential=client_secret, **kwargs
        )
