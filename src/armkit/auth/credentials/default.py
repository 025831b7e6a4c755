from __future__ import annotations

import logging
import os
from typing import Any

from azure.core.credentials import TokenCredential

from .chained import ChainedTokenCredential
from .cli import AzureCliCredential
from .environment import EnvironmentCredential
from .managed_identity import ManagedIdentityCredential

logger = logging.getLogger(__name__)


class DefaultAzureCredential(ChainedTokenCredential):
    """A default credential for applications that run on Azure or a developer machine.

    Tries, in this order:

    1. :class:`EnvironmentCredential` (service principal or user from ``AZURE_*`` variables)
    2. :class:`ManagedIdentityCredential` (identity of the hosting Azure resource)
    3. :class:`AzureCliCredential` (user signed in with ``az login``)

    Args:
        authority: Authority host for the environment credential. Defaults to
            ``AZURE_AUTHORITY_HOST`` or the public cloud.
        managed_identity_client_id: Client ID of a user-assigned managed
            identity. Defaults to ``AZURE_CLIENT_ID``.
        tenant_id: Tenant the CLI credential requests tokens from.
        exclude_environment_credential: Skip the environment credential.
        exclude_managed_identity_credential: Skip the managed identity credential.
        exclude_cli_credential: Skip the CLI credential.
        process_timeout: Seconds to wait for the Azure CLI.

    Raises:
        ValueError: If every credential is excluded.
    """

    def __init__(
        self,
        *,
        authority: str | None = None,
        managed_identity_client_id: str | None = None,
        tenant_id: str | None = None,
        exclude_environment_credential: bool = False,
        exclude_managed_identity_credential: bool = False,
        exclude_cli_credential: bool = False,
        **kwargs: Any,
    ) -> None:
        credentials: list[TokenCredential] = []
        if not exclude_environment_credential:
            env_kwargs = {"authority": authority} if authority else {}
            credentials.append(EnvironmentCredential(**env_kwargs))
        if not exclude_managed_identity_credential:
            credentials.append(
                ManagedIdentityCredential(
                    client_id=managed_identity_client_id or os.environ.get("AZURE_CLIENT_ID")
                )
            )
        if not exclude_cli_credential:
            cli_kwargs = {}
            if "process_timeout" in kwargs:
                cli_kwargs["process_timeout"] = kwargs["process_timeout"]
            credentials.append(AzureCliCredential(tenant_id=tenant_id, **cli_kwargs))

        if not credentials:
            raise ValueError("DefaultAzureCredential requires at least one credential; all are excluded")

        logger.debug(
            "DefaultAzureCredential will try %s",
            ", ".join(type(c).__name__ for c in credentials),
        )
        super().__init__(*credentials)
