from __future__ import annotations

from typing import Any

import requests
from azure.core.credentials import TokenCredential

from ..client import ManagementClient
from ..config import ClientConfig
from .operations import AvailableOperationsOperations


class VMwareCloudSimpleClient(ManagementClient):
    """Client for the VMware CloudSimple management API.

    Attributes:
        available_operations: :class:`AvailableOperationsOperations`.
    """

    def __init__(
        self,
        credential: TokenCredential,
        subscription_id: str,
        *,
        referer: str | None = None,
        region_id: str | None = None,
        config: ClientConfig | None = None,
        session: requests.Session | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the client.

        Args:
            credential: Credential that provides bearer tokens.
            subscription_id: Azure subscription id.
            referer: Sent as the ``Referer`` header when set.
            region_id: Region the CloudSimple resources live in.
            config: Client settings; ``base_url`` and other ``ClientConfig``
                fields may be passed as keyword arguments instead.
            session: ``requests.Session`` to send with.
        """
        if not subscription_id:
            raise ValueError("Parameter 'subscription_id' must not be empty.")
        headers = {"Referer": referer} if referer else None
        super().__init__(credential, config=config, session=session, headers=headers, **kwargs)
        self.subscription_id = subscription_id
        self.referer = referer
        self.region_id = region_id
        self.available_operations = AvailableOperationsOperations(self)
