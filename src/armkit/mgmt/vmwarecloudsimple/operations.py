from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure.core.paging import ItemPaged

from .models import AvailableOperation, AvailableOperationsListResponse

if TYPE_CHECKING:
    from ..client import ManagementClient

logger = logging.getLogger(__name__)

API_VERSION = "2019-04-01"


class AvailableOperationsOperations:
    """Operations on the ``Microsoft.VMwareCloudSimple/operations`` collection.

    Not instantiated directly; use ``VMwareCloudSimpleClient.available_operations``.
    """

    def __init__(self, client: ManagementClient) -> None:
        self._client = client

    def list(self) -> ItemPaged[AvailableOperation]:
        """List the operations the provider exposes.

        Pages are fetched lazily by following ``nextLink``. Iterate the result
        for items or call ``by_page()`` for pages.

        Raises:
            ManagementApiError: The service returned a non-200 status.
            DeserializationError: A page could not be parsed.
        """
        url = f"{self._client.base_url}/providers/Microsoft.VMwareCloudSimple/operations"
        logger.debug("Listing VMwareCloudSimple operations (api-version %s)", API_VERSION)
        return self._client.paged(
            url,
            operation="AvailableOperationsClient.List",
            params={"api-version": API_VERSION},
            page_model=AvailableOperationsListResponse,
        )
