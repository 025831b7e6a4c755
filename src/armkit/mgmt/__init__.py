"""Clients for Azure Resource Manager APIs.

Public API:
- ManagementClient (shared request pipeline), ClientConfig (settings)
- ManagementApiError
- vmwarecloudsimple.VMwareCloudSimpleClient
"""

from .client import ManagementClient
from .config import ClientConfig
from .exceptions import ManagementApiError
from .policies import RETRY_STATUS_CODES, BearerTokenAuth, RetryPolicy

__all__ = [
    "ManagementClient",
    "ClientConfig",
    "ManagementApiError",
    "BearerTokenAuth",
    "RetryPolicy",
    "RETRY_STATUS_CODES",
]
