from .client import VMwareCloudSimpleClient
from .models import (
    AggregationType,
    AvailableOperation,
    AvailableOperationDisplay,
    AvailableOperationsListResponse,
    OperationOrigin,
)
from .operations import API_VERSION, AvailableOperationsOperations

__all__ = [
    "API_VERSION",
    "AggregationType",
    "AvailableOperation",
    "AvailableOperationDisplay",
    "AvailableOperationsListResponse",
    "AvailableOperationsOperations",
    "OperationOrigin",
    "VMwareCloudSimpleClient",
]
