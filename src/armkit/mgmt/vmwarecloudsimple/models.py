from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _ArmModel(BaseModel):
    # Wire names are camelCase; unknown properties are kept for forward compatibility
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class OperationOrigin(str, Enum):
    USER = "user"
    SYSTEM = "system"
    USER_SYSTEM = "user,system"


class AggregationType(str, Enum):
    AVERAGE = "Average"
    TOTAL = "Total"


class AvailableOperationDisplay(_ArmModel):
    """Localized names for an operation."""

    provider: str | None = None
    resource: str | None = None
    operation: str | None = None
    description: str | None = None


class AvailableOperationDisplayPropertyServiceSpecificationMetricsItem(_ArmModel):
    name: str | None = None
    display_name: str | None = None
    display_description: str | None = None
    unit: str | None = None
    aggregation_type: AggregationType | None = None


class AvailableOperationServiceSpecification(_ArmModel):
    metric_specifications: list[AvailableOperationDisplayPropertyServiceSpecificationMetricsItem] | None = None


class AvailableOperationProperties(_ArmModel):
    service_specification: AvailableOperationServiceSpecification | None = None


class AvailableOperation(_ArmModel):
    """An operation exposed by the Microsoft.VMwareCloudSimple provider."""

    name: str | None = None
    display: AvailableOperationDisplay | None = None
    is_data_action: bool | None = None
    origin: OperationOrigin | None = None
    properties: AvailableOperationProperties | None = None


class AvailableOperationsListResponse(_ArmModel):
    """One page of the operations list."""

    value: list[AvailableOperation] | None = None
    next_link: str | None = None


__all__ = [
    "AggregationType",
    "AvailableOperation",
    "AvailableOperationDisplay",
    "AvailableOperationDisplayPropertyServiceSpecificationMetricsItem",
    "AvailableOperationProperties",
    "AvailableOperationServiceSpecification",
    "AvailableOperationsListResponse",
    "OperationOrigin",
]
