from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from armkit.auth.scopes import scope_from_resource

DEFAULT_BASE_URL = "https://management.azure.com"


class ClientConfig(BaseSettings):
    """Settings shared by the management clients.

    Environment variables:
        - AZURE_RESOURCE_MANAGER_URL
        - AZURE_RETRY_TOTAL, AZURE_RETRY_BACKOFF_FACTOR, AZURE_RETRY_BACKOFF_MAX
        - AZURE_CONNECTION_TIMEOUT, AZURE_READ_TIMEOUT
        - AZURE_LOGGING_ENABLE
    """

    model_config = SettingsConfigDict(
        env_prefix="AZURE_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        validation_alias=AliasChoices("base_url", "AZURE_RESOURCE_MANAGER_URL"),
    )
    credential_scopes: list[str] | None = None
    retry_total: int = Field(default=3, ge=0)
    retry_backoff_factor: float = Field(default=0.8, ge=0)
    retry_backoff_max: float = Field(default=120.0, ge=0)
    connection_timeout: float = 10.0
    read_timeout: float = 60.0
    # Request and response bodies are only logged when this is set
    logging_enable: bool = False
    user_agent: str = "armkit-mgmt"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def scopes(self) -> list[str]:
        """Scopes to request tokens for; derived from ``base_url`` unless set."""
        return self.credential_scopes or [scope_from_resource(self.base_url)]
