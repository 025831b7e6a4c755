from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Strategy(str, Enum):
    """Supported authentication strategies."""

    DEFAULT = "default"
    ENVIRONMENT = "environment"
    CLI = "cli"
    MANAGED_IDENTITY = "managed_identity"
    CLIENT_SECRET = "client_secret"
    CLIENT_CERTIFICATE = "client_certificate"
    DEVICE_CODE = "device_code"
    INTERACTIVE_BROWSER = "interactive_browser"
    USERNAME_PASSWORD = "username_password"


class AuthConfig(BaseSettings):
    """Configuration for selecting and constructing a credential.

    This model reads environment variables automatically and performs
    cross-field validation based on the selected :class:`Strategy`.

    Environment variables (aliases supported where noted):
        - AZURE_AUTH_STRATEGY (alias: AUTH_STRATEGY)
        - AZURE_TENANT_ID
        - AZURE_CLIENT_ID (alias: MANAGED_IDENTITY_CLIENT_ID)
        - AZURE_CLIENT_SECRET
        - AZURE_CLIENT_CERTIFICATE_PATH
        - AZURE_CLIENT_CERTIFICATE_PASSWORD
        - AZURE_USERNAME
        - AZURE_PASSWORD
        - AZURE_REDIRECT_URI
        - AZURE_AUTHORITY_HOST (alias: AUTHORITY_HOST)
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # With validation_alias set, the field name itself is only accepted as
    # input when it is listed in the alias choices.

    strategy: Strategy = Field(
        default=Strategy.DEFAULT,
        validation_alias=AliasChoices("strategy", "AZURE_AUTH_STRATEGY", "AUTH_STRATEGY"),
    )
    tenant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("tenant_id", "AZURE_TENANT_ID")
    )
    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "client_id", "AZURE_CLIENT_ID", "MANAGED_IDENTITY_CLIENT_ID"
        ),
    )
    client_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("client_secret", "AZURE_CLIENT_SECRET"),
    )
    certificate_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_path", "AZURE_CLIENT_CERTIFICATE_PATH"
        ),
    )
    certificate_password: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_password", "AZURE_CLIENT_CERTIFICATE_PASSWORD"
        ),
    )
    username: str | None = Field(
        default=None,
        validation_alias=AliasChoices("username", "AZURE_USERNAME"),
    )
    password: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("password", "AZURE_PASSWORD"),
    )
    redirect_uri: str | None = Field(
        default=None,
        validation_alias=AliasChoices("redirect_uri", "AZURE_REDIRECT_URI"),
    )
    authority: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "authority", "AZURE_AUTHORITY_HOST", "AUTHORITY_HOST"
        ),
    )

    @field_validator("certificate_path")
    @classmethod
    def _ensure_existing_path(cls, v: Path | None) -> Path | None:
        """Ensure configured paths exist if provided."""
        if v is not None and not v.exists():
            raise ValueError(f"Path does not exist: {v}")
        return v

    @model_validator(mode="after")
    def _cross_field_validation(self) -> "AuthConfig":
        """Validate required fields for the selected strategy."""
        s = self.strategy
        if s is Strategy.CLIENT_SECRET:
            if not (self.tenant_id and self.client_id and self.client_secret):
                raise ValueError(
                    "client_secret requires tenant_id, client_id, and client_secret."
                )
        elif s is Strategy.CLIENT_CERTIFICATE:
            if not (self.tenant_id and self.client_id and self.certificate_path):
                raise ValueError(
                    "client_certificate requires tenant_id, client_id, and certificate_path."
                )
        elif s is Strategy.USERNAME_PASSWORD:
            if not (self.client_id and self.username and self.password):
                raise ValueError(
                    "username_password requires client_id, username and password."
                )
        # DEFAULT, ENVIRONMENT, CLI, MANAGED_IDENTITY, DEVICE_CODE and
        # INTERACTIVE_BROWSER fall back to defaults or fail at runtime.
        return self


class EnvironmentSettings(BaseSettings):
    """The ``AZURE_*`` variables read by :class:`EnvironmentCredential`."""

    model_config = SettingsConfigDict(
        env_prefix="AZURE_",
        case_sensitive=False,
        extra="ignore",
    )

    client_id: str | None = None
    tenant_id: str | None = None
    client_secret: SecretStr | None = None
    client_certificate_path: str | None = None
    client_certificate_password: SecretStr | None = None
    username: str | None = None
    password: SecretStr | None = None
    authority_host: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_unset(cls, v):
        """An exported-but-empty variable counts as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ManagedIdentitySettings(BaseSettings):
    """Variables the hosting environment sets when an identity endpoint exists."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    identity_endpoint: str | None = None
    identity_header: SecretStr | None = None
