from __future__ import annotations

from azure.core.credentials import TokenCredential

from .config import AuthConfig, Strategy
from .credentials import (
    AzureCliCredential,
    CertificateCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    DeviceCodeCredential,
    EnvironmentCredential,
    InteractiveBrowserCredential,
    ManagedIdentityCredential,
    UsernamePasswordCredential,
)


def get_credential(config: AuthConfig | None = None) -> TokenCredential:
    """Construct a :class:`TokenCredential` based on :class:`AuthConfig`.

    Args:
        config: Auth configuration. If ``None``, it is read from the environment.

    Returns:
        A concrete :class:`TokenCredential`.
    """
    cfg = config or AuthConfig()
    authority = cfg.authority  # may be None

    match cfg.strategy:
        case Strategy.ENVIRONMENT:
            return EnvironmentCredential(authority=authority)
        case Strategy.CLI:
            return AzureCliCredential(tenant_id=cfg.tenant_id)
        case Strategy.MANAGED_IDENTITY:
            return ManagedIdentityCredential(client_id=cfg.client_id)
        case Strategy.CLIENT_SECRET:
            return ClientSecretCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                client_secret=cfg.client_secret.get_secret_value(),
                authority=authority,
            )
        case Strategy.CLIENT_CERTIFICATE:
            return CertificateCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                certificate_path=str(cfg.certificate_path),
                password=(
                    cfg.certificate_password.get_secret_value()
                    if cfg.certificate_password
                    else None
                ),
                authority=authority,
            )
        case Strategy.DEVICE_CODE:
            return DeviceCodeCredential(
                client_id=cfg.client_id,
                **_user_tenant(cfg),
                authority=authority,
            )
        case Strategy.INTERACTIVE_BROWSER:
            return InteractiveBrowserCredential(
                client_id=cfg.client_id,
                **_user_tenant(cfg),
                authority=authority,
                redirect_uri=cfg.redirect_uri,
            )
        case Strategy.USERNAME_PASSWORD:
            return UsernamePasswordCredential(
                client_id=cfg.client_id,
                username=cfg.username,
                password=cfg.password.get_secret_value(),
                **_user_tenant(cfg),
                authority=authority,
                client_secret=(
                    cfg.client_secret.get_secret_value() if cfg.client_secret else None
                ),
            )
        case _:
            return DefaultAzureCredential(
                authority=authority,
                managed_identity_client_id=cfg.client_id,
                tenant_id=cfg.tenant_id,
            )


def _user_tenant(cfg: AuthConfig) -> dict[str, str]:
    # user credentials default to the "organizations" tenant
    return {"tenant_id": cfg.tenant_id} if cfg.tenant_id else {}
