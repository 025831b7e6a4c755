from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from pydantic import SecretStr

from armkit.auth import factory as factory_module
from armkit.auth.config import AuthConfig, Strategy

CREDENTIAL_NAMES = [
    "DefaultAzureCredential",
    "EnvironmentCredential",
    "AzureCliCredential",
    "ManagedIdentityCredential",
    "ClientSecretCredential",
    "CertificateCredential",
    "DeviceCodeCredential",
    "InteractiveBrowserCredential",
    "UsernamePasswordCredential",
]


def _make_recorder(name: str) -> type:
    """Create a class that records the arguments it is constructed with."""

    class _C:
        last_args: tuple[Any, ...] | None = None
        last_kwargs: dict[str, Any] | None = None
        call_count: int = 0

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            type(self).last_args = args
            type(self).last_kwargs = dict(kwargs)
            type(self).call_count += 1

    _C.__name__ = _C.__qualname__ = name
    return _C


@pytest.fixture()
def recorders(monkeypatch: pytest.MonkeyPatch) -> dict[str, type]:
    """Replace the credential classes the factory constructs with recorders."""
    classes = {name: _make_recorder(name) for name in CREDENTIAL_NAMES}
    for name, cls in classes.items():
        monkeypatch.setattr(factory_module, name, cls)
    return classes


def test_factory_default__uses_default_credential(recorders: dict[str, type]) -> None:
    """DEFAULT strategy: returns DefaultAzureCredential with passthrough."""
    cfg = AuthConfig(strategy=Strategy.DEFAULT, authority="https://login.example")
    cred = factory_module.get_credential(cfg)

    klass = recorders["DefaultAzureCredential"]
    assert isinstance(cred, klass)
    assert klass.call_count == 1
    assert klass.last_kwargs == {
        "authority": "https://login.example",
        "managed_identity_client_id": None,
        "tenant_id": None,
    }


def test_factory_none__reads_environment(
    monkeypatch: pytest.MonkeyPatch, recorders: dict[str, type]
) -> None:
    monkeypatch.setenv("AZURE_AUTH_STRATEGY", "cli")
    monkeypatch.setenv("AZURE_TENANT_ID", "t")

    factory_module.get_credential()

    assert recorders["AzureCliCredential"].last_kwargs == {"tenant_id": "t"}


def test_factory_environment__authority_passthrough(recorders: dict[str, type]) -> None:
    cfg = AuthConfig(strategy=Strategy.ENVIRONMENT, authority="https://login.example")
    factory_module.get_credential(cfg)

    assert recorders["EnvironmentCredential"].last_kwargs == {"authority": "https://login.example"}


def test_factory_managed_identity__client_id(recorders: dict[str, type]) -> None:
    cfg = AuthConfig(strategy=Strategy.MANAGED_IDENTITY, client_id="mi-client")
    factory_module.get_credential(cfg)

    klass = recorders["ManagedIdentityCredential"]
    assert klass.call_count == 1
    assert klass.last_kwargs == {"client_id": "mi-client"}


def test_factory_client_secret__all_fields(recorders: dict[str, type]) -> None:
    cfg = AuthConfig(
        strategy=Strategy.CLIENT_SECRET,
        tenant_id="t",
        client_id="c",
        client_secret=SecretStr("s"),
        authority="https://login.example",
    )
    factory_module.get_credential(cfg)

    assert recorders["ClientSecretCredential"].last_kwargs == {
        "tenant_id": "t",
        "client_id": "c",
        "client_secret": "s",
        "authority": "https://login.example",
    }


def test_factory_certificate__path_and_password(
    tmp_path: Path, recorders: dict[str, type]
) -> None:
    cert = tmp_path / "cert.pem"
    cert.write_text("x")
    cfg = AuthConfig(
        strategy=Strategy.CLIENT_CERTIFICATE,
        tenant_id="t",
        client_id="c",
        certificate_path=cert,
        certificate_password=SecretStr("pw"),
    )
    factory_module.get_credential(cfg)

    assert recorders["CertificateCredential"].last_kwargs == {
        "tenant_id": "t",
        "client_id": "c",
        "certificate_path": str(cert),
        "password": "pw",
        "authority": None,
    }


def test_factory_device_code__defaults_tenant(recorders: dict[str, type]) -> None:
    factory_module.get_credential(AuthConfig(strategy=Strategy.DEVICE_CODE))

    # tenant left to the credential's "organizations" default
    assert recorders["DeviceCodeCredential"].last_kwargs == {
        "client_id": None,
        "authority": None,
    }


def test_factory_interactive__redirect_and_tenant(recorders: dict[str, type]) -> None:
    cfg = AuthConfig(
        strategy=Strategy.INTERACTIVE_BROWSER,
        tenant_id="t",
        client_id="c",
        redirect_uri="http://localhost:8400",
        authority="https://login.example",
    )
    factory_module.get_credential(cfg)

    assert recorders["InteractiveBrowserCredential"].last_kwargs == {
        "tenant_id": "t",
        "client_id": "c",
        "redirect_uri": "http://localhost:8400",
        "authority": "https://login.example",
    }


def test_factory_username_password__with_client_secret(recorders: dict[str, type]) -> None:
    cfg = AuthConfig(
        strategy=Strategy.USERNAME_PASSWORD,
        tenant_id="t",
        client_id="c",
        username="user",
        password=SecretStr("pw"),
        client_secret=SecretStr("client-cred"),
        authority="https://login.example",
    )
    factory_module.get_credential(cfg)

    klass = recorders["UsernamePasswordCredential"]
    assert klass.call_count == 1
    assert klass.last_kwargs == {
        "tenant_id": "t",
        "client_id": "c",
        "username": "user",
        "password": "pw",
        "authority": "https://login.example",
        "client_secret": "client-cred",
    }
