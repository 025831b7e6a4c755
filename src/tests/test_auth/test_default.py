from __future__ import annotations

import time
from unittest import mock

import msal
import pytest
import requests

from armkit.auth.credentials import (
    AzureCliCredential,
    CommandResult,
    DefaultAzureCredential,
    EnvironmentCredential,
    ManagedIdentityCredential,
)
from armkit.auth.credentials import default as default_module
from armkit.auth.exceptions import CredentialChainError, CredentialChainUnavailableError

SCOPE = "https://management.azure.com/.default"


@pytest.fixture()
def imds_down(monkeypatch: pytest.MonkeyPatch) -> mock.MagicMock:
    """Every managed identity request fails to connect."""
    session_cls = mock.MagicMock()
    session_cls.return_value.get.side_effect = requests.ConnectionError("unreachable")
    monkeypatch.setattr(requests, "Session", session_cls)
    return session_cls


def _cli_runner(result: CommandResult) -> mock.MagicMock:
    runner = mock.MagicMock()
    runner.run.return_value = result
    return runner


def _patch_cli(monkeypatch: pytest.MonkeyPatch, result: CommandResult) -> mock.MagicMock:
    runner = _cli_runner(result)
    monkeypatch.setattr(
        default_module,
        "AzureCliCredential",
        lambda **kwargs: AzureCliCredential(runner=runner, **kwargs),
    )
    return runner


def test_order__environment_managed_identity_cli(imds_down: mock.MagicMock) -> None:
    cred = DefaultAzureCredential()
    assert [type(c) for c in cred.credentials] == [
        EnvironmentCredential,
        ManagedIdentityCredential,
        AzureCliCredential,
    ]


def test_exclusions() -> None:
    cred = DefaultAzureCredential(
        exclude_environment_credential=True, exclude_managed_identity_credential=True
    )
    assert [type(c) for c in cred.credentials] == [AzureCliCredential]

    with pytest.raises(ValueError, match="all are excluded"):
        DefaultAzureCredential(
            exclude_environment_credential=True,
            exclude_managed_identity_credential=True,
            exclude_cli_credential=True,
        )


def test_falls_through_to_cli(monkeypatch: pytest.MonkeyPatch, imds_down: mock.MagicMock) -> None:
    output = f'{{"accessToken": "cli", "expires_on": {int(time.time()) + 3600}}}'
    runner = _patch_cli(monkeypatch, CommandResult(0, output, ""))

    token = DefaultAzureCredential(tenant_id="tenant").get_token(SCOPE)

    assert token.token == "cli"
    assert runner.run.call_args.args[0][-2:] == ["--tenant", "tenant"]


def test_exhausted__names_every_credential(
    monkeypatch: pytest.MonkeyPatch, imds_down: mock.MagicMock
) -> None:
    _patch_cli(monkeypatch, CommandResult(127, "", "az: not found"))

    with pytest.raises(CredentialChainUnavailableError) as excinfo:
        DefaultAzureCredential().get_token(SCOPE)

    message = str(excinfo.value)
    assert "DefaultAzureCredential failed to retrieve a token" in message
    for name in ("EnvironmentCredential", "ManagedIdentityCredential", "AzureCliCredential"):
        assert name in message
    assert [name for name, _ in excinfo.value.errors] == [
        "EnvironmentCredential",
        "ManagedIdentityCredential",
        "AzureCliCredential",
    ]


def test_exhausted__with_failure_is_chain_error(
    monkeypatch: pytest.MonkeyPatch, imds_down: mock.MagicMock
) -> None:
    _patch_cli(monkeypatch, CommandResult(1, "", "ERROR: AADSTS50076: MFA required"))

    with pytest.raises(CredentialChainError) as excinfo:
        DefaultAzureCredential().get_token(SCOPE)
    assert not isinstance(excinfo.value, CredentialChainUnavailableError)


def test_managed_identity_client_id__from_environment(
    monkeypatch: pytest.MonkeyPatch, imds_down: mock.MagicMock
) -> None:
    monkeypatch.setenv("AZURE_CLIENT_ID", "uami")
    cred = DefaultAzureCredential()
    managed_identity = cred.credentials[1]
    assert managed_identity._client_id == "uami"


def test_unreachable_authority__falls_through_to_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AZURE_TENANT_ID", "tenant")
    monkeypatch.setenv("AZURE_CLIENT_ID", "client")
    monkeypatch.setenv("AZURE_CLIENT_SECRET", "secret")
    monkeypatch.setattr(
        msal,
        "ConfidentialClientApplication",
        mock.MagicMock(side_effect=requests.ConnectionError("Max retries exceeded")),
    )
    output = f'{{"accessToken": "cli", "expires_on": {int(time.time()) + 3600}}}'
    _patch_cli(monkeypatch, CommandResult(0, output, ""))

    cred = DefaultAzureCredential(exclude_managed_identity_credential=True)

    assert cred.get_token(SCOPE).token == "cli"
