from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Iterator

import pytest
from azure.core.credentials import AccessToken

from armkit.auth.certificate import generate_self_signed_certificate
from armkit.auth.credentials.base import CredentialBase
from armkit.auth.exceptions import AuthenticationFailedError, CredentialUnavailableError


@pytest.fixture(autouse=True)
def clear_azure_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove environment variables to prevent cross-test leakage.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    to_clear = [k for k in os.environ.keys()]
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


@pytest.fixture(scope="session")
def pem_certificate(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """A PEM file holding a self-signed certificate and its unencrypted key."""
    path = tmp_path_factory.mktemp("certs") / "sp.pem"
    generate_self_signed_certificate("armkit-test", combined_pem_path=path)
    return path


class FakeCredential(CredentialBase):
    """Credential whose exchange outcome is scripted.

    Args:
        outcome: An :class:`AccessToken` to return, or an exception to raise.
    """

    def __init__(self, outcome: AccessToken | Exception | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.outcome = outcome or AccessToken("fake-token", int(time.time()) + 3600)
        self.calls = 0
        self.closed = False

    def _request_token(self, scopes, *, claims, timeout) -> AccessToken:
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_credential() -> type[FakeCredential]:
    """The scripted credential class, for building chains in tests."""
    return FakeCredential


@pytest.fixture()
def unavailable() -> Any:
    def _make(message: str = "not configured") -> FakeCredential:
        return FakeCredential(CredentialUnavailableError(message=message))

    return _make


@pytest.fixture()
def failing() -> Any:
    def _make(message: str = "rejected") -> FakeCredential:
        return FakeCredential(AuthenticationFailedError(message=message))

    return _make
