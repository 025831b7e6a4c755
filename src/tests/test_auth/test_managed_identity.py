from __future__ import annotations

import time
from unittest import mock

import pytest
import requests

from armkit.auth.credentials import ManagedIdentityCredential
from armkit.auth.credentials.managed_identity import IMDS_ENDPOINT
from armkit.auth.exceptions import AuthenticationFailedError, CredentialUnavailableError

SCOPE = "https://management.azure.com/.default"


def _response(status: int, body: dict | None = None, text: str = "") -> mock.MagicMock:
    response = mock.MagicMock(spec=requests.Response)
    response.status_code = status
    response.ok = status < 400
    response.text = text
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


def test_imds__requests_resource_with_metadata_header() -> None:
    session = mock.MagicMock(spec=requests.Session)
    expires_on = int(time.time()) + 3600
    session.get.return_value = _response(200, {"access_token": "mi", "expires_on": str(expires_on)})

    token = ManagedIdentityCredential(client_id="uami", session=session).get_token(SCOPE)

    assert token.token == "mi"
    assert token.expires_on == expires_on
    args, kwargs = session.get.call_args
    assert args == (IMDS_ENDPOINT,)
    assert kwargs["headers"] == {"Metadata": "true"}
    assert kwargs["params"] == {
        "api-version": "2018-02-01",
        "resource": "https://management.azure.com",
        "client_id": "uami",
    }


def test_imds__expires_in_fallback() -> None:
    session = mock.MagicMock(spec=requests.Session)
    session.get.return_value = _response(200, {"access_token": "mi", "expires_in": "3600"})

    token = ManagedIdentityCredential(session=session).get_token(SCOPE)

    assert token.expires_on > time.time() + 3000


def test_imds__unreachable_is_unavailable() -> None:
    session = mock.MagicMock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(CredentialUnavailableError, match="no response from the IMDS endpoint"):
        ManagedIdentityCredential(session=session).get_token(SCOPE)


def test_imds__400_is_unavailable() -> None:
    session = mock.MagicMock(spec=requests.Session)
    session.get.return_value = _response(400, {"error_description": "Identity not found"})

    with pytest.raises(CredentialUnavailableError, match="Identity not found"):
        ManagedIdentityCredential(session=session).get_token(SCOPE)


def test_imds__server_error_is_failure() -> None:
    session = mock.MagicMock(spec=requests.Session)
    session.get.return_value = _response(500, None, text="boom")

    with pytest.raises(AuthenticationFailedError, match=r"\(500\): boom"):
        ManagedIdentityCredential(session=session).get_token(SCOPE)


def test_malformed_token_response__is_failure() -> None:
    session = mock.MagicMock(spec=requests.Session)
    session.get.return_value = _response(200, {"token": "x"})

    with pytest.raises(AuthenticationFailedError, match="unexpected token response"):
        ManagedIdentityCredential(session=session).get_token(SCOPE)


def test_app_service__uses_identity_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IDENTITY_ENDPOINT", "http://127.0.0.1:41741/msi/token")
    monkeypatch.setenv("IDENTITY_HEADER", "header-secret")
    session = mock.MagicMock(spec=requests.Session)
    session.get.return_value = _response(
        200, {"access_token": "app", "expires_on": str(int(time.time()) + 3600)}
    )

    token = ManagedIdentityCredential(session=session).get_token(SCOPE)

    assert token.token == "app"
    args, kwargs = session.get.call_args
    assert args == ("http://127.0.0.1:41741/msi/token",)
    assert kwargs["headers"] == {"X-IDENTITY-HEADER": "header-secret"}
    assert kwargs["params"]["api-version"] == "2019-08-01"


def test_rejects_multiple_scopes() -> None:
    cred = ManagedIdentityCredential(session=mock.MagicMock(spec=requests.Session))
    with pytest.raises(ValueError, match="exactly one scope"):
        cred.get_token(SCOPE, "https://graph.microsoft.com/.default")


def test_close__only_owned_session() -> None:
    session = mock.MagicMock(spec=requests.Session)
    ManagedIdentityCredential(session=session).close()
    session.close.assert_not_called()
