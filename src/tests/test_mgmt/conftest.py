from __future__ import annotations

import json
import os
import time
from typing import Any, Callable, Iterator

import pytest
import requests
from azure.core.credentials import AccessToken


@pytest.fixture(autouse=True)
def clear_azure_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove environment variables to prevent cross-test leakage."""
    to_clear = [k for k in os.environ.keys()]
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


class StaticCredential:
    """Returns the same token and records the scopes it was asked for."""

    def __init__(self, token: str = "mgmt-token") -> None:
        self.token = token
        self.requested: list[tuple[str, ...]] = []

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        self.requested.append(scopes)
        return AccessToken(self.token, int(time.time()) + 3600)


Reply = requests.Response | Exception


class ScriptedSession(requests.Session):
    """A session that answers from a script instead of the network.

    Requests are prepared as usual, so auth hooks and query encoding run; the
    prepared requests are kept in ``sent``.
    """

    def __init__(self, replies: list[Reply] | Callable[[requests.PreparedRequest], Reply]):
        super().__init__()
        self.replies = replies
        self.sent: list[requests.PreparedRequest] = []
        self.request_kwargs: list[dict[str, Any]] = []

    def request(self, method, url, params=None, json=None, headers=None, auth=None, timeout=None, **kwargs):
        prepared = requests.Request(
            method, url, params=params, json=json, headers=headers, auth=auth
        ).prepare()
        self.sent.append(prepared)
        self.request_kwargs.append({"timeout": timeout})
        if callable(self.replies):
            reply = self.replies(prepared)
        else:
            reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        reply.request = prepared
        reply.url = prepared.url
        return reply


def make_response(status: int = 200, body: Any = None, headers: dict[str, str] | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content_consumed = True
    if body is not None:
        response._content = body if isinstance(body, bytes) else json.dumps(body).encode()
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    response.headers.update(headers or {})
    return response


@pytest.fixture()
def credential() -> StaticCredential:
    return StaticCredential()


@pytest.fixture()
def respond() -> Callable[..., requests.Response]:
    """Builds a ``requests.Response`` from a status, JSON body and headers."""
    return make_response


@pytest.fixture()
def scripted_session() -> type[ScriptedSession]:
    return ScriptedSession
