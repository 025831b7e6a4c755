from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, FrozenSet

import requests
from azure.core.credentials import TokenCredential
from azure.core.exceptions import ServiceRequestError
from requests.auth import AuthBase

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES: FrozenSet[int] = frozenset({408, 429, 500, 502, 503, 504})


class BearerTokenAuth(AuthBase):
    """Sets ``Authorization: Bearer <token>`` from a credential on every request.

    The credential is asked for a token per request; credentials cache tokens,
    so this is cheap until the cached token nears expiry.
    """

    def __init__(self, credential: TokenCredential, *scopes: str) -> None:
        if not scopes:
            raise ValueError("BearerTokenAuth requires at least one scope")
        self._credential = credential
        self._scopes = scopes

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        if not request.url.lower().startswith("https://"):
            raise ServiceRequestError(
                "Bearer token authentication is not permitted for non-TLS protected (non-https) URLs."
            )
        token = self._credential.get_token(*self._scopes)
        request.headers["Authorization"] = f"Bearer {token.token}"
        return request


@dataclass
class RetryPolicy:
    """Retries transient failures with exponential backoff.

    A response whose status is in ``status_codes`` is retried, honouring a
    ``Retry-After`` header in seconds. Connection errors and timeouts are
    retried the same way. After ``total_retries`` retries the last response is
    returned, or the last connection error raised as ``ServiceRequestError``.
    """

    total_retries: int = 3
    backoff_factor: float = 0.8
    max_backoff: float = 120.0
    status_codes: FrozenSet[int] = RETRY_STATUS_CODES
    sleep: Callable[[float], None] = time.sleep

    def delay(self, attempt: int, response: requests.Response | None = None) -> float:
        retry_after = response.headers.get("Retry-After") if response is not None else None
        if retry_after:
            try:
                return min(float(retry_after), self.max_backoff)
            except ValueError:
                pass  # HTTP-date form; fall back to backoff
        delay = self.backoff_factor * (2 ** (attempt - 1))
        delay += random.uniform(0, 0.5)  # jitter
        return min(delay, self.max_backoff)

    def send(self, send: Callable[[], requests.Response]) -> requests.Response:
        attempts = self.total_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = send()
            except (requests.ConnectionError, requests.Timeout) as ex:
                if attempt == attempts:
                    raise ServiceRequestError(
                        f"Request failed after {attempts} attempts: {ex}", error=ex
                    ) from ex
                delay = self.delay(attempt)
                logger.warning(
                    "Request failed (%s). Retrying in %.1f seconds (attempt %d/%d)",
                    type(ex).__name__,
                    delay,
                    attempt,
                    attempts,
                )
                self.sleep(delay)
                continue

            if response.status_code not in self.status_codes or attempt == attempts:
                return response

            delay = self.delay(attempt, response)
            logger.warning(
                "Management API %s error. Retrying in %.1f seconds (attempt %d/%d)",
                response.status_code,
                delay,
                attempt,
                attempts,
            )
            response.close()
            self.sleep(delay)
        raise RuntimeError("Unreachable")
