from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping, Type, TypeVar

import requests
from azure.core.credentials import TokenCredential
from azure.core.exceptions import DeserializationError
from azure.core.paging import ItemPaged
from pydantic import BaseModel, ValidationError

from .config import ClientConfig
from .exceptions import ManagementApiError
from .policies import BearerTokenAuth, RetryPolicy

logger = logging.getLogger(__name__)
# Bodies go to their own logger so they can be routed separately
body_logger = logging.getLogger(f"{__name__}.body")

M = TypeVar("M", bound=BaseModel)


class ManagementClient:
    """Request pipeline shared by the generated management clients.

    Each request is authorized with a bearer token from ``credential``, sent
    through the :class:`RetryPolicy`, and either deserialized or turned into a
    :class:`ManagementApiError`.
    """

    def __init__(
        self,
        credential: TokenCredential,
        *,
        config: ClientConfig | None = None,
        session: requests.Session | None = None,
        headers: Mapping[str, str] | None = None,
        retry_policy: RetryPolicy | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the client.

        Args:
            credential: Credential that provides bearer tokens.
            config: Client settings. If omitted, built from ``kwargs`` and the
                environment.
            session: ``requests.Session`` to send with. The client closes a
                session only if it created it.
            headers: Headers added to every request.
            retry_policy: Overrides the policy built from ``config``.
        """
        if credential is None:
            raise ValueError("Parameter 'credential' must not be None.")
        self._config = config or ClientConfig(**kwargs)
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._auth = BearerTokenAuth(credential, *self._config.scopes())
        self._retry = retry_policy or RetryPolicy(
            total_retries=self._config.retry_total,
            backoff_factor=self._config.retry_backoff_factor,
            max_backoff=self._config.retry_backoff_max,
        )
        self._headers = {"User-Agent": self._config.user_agent, "Accept": "application/json"}
        self._headers.update(headers or {})

    def __enter__(self):
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def send_request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        expected_status: tuple[int, ...] = (200,),
    ) -> requests.Response:
        """Send a request and return the response if its status is expected.

        Args:
            method: HTTP method.
            url: Absolute URL.
            operation: Name used in errors and logs, e.g. ``"AvailableOperations.list"``.
            params: Query parameters.
            json: JSON body.
            expected_status: Statuses treated as success.

        Raises:
            ManagementApiError: The final response had an unexpected status.
            azure.core.exceptions.ServiceRequestError: The request could not
                be sent after all retries.
            azure.core.exceptions.ClientAuthenticationError: No token could be
                obtained from the credential.
        """

        def _send() -> requests.Response:
            return self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers,
                auth=self._auth,
                timeout=(self._config.connection_timeout, self._config.read_timeout),
            )

        if self._config.logging_enable and json is not None:
            body_logger.debug("%s request body: %s", operation, json)

        response = self._retry.send(_send)
        logger.debug(
            "%s %s %s -> %d", operation, method, response.request.url if response.request else url, response.status_code
        )
        if self._config.logging_enable:
            self._log_response(operation, response)

        if response.status_code not in expected_status:
            raise ManagementApiError.from_response(response, operation)
        return response

    @staticmethod
    def _log_response(operation: str, response: requests.Response) -> None:
        request_headers = dict(response.request.headers) if response.request else {}
        if "Authorization" in request_headers:
            request_headers["Authorization"] = "REDACTED"
        body_logger.debug("%s request headers: %s", operation, request_headers)
        body_logger.debug("%s response headers: %s", operation, dict(response.headers))
        body_logger.debug("%s response body: %s", operation, response.text)

    @staticmethod
    def deserialize(response: requests.Response, model: Type[M]) -> M:
        """Parse a JSON response body into ``model``.

        Raises:
            DeserializationError: The body is not JSON or does not match ``model``.
        """
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as ex:
            raise DeserializationError(
                f"Failed to deserialize {model.__name__}: {ex}"
            ) from ex

    def paged(
        self,
        url: str,
        *,
        operation: str,
        params: Mapping[str, Any] | None = None,
        page_model: Type[M],
    ) -> ItemPaged:
        """Return a lazy iterator over a ``nextLink`` paginated collection.

        The first request goes to ``url`` with ``params``; each following
        request goes to the previous page's ``next_link`` as given, since it
        already carries the query. Nothing is sent until iteration starts,
        and every iteration starts again from the first page.

        Args:
            page_model: Model with ``value`` and ``next_link`` fields.
        """

        def get_next(next_link: str | None = None) -> M:
            if next_link is None:
                response = self.send_request("GET", url, operation=operation, params=params)
            else:
                logger.debug("Fetching next page of %s via nextLink", operation)
                response = self.send_request("GET", next_link, operation=operation)
            return self.deserialize(response, page_model)

        def extract_data(page: M) -> tuple[str | None, Iterator[Any]]:
            return page.next_link or None, iter(page.value or [])

        return ItemPaged(get_next, extract_data)
