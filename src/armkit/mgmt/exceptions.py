from __future__ import annotations

from typing import Any

import requests
from azure.core.exceptions import AzureError


class ManagementApiError(AzureError):
    """A management API call returned a non-success status.

    Attributes:
        status_code: HTTP status of the final response.
        code: Provider error code from the body, if any.
        error_message: Provider error message from the body, if any.
        body: Parsed JSON body, or the raw text when it is not JSON.
        response: The ``requests.Response``.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: str | None = None,
        error_message: str | None = None,
        body: Any = None,
        response: requests.Response | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.error_message = error_message
        self.body = body
        self.response = response

    @classmethod
    def from_response(cls, response: requests.Response, operation: str) -> "ManagementApiError":
        """Build the error from an ARM response.

        ARM bodies look like ``{"error": {"code": ..., "message": ...}}``; some
        providers omit the ``error`` envelope.
        """
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        code = error_message = None
        if isinstance(body, dict):
            detail = body.get("error", body)
            if isinstance(detail, dict):
                code = detail.get("code")
                error_message = detail.get("message")

        message = f"{operation}: Operation returned status {response.status_code}"
        if code or error_message:
            message += f" ({code or 'Unknown'}) {error_message or ''}".rstrip()
        return cls(
            message,
            status_code=response.status_code,
            code=code,
            error_message=error_message,
            body=body,
            response=response,
        )
