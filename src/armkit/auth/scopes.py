from __future__ import annotations

import re
from typing import Final, Iterable
from urllib.parse import urlparse

ARM_DEFAULT_SCOPE: Final[str] = "https://management.azure.com/.default"
GRAPH_DEFAULT_SCOPE: Final[str] = "https://graph.microsoft.com/.default"
DEFAULT_AUTHORITY_HOST: Final[str] = "https://login.microsoftonline.com"

_DEFAULT_SUFFIX: Final[str] = "/.default"
_VALID_SCOPE = re.compile(r"^[0-9a-zA-Z\-_.:/]+$")
_VALID_TENANT = re.compile(r"^[0-9a-zA-Z\-.]+$")


def authority_from_url(url: str) -> str:
    """Return the URL authority (scheme + host).

    Args:
        url: Absolute URL (e.g., "https://management.azure.com/subscriptions").

    Returns:
        The "<scheme>://<host>" portion of the URL.

    Raises:
        ValueError: If ``url`` is not absolute or lacks a host.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("url must be an absolute URL")
    return f"{parsed.scheme}://{parsed.netloc}"


def scope_from_resource(resource_url: str) -> str:
    """Return the ``/.default`` scope for a resource URL."""
    return f"{authority_from_url(resource_url)}{_DEFAULT_SUFFIX}"


def resource_from_scope(scope: str) -> str:
    """Strip ``/.default`` from a scope, as v1 endpoints (CLI, IMDS) expect a resource."""
    if scope.endswith(_DEFAULT_SUFFIX):
        return scope[: -len(_DEFAULT_SUFFIX)]
    return scope


def validate_scope(scope: str) -> str:
    """Reject scopes that could smuggle arguments into a subprocess command line."""
    if not _VALID_SCOPE.match(scope):
        raise ValueError(
            "Invalid scope. A scope may only contain alphanumerics and the characters '-', '_', '.', ':', '/'"
        )
    return scope


def validate_tenant_id(tenant_id: str) -> str:
    if not _VALID_TENANT.match(tenant_id):
        raise ValueError(
            "Invalid tenant id. A tenant id may only contain alphanumerics and the characters '-' and '.'"
        )
    return tenant_id


def single_scope(scopes: Iterable[str], credential_name: str) -> str:
    """Return the only scope in ``scopes``.

    Managed identity and the CLI accept one resource per request.

    Raises:
        ValueError: If zero or several scopes were given.
    """
    scopes = list(scopes)
    if len(scopes) != 1:
        raise ValueError(f"{credential_name} requires exactly one scope per token request")
    return scopes[0]


def normalize_authority(authority: str | None) -> str:
    """Return an ``https://host`` authority without trailing slash.

    Args:
        authority: Authority host with or without scheme. ``None`` selects the
            public cloud.

    Raises:
        ValueError: If the authority uses a scheme other than https.
    """
    if not authority:
        return DEFAULT_AUTHORITY_HOST
    authority = authority.strip().rstrip("/")
    if "://" not in authority:
        return f"https://{authority}"
    if not authority.startswith("https://"):
        raise ValueError("'authority' must use the 'https' scheme")
    return authority


def tenant_authority(authority: str | None, tenant_id: str) -> str:
    return f"{normalize_authority(authority)}/{validate_tenant_id(tenant_id)}"
