"""Credentials for Azure Resource Manager and other Entra ID protected APIs.

Public API:
- get_credential() → TokenCredential
- AuthConfig (settings), Strategy (enum of auth strategies)
- DefaultAzureCredential, ChainedTokenCredential and the individual credentials
- CredentialUnavailableError, AuthenticationFailedError, CredentialChainError
- TokenCache
- ARM_DEFAULT_SCOPE, GRAPH_DEFAULT_SCOPE, scope_from_resource() (scope helpers)
"""

from .config import AuthConfig, Strategy
from .credentials import (
    AuthenticationRecord,
    AzureCliCredential,
    CertificateCredential,
    ChainedTokenCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    DeviceCodeCredential,
    EnvironmentCredential,
    InteractiveBrowserCredential,
    ManagedIdentityCredential,
    UsernamePasswordCredential,
)
from .exceptions import (
    AuthenticationFailedError,
    CredentialChainError,
    CredentialChainUnavailableError,
    CredentialUnavailableError,
)
from .factory import get_credential
from .scopes import ARM_DEFAULT_SCOPE, GRAPH_DEFAULT_SCOPE, scope_from_resource
from .token_cache import TokenCache

__all__ = [
    "AuthConfig",
    "Strategy",
    "get_credential",
    "AuthenticationRecord",
    "AzureCliCredential",
    "CertificateCredential",
    "ChainedTokenCredential",
    "ClientSecretCredential",
    "DefaultAzureCredential",
    "DeviceCodeCredential",
    "EnvironmentCredential",
    "InteractiveBrowserCredential",
    "ManagedIdentityCredential",
    "UsernamePasswordCredential",
    "AuthenticationFailedError",
    "CredentialChainError",
    "CredentialChainUnavailableError",
    "CredentialUnavailableError",
    "TokenCache",
    "ARM_DEFAULT_SCOPE",
    "GRAPH_DEFAULT_SCOPE",
    "scope_from_resource",
]
