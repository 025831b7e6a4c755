from .base import CredentialBase
from .chained import ChainedTokenCredential
from .cli import AzureCliCredential, CommandResult, CommandRunner, SubprocessRunner
from .client_certificate import CertificateCredential
from .client_secret import ClientSecretCredential
from .default import DefaultAzureCredential
from .device_code import DeviceCodeCredential
from .environment import EnvironmentCredential
from .interactive import InteractiveBrowserCredential
from .managed_identity import ManagedIdentityCredential
from .msal_base import AuthenticationRecord
from .username_password import UsernamePasswordCredential

__all__ = [
    "AuthenticationRecord",
    "AzureCliCredential",
    "CertificateCredential",
    "ChainedTokenCredential",
    "ClientSecretCredential",
    "CommandResult",
    "CommandRunner",
    "CredentialBase",
    "DefaultAzureCredential",
    "DeviceCodeCredential",
    "EnvironmentCredential",
    "InteractiveBrowserCredential",
    "ManagedIdentityCredential",
    "SubprocessRunner",
    "UsernamePasswordCredential",
]
