from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, Sequence

from azure.core.credentials import AccessToken

from ..exceptions import AuthenticationFailedError, CredentialUnavailableError
from ..scopes import resource_from_scope, single_scope, validate_scope, validate_tenant_id
from .base import CredentialBase

logger = logging.getLogger(__name__)

CLI_NOT_FOUND = "Azure CLI not found on path"
NOT_SIGNED_IN = "Please run 'az login' to set up an account"
DEFAULT_PROCESS_TIMEOUT = 10


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    """Runs a command and returns its output.

    Implementations raise ``FileNotFoundError`` when the executable is
    missing and ``subprocess.TimeoutExpired`` when ``timeout`` elapses.
    """

    def run(self, args: Sequence[str], timeout: float) -> CommandResult: ...


class SubprocessRunner:
    """Runs commands in a child process."""

    def run(self, args: Sequence[str], timeout: float) -> CommandResult:
        executable = shutil.which(args[0])
        if executable is None:
            raise FileNotFoundError(args[0])
        proc = subprocess.run(
            [executable, *args[1:]],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
        return CommandResult(proc.returncode, proc.stdout, proc.stderr)


def _sanitize(output: str) -> str:
    """Drop anything that looks like a token from CLI output before it reaches an error message."""
    return re.sub(r'"accessToken":\s*"[^"]*"', '"accessToken": "****"', output).strip()


def parse_token(output: str) -> AccessToken | None:
    """Parse ``az account get-access-token`` JSON output.

    Newer CLI versions emit ``expires_on`` (POSIX timestamp); older ones only
    ``expiresOn`` in local time.
    """
    try:
        data = json.loads(output)
        token = data["accessToken"]
        if "expires_on" in data:
            return AccessToken(token, int(data["expires_on"]))
        parsed = datetime.strptime(data["expiresOn"], "%Y-%m-%d %H:%M:%S.%f")
        return AccessToken(token, int(parsed.timestamp()))
    except (KeyError, ValueError, TypeError):
        return None


class AzureCliCredential(CredentialBase):
    """Authenticates with the identity currently signed in to the Azure CLI.

    Args:
        tenant_id: Tenant to request the token from, instead of the CLI's
            default tenant.
        process_timeout: Seconds to wait for the CLI process.
        runner: Runs the CLI. Defaults to :class:`SubprocessRunner`.
    """

    def __init__(
        self,
        *,
        tenant_id: str | None = None,
        process_timeout: float = DEFAULT_PROCESS_TIMEOUT,
        runner: CommandRunner | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(cache=kwargs.pop("cache", None))
        if tenant_id:
            validate_tenant_id(tenant_id)
        self._tenant_id = tenant_id
        self._process_timeout = process_timeout
        self._runner = runner or SubprocessRunner()

    def _request_token(self, scopes, *, claims, timeout) -> AccessToken:
        if claims:
            raise CredentialUnavailableError(
                message=f"The Azure CLI cannot satisfy a claims challenge. Run 'az login --claims-challenge {claims}'"
            )
        scope = validate_scope(single_scope(scopes, type(self).__name__))
        args = [
            "az",
            "account",
            "get-access-token",
            "--output",
            "json",
            "--resource",
            resource_from_scope(scope),
        ]
        if self._tenant_id:
            args += ["--tenant", self._tenant_id]

        result = self._run(args, timeout if timeout is not None else self._process_timeout)
        token = parse_token(result.stdout)
        if token is None:
            raise AuthenticationFailedError(
                message=f"Unexpected output from Azure CLI: '{_sanitize(result.stdout)}'"
            )
        return token

    def _run(self, args: list[str], timeout: float) -> CommandResult:
        try:
            result = self._runner.run(args, timeout)
        except FileNotFoundError as ex:
            raise CredentialUnavailableError(message=CLI_NOT_FOUND) from ex
        except subprocess.TimeoutExpired as ex:
            raise CredentialUnavailableError(
                message=f"Timed out waiting for Azure CLI after {timeout} seconds"
            ) from ex
        except OSError as ex:
            raise CredentialUnavailableError(message=f"Failed to invoke the Azure CLI: {ex}") from ex

        if result.returncode == 0:
            return result

        stderr = _sanitize(result.stderr)
        if result.returncode == 127 or stderr.startswith("'az' is not recognized"):
            raise CredentialUnavailableError(message=CLI_NOT_FOUND)
        if "az login" in stderr or "az account set" in stderr:
            raise CredentialUnavailableError(message=NOT_SIGNED_IN)
        logger.debug("Azure CLI exited with %d", result.returncode)
        raise AuthenticationFailedError(message=stderr or "Failed to invoke the Azure CLI")
