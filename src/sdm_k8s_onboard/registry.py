"""StrongDM registry administration.

This module wraps the ``sdm admin clusters`` commands used to find,
delete and register cluster resources in the registry.
"""

import shutil
import subprocess

from icecream import ic

from sdm_k8s_onboard.exceptions import BinaryNotFoundError, RegistryCommandError
from sdm_k8s_onboard.models import RESOURCE_KIND, Registration

_ERR_SDM_NOT_FOUND = (
    "sdm binary not found. Please install the StrongDM client, log in, and ensure it's in your PATH."
)


class SdmAdmin:
    """Runs ``sdm admin clusters`` subcommands.

    Attributes:
        binary: Path to the sdm binary.
        timeout: Seconds to wait for each command.

    """

    def __init__(self, *, timeout: float, binary: str | None = None) -> None:
        """Locate the sdm binary.

        Args:
            timeout: Seconds to wait for each command.
            binary: Explicit binary path, looked up on PATH when omitted.

        Raises:
            BinaryNotFoundError: If sdm is not found in PATH.

        """
        resolved = binary or shutil.which("sdm")
        if resolved is None:
            raise BinaryNotFoundError(_ERR_SDM_NOT_FOUND)
        self.binary: str = resolved
        self.timeout = timeout

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"SdmAdmin(binary={self.binary!r}, timeout={self.timeout!r})"

    def _run(self, args: list[str], *, trace: bool = True) -> str:
        """Run an ``sdm admin clusters`` subcommand and return its stdout.

        Args:
            args: Arguments following ``sdm admin clusters``.
            trace: Whether to print the command in debug output.

        Raises:
            RegistryCommandError: If the command fails or times out.

        """
        cmd = [self.binary, "admin", "clusters", *args]
        if trace:
            ic(cmd)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=True)
        except FileNotFoundError as err:
            raise BinaryNotFoundError(_ERR_SDM_NOT_FOUND) from err
        except subprocess.TimeoutExpired as err:
            raise RegistryCommandError(f"'sdm admin clusters {args[0]}' timed out after {self.timeout}s") from err
        except subprocess.CalledProcessError as err:
            stderr_msg = err.stderr.strip() if err.stderr else ""
            details = f" - {stderr_msg}" if stderr_msg else ""
            raise RegistryCommandError(
                f"'sdm admin clusters {args[0]}' failed (exit code {err.returncode}){details}"
            ) from err

        return result.stdout

    def show_cluster(self, name: str) -> str:
        """Return the registry listing filtered to an exact resource name."""
        return self._run(["list", "--filter", f"name:{name}"])

    def list_clusters(self, name: str) -> list[str]:
        """List registry resources matching a name.

        Args:
            name: The resource name to filter on.

        Returns:
            Data rows of the listing, without the header line.

        """
        rows = self.show_cluster(name).splitlines()[1:]
        return [row for row in rows if row.strip()]

    def delete_cluster(self, name: str) -> None:
        """Delete the registry resource with the given name."""
        self._run(["delete", name])

    def add_k8s_service(self, registration: Registration) -> None:
        """Register a cluster as a k8s-service resource.

        Args:
            registration: Resource name, endpoint, token and healthcheck
                namespace for the new resource.

        """
        ic(registration)
        self._run(
            [
                "add",
                RESOURCE_KIND,
                "--api-token",
                registration.api_token,
                "--hostname",
                registration.hostname,
                "--port",
                str(registration.port),
                "--healthcheck-namespace",
                registration.healthcheck_namespace,
                registration.name,
            ],
            trace=False,
        )
