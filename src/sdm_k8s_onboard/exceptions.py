"""Custom exceptions for sdm-k8s-onboard.

This module defines the exception hierarchy used throughout the application
to provide meaningful error messages and proper error handling.
"""


class OnboardError(Exception):
    """Base exception for all sdm-k8s-onboard errors.

    All custom exceptions in this package inherit from this class,
    allowing the CLI to report any onboarding failure with a single
    except clause.
    """

    pass


class KubeconfigError(OnboardError):
    """Raised when the local kubeconfig cannot describe the target cluster.

    This can occur when:
    - The kubeconfig is invalid or missing
    - There is no current context
    - The context points at a cluster that has no entry or no server address
    """

    pass


class UnknownPortError(OnboardError):
    """Raised when the API server port cannot be derived from its address.

    Only http and https have a well-known default port; any other scheme
    must carry an explicit port in the kubeconfig server URL.
    """

    pass


class BinaryNotFoundError(OnboardError):
    """Raised when the sdm binary is not found in the system PATH."""

    pass


class RegistryCommandError(OnboardError):
    """Raised when an ``sdm admin`` command fails or times out."""

    pass


class ProvisioningError(OnboardError):
    """Raised when applying a Kubernetes object fails.

    Objects applied before the failure are left in place.
    """

    pass


class TokenNotReadyError(OnboardError):
    """Raised when the service account token secret has no token yet.

    This typically means:
    - The secret was not created
    - The token controller has not populated the secret yet
    """

    pass


class TokenVerificationError(OnboardError):
    """Raised when the service account token fails the health check.

    Attributes:
        status_code: HTTP status returned by the API server, 0 when no
            response was received.
        body: Response body (or connection error text) for diagnostics.

    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"The token does not work. HTTP response code: {status_code}")
        self.status_code = status_code
        self.body = body
