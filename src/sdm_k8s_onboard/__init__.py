"""sdm-k8s-onboard: Register a Kubernetes cluster in StrongDM.

This package provisions a read-only discovery service account in the
cluster of a kubeconfig context and registers that cluster as a
k8s-service resource in StrongDM.

Example usage:
    from sdm_k8s_onboard import Onboarding, OnboardSettings

    with Onboarding(OnboardSettings(namespace="sdm")) as onboarding:
        onboarding.run()
"""

__version__ = "0.1.0"

from sdm_k8s_onboard.cli import cli
from sdm_k8s_onboard.cluster import Cluster
from sdm_k8s_onboard.exceptions import (
    BinaryNotFoundError,
    KubeconfigError,
    OnboardError,
    ProvisioningError,
    RegistryCommandError,
    TokenNotReadyError,
    TokenVerificationError,
    UnknownPortError,
)
from sdm_k8s_onboard.models import OnboardSettings, Stage
from sdm_k8s_onboard.onboarding import Onboarding
from sdm_k8s_onboard.registry import SdmAdmin

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Cluster",
    "Onboarding",
    "OnboardSettings",
    "SdmAdmin",
    "Stage",
    # Exceptions
    "OnboardError",
    "BinaryNotFoundError",
    "KubeconfigError",
    "ProvisioningError",
    "RegistryCommandError",
    "TokenNotReadyError",
    "TokenVerificationError",
    "UnknownPortError",
]
