"""Data models for sdm-k8s-onboard.

This module provides type-safe data structures for the values derived
while onboarding a cluster.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

DEFAULT_NAMESPACE = "default"
DEFAULT_SERVICE_ACCOUNT = "cluster-service-account"
RESOURCE_KIND = "k8s-service"


class Stage(str, Enum):
    """Progress of an onboarding run, in execution order."""

    START = "start"
    RESOLVED = "resolved"
    CONFLICT_CHECKED = "conflict-checked"
    CONFIRMED = "confirmed"
    PROVISIONED = "provisioned"
    VERIFIED = "verified"
    REGISTERED = "registered"
    DONE = "done"


class ClusterConnection(NamedTuple):
    """Connection facts read from the local kubeconfig.

    Attributes:
        context: The kubeconfig context name.
        cluster: The cluster name bound to the context.
        server: The API server URL (scheme://host[:port]).

    """

    context: str
    cluster: str
    server: str


class ClusterEndpoint(NamedTuple):
    """Hostname and port the registry uses to reach the API server."""

    hostname: str
    port: int


@dataclass(frozen=True, slots=True)
class OnboardSettings:
    """Operator-configurable names for the objects being created.

    Attributes:
        namespace: Namespace for the service account and its secret.
        service_account: Service account name, also the prefix of the
            cluster role, binding and secret names.
        resource_name: Registry resource name, None to derive it from
            the cluster name.

    """

    namespace: str = DEFAULT_NAMESPACE
    service_account: str = DEFAULT_SERVICE_ACCOUNT
    resource_name: str | None = None

    @property
    def role_name(self) -> str:
        return f"{self.service_account}-role"

    @property
    def binding_name(self) -> str:
        return f"{self.service_account}-cluster-role-binding"

    @property
    def secret_name(self) -> str:
        return f"{self.service_account}-secret"


@dataclass(frozen=True, slots=True)
class Registration:
    """Parameters of the k8s-service resource added to the registry."""

    name: str
    hostname: str
    port: int
    api_token: str = field(repr=False)
    healthcheck_namespace: str = DEFAULT_NAMESPACE
