"""Cluster provisioning.

This module applies the onboarding manifests to the cluster. Every apply
is a create-or-update, so running it against an already provisioned
cluster succeeds and leaves the objects matching their manifests.
"""

from collections.abc import Callable
from typing import Any

from icecream import ic
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from sdm_k8s_onboard import console
from sdm_k8s_onboard.exceptions import ProvisioningError
from sdm_k8s_onboard.manifests import Manifest, build_manifests
from sdm_k8s_onboard.models import OnboardSettings

_HTTP_CONFLICT = 409


class Provisioner:
    """Applies manifests with the typed Kubernetes APIs.

    Attributes:
        core_api: CoreV1Api for namespaces, service accounts and secrets.
        rbac_api: RbacAuthorizationV1Api for the cluster role and binding.
        timeout: Seconds to wait for each API request.

    """

    def __init__(self, api_client: client.ApiClient, *, timeout: float) -> None:
        self.core_api = client.CoreV1Api(api_client)
        self.rbac_api = client.RbacAuthorizationV1Api(api_client)
        self.timeout = timeout

    def _operations(self, kind: str) -> tuple[Callable[..., Any], Callable[..., Any], bool]:
        """Return the create and patch calls for a kind, and whether it is namespaced."""
        match kind:
            case "Namespace":
                return self.core_api.create_namespace, self.core_api.patch_namespace, False
            case "ServiceAccount":
                return (
                    self.core_api.create_namespaced_service_account,
                    self.core_api.patch_namespaced_service_account,
                    True,
                )
            case "ClusterRole":
                return self.rbac_api.create_cluster_role, self.rbac_api.patch_cluster_role, False
            case "ClusterRoleBinding":
                return self.rbac_api.create_cluster_role_binding, self.rbac_api.patch_cluster_role_binding, False
            case "Secret":
                return self.core_api.create_namespaced_secret, self.core_api.patch_namespaced_secret, True
            case _:
                raise ValueError(f"Unsupported manifest kind: {kind}")

    def apply(self, manifest: Manifest) -> bool:
        """Create an object, or patch it if it already exists.

        Args:
            manifest: The object manifest.

        Returns:
            True if the object was created, False if an existing one was updated.

        Raises:
            ProvisioningError: If the API server rejects the request or
                cannot be reached.

        """
        kind = manifest["kind"]
        name = manifest["metadata"]["name"]
        create, patch, namespaced = self._operations(kind)
        scope: dict[str, str] = {"namespace": manifest["metadata"]["namespace"]} if namespaced else {}
        ic(kind, name, scope)

        try:
            try:
                create(body=manifest, _request_timeout=self.timeout, **scope)
                return True
            except ApiException as e:
                if e.status != _HTTP_CONFLICT:
                    raise
            patch(name=name, body=manifest, _request_timeout=self.timeout, **scope)
            return False
        except ApiException as e:
            raise ProvisioningError(f"Failed to apply {kind} '{name}': {e.status} {e.reason}") from e
        except MaxRetryError as e:
            raise ProvisioningError(
                f"Failed to connect to the Kubernetes cluster while applying {kind} '{name}': {e.reason}"
            ) from e

    def provision(self, settings: OnboardSettings) -> None:
        """Apply the namespace, service account, role, binding and token secret in order.

        Stops at the first failure; objects applied before it are kept.
        """
        for manifest in build_manifests(settings):
            label = f"{manifest['kind']} {console.highlight(manifest['metadata']['name'])}"
            with console.spinner(f"Applying {manifest['kind']}..."):
                created = self.apply(manifest)
            console.success(f"{label} {'created' if created else 'configured'}")
