"""Kubernetes manifests for the onboarding service account.

Each function returns a plain manifest dictionary, the same shape as the
YAML documents ``kubectl apply`` accepts. The Kubernetes client takes
these dictionaries directly as request bodies.
"""

from typing import Any

import yaml

from sdm_k8s_onboard.models import OnboardSettings

RBAC_API_GROUP = "rbac.authorization.k8s.io"
TOKEN_SECRET_TYPE = "kubernetes.io/service-account-token"
SERVICE_ACCOUNT_ANNOTATION = "kubernetes.io/service-account.name"

# Read-only access to what the registry needs for RBAC discovery
_READ_VERBS = ["list", "get", "watch"]
DISCOVERY_RULES: list[dict[str, list[str]]] = [
    {"apiGroups": [""], "resources": ["namespaces", "serviceaccounts"], "verbs": _READ_VERBS},
    {
        "apiGroups": [RBAC_API_GROUP],
        "resources": ["roles", "rolebindings", "clusterroles", "clusterrolebindings"],
        "verbs": _READ_VERBS,
    },
]

Manifest = dict[str, Any]


def namespace_manifest(settings: OnboardSettings) -> Manifest:
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": settings.namespace}}


def service_account_manifest(settings: OnboardSettings) -> Manifest:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {"name": settings.service_account, "namespace": settings.namespace},
    }


def cluster_role_manifest(settings: OnboardSettings) -> Manifest:
    return {
        "apiVersion": f"{RBAC_API_GROUP}/v1",
        "kind": "ClusterRole",
        "metadata": {"name": settings.role_name},
        "rules": [{key: list(values) for key, values in rule.items()} for rule in DISCOVERY_RULES],
    }


def cluster_role_binding_manifest(settings: OnboardSettings) -> Manifest:
    return {
        "apiVersion": f"{RBAC_API_GROUP}/v1",
        "kind": "ClusterRoleBinding",
        "metadata": {"name": settings.binding_name},
        "roleRef": {"apiGroup": RBAC_API_GROUP, "kind": "ClusterRole", "name": settings.role_name},
        "subjects": [
            {"kind": "ServiceAccount", "name": settings.service_account, "namespace": settings.namespace}
        ],
    }


def token_secret_manifest(settings: OnboardSettings) -> Manifest:
    """Build the secret the token controller fills with a long-lived token.

    Args:
        settings: Onboarding names.

    Returns:
        A ``kubernetes.io/service-account-token`` Secret annotated with
        the service account it belongs to.

    """
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": settings.secret_name,
            "namespace": settings.namespace,
            "annotations": {SERVICE_ACCOUNT_ANNOTATION: settings.service_account},
        },
        "type": TOKEN_SECRET_TYPE,
    }


def build_manifests(settings: OnboardSettings) -> list[Manifest]:
    """Return all manifests in the order they must be applied.

    The namespace comes first and the binding follows both the account
    and the role it references.
    """
    return [
        namespace_manifest(settings),
        service_account_manifest(settings),
        cluster_role_manifest(settings),
        cluster_role_binding_manifest(settings),
        token_secret_manifest(settings),
    ]


def render_manifests(settings: OnboardSettings) -> str:
    """Render all manifests as a multi-document YAML stream."""
    return yaml.safe_dump_all(build_manifests(settings), sort_keys=False, explicit_start=True)
