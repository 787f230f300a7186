"""Kubernetes cluster connection utilities.

This module resolves which cluster the onboarding run targets: the
kubeconfig context, the cluster bound to it and the API server address,
plus the values derived from them for the registry.
"""

import re
from typing import Any
from urllib.parse import urlparse

import click
import questionary
from icecream import ic
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from sdm_k8s_onboard import console
from sdm_k8s_onboard.exceptions import KubeconfigError, UnknownPortError
from sdm_k8s_onboard.models import ClusterConnection, ClusterEndpoint
from sdm_k8s_onboard.styles import POINTER, PROMPT_STYLE, QMARK

_DEFAULT_PORTS = {"https": 443, "http": 80}
_RESOURCE_NAME_INVALID = re.compile(r"[^A-Za-z0-9]")


def default_resource_name(cluster: str) -> str:
    """Derive a registry resource name from a cluster name.

    Every character outside ``[A-Za-z0-9]`` is replaced with ``-``.

    Args:
        cluster: The kubeconfig cluster name.

    Returns:
        The sanitized name, same length as the input.

    """
    return _RESOURCE_NAME_INVALID.sub("-", cluster)


def parse_server_address(server: str) -> ClusterEndpoint:
    """Split an API server URL into hostname and port.

    The port is the explicit one when present, otherwise the default
    port of the scheme (443 for https, 80 for http).

    Args:
        server: The API server URL, e.g. ``https://127.0.0.1:6443``.

    Returns:
        ClusterEndpoint with the hostname and port.

    Raises:
        KubeconfigError: If the address has no host or an invalid port.
        UnknownPortError: If there is no explicit port and the scheme has
            no default port.

    """
    parsed = urlparse(server)
    try:
        explicit_port = parsed.port
    except ValueError as e:
        raise KubeconfigError(f"Invalid port in cluster server address '{server}'") from e

    host = parsed.netloc.rpartition("@")[2]
    if explicit_port is not None:
        host = host.rpartition(":")[0]
    host = host.rstrip(":").strip("[]")
    if not host:
        raise KubeconfigError(f"Cluster server address '{server}' has no hostname")

    if explicit_port is not None:
        return ClusterEndpoint(hostname=host, port=explicit_port)

    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise UnknownPortError(
            f"Cannot determine the port of '{server}': scheme '{parsed.scheme}' has no default port. "
            "Add an explicit port to the cluster server address in your kubeconfig."
        )
    return ClusterEndpoint(hostname=host, port=_DEFAULT_PORTS[scheme])


class Cluster:
    """The Kubernetes cluster being onboarded.

    Attributes:
        connection: Context, cluster name and API server address.
        api_client: Kubernetes API client authenticated with the
            operator's kubeconfig credentials for that context.

    """

    def __init__(self, connection: ClusterConnection, api_client: client.ApiClient) -> None:
        self.connection = connection
        self.api_client = api_client

    @classmethod
    def from_kubeconfig(cls, *, select_context: bool) -> "Cluster":
        """Build a Cluster from the local kubeconfig.

        Args:
            select_context: If True, prompt user to select a context.
                           If False, use the current context.

        Returns:
            A Cluster bound to the chosen context.

        Raises:
            KubeconfigError: If the kubeconfig does not describe the cluster.
            click.Abort: If user cancels context selection.

        """
        context = cls._set_context(select_context=select_context)
        cluster_name = context.get("context", {}).get("cluster")
        if not cluster_name:
            raise KubeconfigError(f"Context '{context['name']}' does not reference a cluster")

        configuration = client.Configuration()
        try:
            config.load_kube_config(context=context["name"], client_configuration=configuration)
        except ConfigException as e:
            raise KubeconfigError(f"Cannot load context '{context['name']}': {e}") from e

        server = (configuration.host or "").rstrip("/")
        if not server:
            raise KubeconfigError(f"Cluster '{cluster_name}' has no server address")

        connection = ClusterConnection(context=context["name"], cluster=cluster_name, server=server)
        ic(connection)
        return cls(connection, client.ApiClient(configuration=configuration))

    @staticmethod
    def _set_context(*, select_context: bool) -> dict[str, Any]:
        """Pick the kubeconfig context to work with.

        Args:
            select_context: If True, prompt user to select a context.

        Returns:
            The kubeconfig context entry (name and context mapping).

        Raises:
            KubeconfigError: If kubeconfig is invalid, missing or has no
                current context.
            click.Abort: If user cancels context selection.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts()
        except ConfigException as e:
            raise KubeconfigError(f"Invalid or missing kubeconfig: {e}") from e

        if select_context:
            by_name = {context["name"]: context for context in contexts}
            name: str | None = questionary.select(
                "Select context to onboard",
                choices=list(by_name),
                style=PROMPT_STYLE,
                pointer=POINTER,
                qmark=QMARK,
            ).ask()
            if name is None:
                console.warning("Context selection cancelled.")
                raise click.Abort()
            context = by_name[name]
        else:
            if not current_context:
                raise KubeconfigError("No current context is set in kubeconfig")
            context = current_context

        console.action(f"Working with {console.highlight(context['name'])} context")
        return context

    @property
    def context(self) -> str:
        return self.connection.context

    @property
    def name(self) -> str:
        return self.connection.cluster

    @property
    def server(self) -> str:
        return self.connection.server

    @property
    def endpoint(self) -> ClusterEndpoint:
        """Hostname and port of the API server."""
        return parse_server_address(self.connection.server)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Cluster(context={self.context!r}, cluster={self.name!r}, server={self.server!r})"
