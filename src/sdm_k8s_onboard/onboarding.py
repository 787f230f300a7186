"""Onboarding facade class.

This module provides the Onboarding class which runs the whole procedure:
resolve the cluster, check the registry for a name conflict, get the
operator's approval, provision the service account, verify its token and
register the cluster.
"""

from kubernetes import client
from rich.markup import escape

from sdm_k8s_onboard import console
from sdm_k8s_onboard.cluster import Cluster, default_resource_name
from sdm_k8s_onboard.exceptions import RegistryCommandError
from sdm_k8s_onboard.models import ClusterEndpoint, OnboardSettings, Registration, Stage
from sdm_k8s_onboard.prompts import render_summary, require_confirmation
from sdm_k8s_onboard.provisioner import Provisioner
from sdm_k8s_onboard.registry import SdmAdmin
from sdm_k8s_onboard.verification import read_service_account_token, verify_token

DEFAULT_TIMEOUT = 30.0


class Onboarding:
    """Registers one Kubernetes cluster in StrongDM.

    Stages run in a fixed order and each one needs the previous one to
    have completed; the first failure stops the run.

    Attributes:
        settings: Names of the objects to create.
        timeout: Seconds to wait for every external call.
        stage: The last completed stage.
        cluster: The resolved cluster, set by ``resolve``.
        endpoint: Hostname and port of the API server, set by ``resolve``.
        resource_name: Registry resource name, set by ``resolve``.

    """

    def __init__(
        self,
        settings: OnboardSettings,
        *,
        select_context: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        cluster: Cluster | None = None,
        registry: SdmAdmin | None = None,
    ) -> None:
        """Prepare an onboarding run.

        Args:
            settings: Names of the objects to create.
            select_context: If True, prompt user to select a Kubernetes context.
            timeout: Seconds to wait for every external call.
            cluster: Pre-resolved cluster, read from kubeconfig when omitted.
            registry: Registry admin client, located on PATH when omitted.

        Raises:
            BinaryNotFoundError: If the sdm binary is not installed.

        """
        self.settings = settings
        self.timeout = timeout
        self.select_context = select_context
        self.registry: SdmAdmin = registry or SdmAdmin(timeout=timeout)
        self.stage: Stage = Stage.START

        self.cluster: Cluster | None = cluster
        self.endpoint: ClusterEndpoint | None = None
        self.resource_name: str = ""
        self._token: str | None = None

    def __enter__(self) -> "Onboarding":
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Close the Kubernetes API client connection pool."""
        if self.cluster is not None:
            self.cluster.api_client.close()

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Onboarding(cluster={self.cluster!r}, resource_name={self.resource_name!r}, stage={self.stage.value!r})"

    def _advance(self, expected: Stage, reached: Stage) -> None:
        if self.stage is not expected:
            raise RuntimeError(f"Cannot move to '{reached.value}' from '{self.stage.value}', expected '{expected.value}'")
        self.stage = reached

    def _resolved_cluster(self) -> Cluster:
        if self.cluster is None:
            raise RuntimeError("Cluster has not been resolved")
        return self.cluster

    def resolve(self) -> None:
        """Read the target cluster from kubeconfig and derive the registry values.

        Raises:
            KubeconfigError: If the kubeconfig does not describe the cluster.
            UnknownPortError: If the API server port cannot be derived.

        """
        if self.cluster is None:
            self.cluster = Cluster.from_kubeconfig(select_context=self.select_context)
        self.endpoint = self.cluster.endpoint
        self.resource_name = self.settings.resource_name or default_resource_name(self.cluster.name)
        self._advance(Stage.START, Stage.RESOLVED)

    def check_conflict(self) -> None:
        """Offer to delete a registry resource that already uses the name.

        Raises:
            click.Abort: If the operator keeps the existing resource, or
                does not acknowledge a failed deletion.

        """
        with console.spinner("Checking StrongDM for existing resources..."):
            existing = self.registry.list_clusters(self.resource_name)

        if existing:
            console.warning(
                f"The cluster resource name {console.highlight(self.resource_name)} is already in use in StrongDM."
            )
            for row in existing:
                console.raw(row)
            require_confirmation(
                "Delete the existing cluster resource and make a new one?",
                "Not deleting the existing resource. Exiting.",
            )
            try:
                self.registry.delete_cluster(self.resource_name)
                console.success(f"Deleted existing resource {console.highlight(self.resource_name)}")
            except RegistryCommandError as e:
                console.warning(f"Could not delete the existing resource: {escape(str(e))}")
                require_confirmation(
                    "Continue anyway? Registration fails if the name is still taken.",
                    "Exiting without making any changes.",
                )

        self._advance(Stage.RESOLVED, Stage.CONFLICT_CHECKED)

    def confirm(self) -> None:
        """Show what will change and require the operator's approval.

        Raises:
            click.Abort: If the operator does not approve.

        """
        cluster = self._resolved_cluster()
        if self.endpoint is None:
            raise RuntimeError("Cluster endpoint has not been resolved")
        render_summary(self.settings, cluster.connection, self.endpoint, self.resource_name)
        require_confirmation("Proceed?", "Exiting without making any changes.")
        self._advance(Stage.CONFLICT_CHECKED, Stage.CONFIRMED)

    def provision(self) -> None:
        """Apply the service account and its RBAC objects to the cluster.

        Raises:
            ProvisioningError: If any apply fails.

        """
        console.info(f"Establishing service account in namespace {console.highlight(self.settings.namespace)}")
        Provisioner(self._resolved_cluster().api_client, timeout=self.timeout).provision(self.settings)
        self._advance(Stage.CONFIRMED, Stage.PROVISIONED)

    def verify(self) -> None:
        """Extract the service account token and check it can list namespaces.

        Raises:
            TokenNotReadyError: If the secret holds no token.
            TokenVerificationError: If the health check does not return 200.

        """
        cluster = self._resolved_cluster()
        token = read_service_account_token(
            client.CoreV1Api(cluster.api_client),
            self.settings.namespace,
            self.settings.secret_name,
            timeout=self.timeout,
        )
        with console.spinner("Verifying the token against the API server..."):
            verify_token(cluster.server, token, timeout=self.timeout)
        console.success("The token works for listing namespaces!")
        self._token = token
        self._advance(Stage.PROVISIONED, Stage.VERIFIED)

    def register(self) -> None:
        """Add the cluster to StrongDM and echo the new resource.

        Raises:
            RegistryCommandError: If the registry rejects the resource.

        """
        if self._token is None or self.endpoint is None:
            raise RuntimeError("Token has not been verified")

        registration = Registration(
            name=self.resource_name,
            hostname=self.endpoint.hostname,
            port=self.endpoint.port,
            api_token=self._token,
            healthcheck_namespace=self.settings.namespace,
        )
        with console.spinner("Registering cluster in StrongDM..."):
            self.registry.add_k8s_service(registration)
        self._advance(Stage.VERIFIED, Stage.REGISTERED)

        console.success("New cluster resource created in StrongDM.")
        console.raw(self.registry.show_cluster(self.resource_name))
        self.stage = Stage.DONE

    def run(self) -> None:
        """Run every stage in order."""
        self.resolve()
        self.check_conflict()
        self.confirm()
        self.provision()
        self.verify()
        self.register()
