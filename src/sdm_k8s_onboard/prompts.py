"""Interactive operator prompts.

This module renders what the onboarding run is about to change and
collects the operator's y/n answers before anything is mutated.
"""

import click
import questionary

from sdm_k8s_onboard import console
from sdm_k8s_onboard.models import RESOURCE_KIND, ClusterConnection, ClusterEndpoint, OnboardSettings
from sdm_k8s_onboard.styles import PROMPT_STYLE, QMARK


def confirm(message: str) -> bool:
    """Ask a single-key yes/no question.

    Args:
        message: The question to display.

    Returns:
        True only for an explicit yes; no, Ctrl-C and Esc count as no.

    """
    answer: bool | None = questionary.confirm(
        message,
        default=False,
        auto_enter=True,
        style=PROMPT_STYLE,
        qmark=QMARK,
    ).ask()
    return bool(answer)


def require_confirmation(message: str, abort_message: str) -> None:
    """Ask a yes/no question and abort the run on anything but yes.

    Raises:
        click.Abort: If the operator does not answer yes.

    """
    if not confirm(message):
        console.warning(abort_message)
        raise click.Abort()


def render_summary(
    settings: OnboardSettings,
    connection: ClusterConnection,
    endpoint: ClusterEndpoint,
    resource_name: str,
) -> None:
    """Print the cluster being onboarded and every object about to be created.

    Args:
        settings: Names of the Kubernetes objects.
        connection: Context, cluster and server address.
        endpoint: Hostname and port derived from the server address.
        resource_name: Registry resource name.

    """
    console.newline()
    console.summary_panel(
        "Target cluster",
        {
            "Context": connection.context,
            "Cluster": connection.cluster,
            "Cluster Address": connection.server,
            "Cluster Hostname": endpoint.hostname,
            "Cluster Port": str(endpoint.port),
        },
        border_style="cyan",
    )
    console.summary_panel(
        "To be established in the cluster",
        {
            "Namespace": settings.namespace,
            "Service Account": settings.service_account,
            "Cluster Role": f"{settings.role_name} (read-only, minimal permissions for discovery)",
            "Cluster Role Binding": settings.binding_name,
            "Secret": f"{settings.secret_name} (long-lived API token for the service account)",
        },
        border_style="yellow",
    )
    console.summary_panel(
        "To be registered in StrongDM",
        {"Resource": resource_name, "Kind": RESOURCE_KIND},
        border_style="yellow",
    )
