#!/usr/bin/env python
"""Command-line interface for sdm-k8s-onboard.

This module provides the main CLI entry point, turning options and
environment variables into onboarding settings and reporting failures.
"""

import sys

import click
from icecream import ic
from rich.markup import escape

from sdm_k8s_onboard import __version__, console
from sdm_k8s_onboard.exceptions import OnboardError, TokenVerificationError
from sdm_k8s_onboard.manifests import render_manifests
from sdm_k8s_onboard.models import DEFAULT_NAMESPACE, DEFAULT_SERVICE_ACCOUNT, OnboardSettings
from sdm_k8s_onboard.onboarding import DEFAULT_TIMEOUT, Onboarding


def report_failed_verification(err: TokenVerificationError) -> None:
    """Print the health check status and the full response body."""
    console.error(escape(str(err)))
    if err.body:
        console.raw(err.body)


@click.command(help="Create a service account in the current Kubernetes cluster and register the cluster in StrongDM")
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
@click.option(
    "--namespace",
    envvar="NAMESPACE",
    default=DEFAULT_NAMESPACE,
    show_default=True,
    help="namespace for the service account [env: NAMESPACE]",
)
@click.option(
    "--service-account",
    envvar="SERVICE_ACCOUNT",
    default=DEFAULT_SERVICE_ACCOUNT,
    show_default=True,
    help="service account name, also prefixes the role, binding and secret [env: SERVICE_ACCOUNT]",
)
@click.option(
    "--resource-name",
    envvar="CLUSTER_RESOURCE_NAME",
    required=False,
    help="StrongDM resource name, defaults to the sanitized cluster name [env: CLUSTER_RESOURCE_NAME]",
)
@click.option(
    "--timeout",
    envvar="ONBOARD_TIMEOUT",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="seconds to wait for each cluster, registry and HTTP call [env: ONBOARD_TIMEOUT]",
)
@click.option("--print-manifests", required=False, is_flag=True, help="print the Kubernetes manifests and exit")
def cli(
    debug: bool,
    select: bool,
    namespace: str,
    service_account: str,
    resource_name: str | None,
    timeout: float,
    print_manifests: bool,
    version: bool,
) -> None:
    """Process CLI arguments and run the onboarding.

    Args:
        debug: Enable debug output.
        select: Prompt for Kubernetes context selection.
        namespace: Namespace for the service account.
        service_account: Service account name.
        resource_name: StrongDM resource name override.
        timeout: Seconds to wait for each external call.
        print_manifests: Print the manifests instead of applying them.
        version: Print version and exit.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    settings = OnboardSettings(
        namespace=namespace,
        service_account=service_account,
        resource_name=resource_name or None,
    )
    ic(settings)

    if print_manifests:
        click.echo(render_manifests(settings), nl=False)
        return

    try:
        with Onboarding(settings, select_context=select, timeout=timeout) as onboarding:
            onboarding.run()
    except TokenVerificationError as e:
        report_failed_verification(e)
        sys.exit(1)
    except OnboardError as e:
        console.error(escape(str(e)))
        sys.exit(1)


if __name__ == "__main__":
    cli()
