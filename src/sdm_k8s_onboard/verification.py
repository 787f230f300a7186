"""Service account token extraction and verification.

This module reads the long-lived token the cluster issued for the
onboarding service account and checks that it can list namespaces,
which is the request the registry uses as its health check.
"""

import base64
import binascii
from typing import NamedTuple

import requests
import urllib3
from icecream import ic
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import InsecureRequestWarning, MaxRetryError

from sdm_k8s_onboard.exceptions import TokenNotReadyError, TokenVerificationError

HEALTHCHECK_PATH = "/api/v1/namespaces"
_HTTP_OK = 200


class HealthCheck(NamedTuple):
    """Outcome of the token health check request."""

    status_code: int
    body: str


def read_service_account_token(
    core_api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    *,
    timeout: float,
) -> str:
    """Read and decode the token stored in a service account token secret.

    Args:
        core_api: CoreV1Api bound to the cluster.
        namespace: Namespace of the secret.
        secret_name: Name of the secret.
        timeout: Seconds to wait for the API request.

    Returns:
        The bearer token.

    Raises:
        TokenNotReadyError: If the secret is missing or its token has not
            been populated yet.

    """
    try:
        secret = core_api.read_namespaced_secret(name=secret_name, namespace=namespace, _request_timeout=timeout)
    except ApiException as e:
        raise TokenNotReadyError(f"Cannot read secret {namespace}/{secret_name}: {e.status} {e.reason}") from e
    except MaxRetryError as e:
        raise TokenNotReadyError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e

    encoded = (secret.data or {}).get("token")
    if not encoded:
        raise TokenNotReadyError(
            f"Secret {namespace}/{secret_name} has no token yet; the token controller may not have populated it"
        )

    try:
        token = base64.b64decode(encoded, validate=True).decode()
    except (binascii.Error, UnicodeDecodeError) as e:
        raise TokenNotReadyError(f"Secret {namespace}/{secret_name} holds a malformed token") from e

    if not token:
        raise TokenNotReadyError(f"Secret {namespace}/{secret_name} holds an empty token")
    return token


def check_token(server: str, token: str, *, timeout: float) -> HealthCheck:
    """List namespaces on the API server with the given bearer token.

    Certificate validation is skipped: the request goes straight to the
    server address without the kubeconfig's CA bundle.

    Args:
        server: API server URL.
        token: Bearer token to authenticate with.
        timeout: Seconds to wait for the response.

    Returns:
        HealthCheck with the status code and response body, status 0 when
        the server could not be reached.

    """
    url = f"{server.rstrip('/')}{HEALTHCHECK_PATH}"
    ic(url)
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    urllib3.disable_warnings(InsecureRequestWarning)
    try:
        response = requests.get(url, headers=headers, verify=False, timeout=timeout)  # noqa: S501
    except requests.RequestException as e:
        return HealthCheck(status_code=0, body=str(e))

    ic(response.status_code)
    return HealthCheck(status_code=response.status_code, body=response.text)


def verify_token(server: str, token: str, *, timeout: float) -> HealthCheck:
    """Check the token and fail unless the API server answered 200.

    Raises:
        TokenVerificationError: If the health check did not return 200.

    """
    result = check_token(server, token, timeout=timeout)
    if result.status_code != _HTTP_OK:
        raise TokenVerificationError(result.status_code, result.body)
    return result
