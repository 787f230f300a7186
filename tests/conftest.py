"""Shared test fixtures for sdm-k8s-onboard tests."""

from unittest.mock import MagicMock, patch

import pytest

from sdm_k8s_onboard.cluster import Cluster
from sdm_k8s_onboard.models import ClusterConnection
from sdm_k8s_onboard.registry import SdmAdmin

KIND_CONTEXT = {"name": "kind-test", "context": {"cluster": "kind-test", "user": "kind-test"}}


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([KIND_CONTEXT], KIND_CONTEXT)
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading with a local API server address."""

    def load(context, client_configuration):  # noqa: ARG001
        client_configuration.host = "https://127.0.0.1:6443"

    with patch("kubernetes.config.load_kube_config", side_effect=load) as mock:
        yield mock


@pytest.fixture
def kind_cluster():
    """A resolved kind cluster with a mocked API client."""
    return Cluster(
        ClusterConnection(context="kind-test", cluster="kind-test", server="https://127.0.0.1:6443"),
        MagicMock(),
    )


@pytest.fixture
def mock_registry():
    """Registry admin client with no pre-existing resources."""
    registry = MagicMock(spec=SdmAdmin)
    registry.list_clusters.return_value = []
    registry.show_cluster.return_value = "Cluster ID  Name       Type\nrs-1234     kind-test  k8sService\n"
    return registry


@pytest.fixture
def mock_confirm():
    """Mock questionary confirm prompts, answering yes by default."""
    with patch("questionary.confirm") as mock:
        mock.return_value.ask.return_value = True
        yield mock


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock


@pytest.fixture
def mock_sdm_binary():
    """Mock locating the sdm binary on PATH."""
    with patch("shutil.which", return_value="/usr/local/bin/sdm") as mock:
        yield mock
