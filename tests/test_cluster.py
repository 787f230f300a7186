"""Tests for cluster.py module."""

from unittest.mock import patch

import click
import pytest
from kubernetes.config.config_exception import ConfigException

from sdm_k8s_onboard.cluster import Cluster, default_resource_name, parse_server_address
from sdm_k8s_onboard.exceptions import KubeconfigError, UnknownPortError
from sdm_k8s_onboard.models import ClusterEndpoint


class TestParseServerAddress:
    """Tests for splitting the API server address."""

    def test_explicit_port(self):
        """Test an explicit port is used as is."""
        assert parse_server_address("https://127.0.0.1:6443") == ClusterEndpoint("127.0.0.1", 6443)

    def test_https_default_port(self):
        """Test https without a port defaults to 443."""
        assert parse_server_address("https://api.example.com") == ClusterEndpoint("api.example.com", 443)

    def test_http_default_port(self):
        """Test http without a port defaults to 80."""
        assert parse_server_address("http://example.com") == ClusterEndpoint("example.com", 80)

    def test_path_is_ignored(self):
        """Test a path after the host does not leak into hostname or port."""
        endpoint = parse_server_address("https://rancher.example.com:8443/k8s/clusters/c-abc12")
        assert endpoint == ClusterEndpoint("rancher.example.com", 8443)

    def test_hostname_case_preserved(self):
        """Test the hostname is returned exactly as written."""
        assert parse_server_address("https://API.Example.com").hostname == "API.Example.com"

    def test_ipv6_host(self):
        """Test brackets are removed from IPv6 hosts."""
        assert parse_server_address("https://[::1]:6443") == ClusterEndpoint("::1", 6443)

    def test_unknown_scheme_without_port(self):
        """Test a scheme without a default port is rejected."""
        with pytest.raises(UnknownPortError) as exc_info:
            parse_server_address("tcp://cluster.local")
        assert "tcp" in str(exc_info.value)

    def test_unknown_scheme_with_port(self):
        """Test an explicit port works for any scheme."""
        assert parse_server_address("tcp://cluster.local:6443") == ClusterEndpoint("cluster.local", 6443)

    def test_invalid_port(self):
        """Test a non-numeric port is a kubeconfig error."""
        with pytest.raises(KubeconfigError):
            parse_server_address("https://cluster.local:api")

    def test_missing_host(self):
        """Test an address without a host is a kubeconfig error."""
        with pytest.raises(KubeconfigError):
            parse_server_address("https://:6443")


class TestDefaultResourceName:
    """Tests for deriving the registry resource name."""

    def test_alphanumeric_name_unchanged(self):
        """Test letters and digits are kept."""
        assert default_resource_name("Prod01") == "Prod01"

    def test_dash_kept(self):
        """Test dashes stay dashes."""
        assert default_resource_name("kind-test") == "kind-test"

    def test_eks_arn(self):
        """Test every separator in an EKS ARN is replaced."""
        name = "arn:aws:eks:us-east-1:123456789012:cluster/prod"
        result = default_resource_name(name)
        assert result == "arn-aws-eks-us-east-1-123456789012-cluster-prod"
        assert len(result) == len(name)

    def test_gke_name(self):
        """Test underscores are replaced."""
        assert default_resource_name("gke_project_europe-west1_main") == "gke-project-europe-west1-main"

    def test_non_ascii_replaced(self):
        """Test non-ASCII letters are replaced one for one."""
        assert default_resource_name("clüster.é") == "cl-ster--"


class TestClusterFromKubeconfig:
    """Tests for reading the target cluster from kubeconfig."""

    def test_current_context(self, mock_kube_contexts, mock_kube_config):
        """Test the current context, its cluster and server are resolved."""
        cluster = Cluster.from_kubeconfig(select_context=False)

        assert cluster.context == "kind-test"
        assert cluster.name == "kind-test"
        assert cluster.server == "https://127.0.0.1:6443"
        assert cluster.endpoint == ClusterEndpoint("127.0.0.1", 6443)
        mock_kube_config.assert_called_once()
        assert mock_kube_config.call_args.kwargs["context"] == "kind-test"

    def test_trailing_slash_removed(self, mock_kube_contexts):
        """Test a trailing slash on the server address is dropped."""

        def load(context, client_configuration):  # noqa: ARG001
            client_configuration.host = "https://10.0.0.1/"

        with patch("kubernetes.config.load_kube_config", side_effect=load):
            cluster = Cluster.from_kubeconfig(select_context=False)

        assert cluster.server == "https://10.0.0.1"

    def test_select_context(self, mock_kube_config):
        """Test prompting user for context selection."""
        contexts = [
            {"name": "prod", "context": {"cluster": "prod-cluster"}},
            {"name": "staging", "context": {"cluster": "staging-cluster"}},
        ]
        with (
            patch("kubernetes.config.list_kube_config_contexts") as mock_contexts,
            patch("questionary.select") as mock_select,
        ):
            mock_contexts.return_value = (contexts, contexts[0])
            mock_select.return_value.ask.return_value = "staging"

            cluster = Cluster.from_kubeconfig(select_context=True)

        assert cluster.context == "staging"
        assert cluster.name == "staging-cluster"
        mock_select.assert_called_once()

    def test_select_context_cancelled(self, mock_kube_contexts, mock_kube_config):
        """Test cancelling the context prompt aborts."""
        with patch("questionary.select") as mock_select:
            mock_select.return_value.ask.return_value = None

            with pytest.raises(click.Abort):
                Cluster.from_kubeconfig(select_context=True)

        mock_kube_config.assert_not_called()

    def test_invalid_kubeconfig(self):
        """Test error when kubeconfig is invalid or missing."""
        with patch("kubernetes.config.list_kube_config_contexts") as mock_contexts:
            mock_contexts.side_effect = ConfigException("Invalid kube-config file. No configuration found.")

            with pytest.raises(KubeconfigError) as exc_info:
                Cluster.from_kubeconfig(select_context=False)

        assert "Invalid or missing kubeconfig" in str(exc_info.value)

    def test_no_current_context(self, mock_kube_config):
        """Test error when no context is current."""
        with patch("kubernetes.config.list_kube_config_contexts") as mock_contexts:
            mock_contexts.return_value = ([], None)

            with pytest.raises(KubeconfigError):
                Cluster.from_kubeconfig(select_context=False)

    def test_context_without_cluster(self, mock_kube_config):
        """Test error when the context does not name a cluster."""
        context = {"name": "broken", "context": {"user": "someone"}}
        with patch("kubernetes.config.list_kube_config_contexts") as mock_contexts:
            mock_contexts.return_value = ([context], context)

            with pytest.raises(KubeconfigError) as exc_info:
                Cluster.from_kubeconfig(select_context=False)

        assert "broken" in str(exc_info.value)
        mock_kube_config.assert_not_called()

    def test_missing_cluster_entry(self, mock_kube_contexts):
        """Test error when the context's cluster has no kubeconfig entry."""
        with patch("kubernetes.config.load_kube_config") as mock_load:
            mock_load.side_effect = ConfigException("Invalid kube-config file. Expected object with name kind-test")

            with pytest.raises(KubeconfigError):
                Cluster.from_kubeconfig(select_context=False)

    def test_unknown_port_surfaces_from_endpoint(self, mock_kube_contexts):
        """Test the endpoint property rejects a scheme without default port."""

        def load(context, client_configuration):  # noqa: ARG001
            client_configuration.host = "unix://cluster"

        with patch("kubernetes.config.load_kube_config", side_effect=load):
            cluster = Cluster.from_kubeconfig(select_context=False)

        with pytest.raises(UnknownPortError):
            _ = cluster.endpoint

    def test_repr(self, kind_cluster):
        """Test the debug representation names the context and server."""
        assert "kind-test" in repr(kind_cluster)
        assert "https://127.0.0.1:6443" in repr(kind_cluster)
