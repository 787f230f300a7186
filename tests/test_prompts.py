"""Tests for prompts.py module."""

from unittest.mock import patch

import click
import pytest

from sdm_k8s_onboard import console
from sdm_k8s_onboard.models import ClusterConnection, ClusterEndpoint, OnboardSettings
from sdm_k8s_onboard.prompts import confirm, render_summary, require_confirmation


class TestConfirm:
    """Tests for y/n prompts."""

    @pytest.mark.parametrize(("answer", "expected"), [(True, True), (False, False), (None, False)])
    def test_answers(self, mock_confirm, answer, expected):
        """Test only an explicit yes counts as approval."""
        mock_confirm.return_value.ask.return_value = answer
        assert confirm("Proceed?") is expected

    def test_single_key_prompt(self, mock_confirm):
        """Test the prompt submits on a single y/n key and defaults to no."""
        confirm("Proceed?")

        kwargs = mock_confirm.call_args.kwargs
        assert kwargs["auto_enter"] is True
        assert kwargs["default"] is False

    def test_require_confirmation_declined(self, mock_confirm):
        """Test a declined confirmation aborts."""
        mock_confirm.return_value.ask.return_value = False

        with pytest.raises(click.Abort):
            require_confirmation("Proceed?", "Exiting without making any changes.")


class TestRenderSummary:
    """Tests for the pre-change summary."""

    def test_lists_cluster_and_objects(self):
        """Test every derived value and object name is shown."""
        with patch.object(console, "summary_panel") as mock_panel:
            render_summary(
                OnboardSettings(namespace="sdm"),
                ClusterConnection("kind-test", "kind-test", "https://127.0.0.1:6443"),
                ClusterEndpoint("127.0.0.1", 6443),
                "kind-test",
            )

        shown = {}
        for call in mock_panel.call_args_list:
            shown.update(call.args[1])
        assert shown["Context"] == "kind-test"
        assert shown["Cluster Address"] == "https://127.0.0.1:6443"
        assert shown["Cluster Hostname"] == "127.0.0.1"
        assert shown["Cluster Port"] == "6443"
        assert shown["Namespace"] == "sdm"
        assert shown["Cluster Role Binding"] == "cluster-service-account-cluster-role-binding"
        assert shown["Secret"].startswith("cluster-service-account-secret")
        assert shown["Resource"] == "kind-test"
        assert shown["Kind"] == "k8s-service"

    def test_markup_in_cluster_name(self):
        """Test a cluster name containing brackets is shown as written."""
        with console.console.capture() as capture:
            render_summary(
                OnboardSettings(),
                ClusterConnection("ctx", "team[/x]", "https://10.0.0.1"),
                ClusterEndpoint("10.0.0.1", 443),
                "team--x-",
            )

        assert "team[/x]" in capture.get()
