"""Tests for shared handler utilities."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from kubernetes import client
from kubernetes.client.exceptions import ApiException

from dedicated_admin_operator.exceptions import PolicyLoadError, ResourceFetchError
from dedicated_admin_operator.handlers import shared
from dedicated_admin_operator.handlers.shared import (
    call_api,
    fetch_namespace,
    get_core_api,
    list_namespace_names,
    load_policy_document,
)


class TestCallApi:
    """Test cases for call_api function."""

    @patch("dedicated_admin_operator.handlers.shared.metrics")
    def test_success(self, mock_metrics):
        """Test that successful calls are counted and timed."""
        fn = Mock(return_value="ok")

        assert call_api("get_namespace", fn, name="team-a") == "ok"

        fn.assert_called_once_with(name="team-a")
        mock_metrics.api_call_total.labels.assert_called_with(operation="get_namespace", result="success")
        mock_metrics.api_call_duration_seconds.labels.assert_called_with(operation="get_namespace")

    @pytest.mark.parametrize(
        ("status", "label"),
        [(404, "not_found"), (409, "conflict"), (500, "error")],
    )
    @patch("dedicated_admin_operator.handlers.shared.metrics")
    def test_api_exception_labels(self, mock_metrics, status, label):
        """Test that API errors are counted by class and re-raised."""
        fn = Mock(side_effect=ApiException(status=status, reason="x"))

        with pytest.raises(ApiException):
            call_api("create_rolebinding", fn)

        mock_metrics.api_call_total.labels.assert_called_with(operation="create_rolebinding", result=label)


class TestLoadPolicyDocument:
    """Test cases for load_policy_document function."""

    def test_returns_configmap_data(self):
        """Test reading the operator ConfigMap."""
        api = Mock()
        api.read_namespaced_config_map.return_value = client.V1ConfigMap(data={"project_blacklist": "kube-.*"})

        assert load_policy_document(api) == {"project_blacklist": "kube-.*"}
        api.read_namespaced_config_map.assert_called_once_with(
            name="dedicated-admin-operator-config",
            namespace="openshift-dedicated-admin",
        )

    def test_configmap_without_data(self):
        """Test that a ConfigMap without data yields an empty document."""
        api = Mock()
        api.read_namespaced_config_map.return_value = client.V1ConfigMap(data=None)

        assert load_policy_document(api) == {}

    def test_not_found(self):
        """Test that a missing ConfigMap raises PolicyLoadError."""
        api = Mock()
        api.read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(PolicyLoadError, match="not found") as exc_info:
            load_policy_document(api)

        assert isinstance(exc_info.value.__cause__, ApiException)

    def test_transient_error(self):
        """Test that other read errors raise PolicyLoadError."""
        api = Mock()
        api.read_namespaced_config_map.side_effect = ConnectionError("refused")

        with pytest.raises(PolicyLoadError):
            load_policy_document(api)


class TestFetchNamespace:
    """Test cases for fetch_namespace function."""

    def test_found(self):
        """Test reading an existing namespace."""
        api = Mock()
        ns = client.V1Namespace(metadata=client.V1ObjectMeta(name="team-a"))
        api.read_namespace.return_value = ns

        assert fetch_namespace(api, "team-a") is ns

    def test_not_found_returns_none(self):
        """Test that NotFound is not an error."""
        api = Mock()
        api.read_namespace.side_effect = ApiException(status=404, reason="Not Found")

        assert fetch_namespace(api, "team-a") is None

    def test_other_error_raises(self):
        """Test that other API errors raise ResourceFetchError."""
        api = Mock()
        api.read_namespace.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ResourceFetchError) as exc_info:
            fetch_namespace(api, "team-a")

        assert exc_info.value.name == "team-a"
        assert exc_info.value.status == 403


class TestListNamespaceNames:
    """Test cases for list_namespace_names function."""

    def test_returns_names(self):
        """Test that every listed namespace name is returned in order."""
        api = Mock()
        api.list_namespace.return_value = client.V1NamespaceList(
            items=[
                client.V1Namespace(metadata=client.V1ObjectMeta(name="kube-system")),
                client.V1Namespace(metadata=client.V1ObjectMeta(name="team-a")),
            ]
        )

        assert list_namespace_names(api) == ["kube-system", "team-a"]

    def test_errors_propagate(self):
        """Test that list failures are raised to the caller."""
        api = Mock()
        api.list_namespace.side_effect = ApiException(status=500, reason="Internal Server Error")

        with pytest.raises(ApiException):
            list_namespace_names(api)


class TestGetCoreApi:
    """Test cases for API client construction."""

    @patch("dedicated_admin_operator.handlers.shared.config")
    def test_falls_back_to_kubeconfig(self, mock_config):
        """Test kubeconfig is used outside the cluster."""
        mock_config.ConfigException = Exception
        mock_config.load_incluster_config.side_effect = Exception("not in cluster")

        with patch.object(shared, "_config_loaded", False):
            api = get_core_api()

        assert isinstance(api, client.CoreV1Api)
        mock_config.load_kube_config.assert_called_once()

    @patch("dedicated_admin_operator.handlers.shared.config")
    def test_config_loaded_once(self, mock_config):
        """Test that cluster config is only loaded once."""
        with patch.object(shared, "_config_loaded", False):
            get_core_api()
            get_core_api()

        mock_config.load_incluster_config.assert_called_once()
