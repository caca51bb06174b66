"""Tests for Prometheus metrics."""

from __future__ import annotations

from prometheus_client import REGISTRY

from dedicated_admin_operator.metrics import (
    api_call_duration_seconds,
    api_call_total,
    error_total,
    excluded_namespaces_total,
    policy_load_errors_total,
    reconcile_duration_seconds,
    reconcile_total,
    resync_passes_total,
    retry_scheduled_total,
    rolebinding_operations_total,
)


class TestMetricsExist:
    """Test that all expected metrics are defined."""

    def test_excluded_namespaces_total_exists(self):
        """Test excluded_namespaces_total counter exists."""
        # Prometheus counters don't include "_total" in their _name attribute
        assert excluded_namespaces_total._name == "dedicated_admin_operator_excluded_namespaces"

    def test_policy_load_errors_total_exists(self):
        """Test policy_load_errors_total counter exists."""
        assert policy_load_errors_total._name == "dedicated_admin_operator_policy_load_errors"

    def test_reconcile_total_exists(self):
        """Test reconcile_total counter exists."""
        assert reconcile_total._name == "dedicated_admin_operator_reconcile"

    def test_reconcile_duration_exists(self):
        """Test reconcile_duration_seconds histogram exists."""
        assert reconcile_duration_seconds._name == "dedicated_admin_operator_reconcile_duration_seconds"

    def test_resync_metrics_exist(self):
        """Test resync loop counters exist."""
        assert resync_passes_total._name == "dedicated_admin_operator_resync_passes"
        assert retry_scheduled_total._name == "dedicated_admin_operator_retry_scheduled"

    def test_rolebinding_operations_total_exists(self):
        """Test rolebinding_operations_total counter exists."""
        assert rolebinding_operations_total._name == "dedicated_admin_operator_rolebinding_operations"

    def test_api_call_metrics_exist(self):
        """Test API call metrics exist."""
        assert api_call_total._name == "dedicated_admin_operator_api_call"
        assert api_call_duration_seconds._name == "dedicated_admin_operator_api_call_duration_seconds"

    def test_error_total_exists(self):
        """Test error_total counter exists."""
        assert error_total._name == "dedicated_admin_operator_error"


class TestMetricOperations:
    """Test metric operations."""

    def test_excluded_counter_increment(self):
        """Test that the excluded counter increments by one per pass."""
        before = REGISTRY.get_sample_value("dedicated_admin_operator_excluded_namespaces_total") or 0.0

        excluded_namespaces_total.inc()

        after = REGISTRY.get_sample_value("dedicated_admin_operator_excluded_namespaces_total")
        assert after == before + 1

    def test_rolebinding_outcome_labels_independent(self):
        """Test that outcome classes are counted separately."""
        created = rolebinding_operations_total.labels(rolebinding="test-rb", result="created")
        present = rolebinding_operations_total.labels(rolebinding="test-rb", result="already_present")
        created_before = created._value.get()
        present_before = present._value.get()

        created.inc()
        created.inc()
        present.inc()

        assert created._value.get() == created_before + 2
        assert present._value.get() == present_before + 1

    def test_histogram_observe(self):
        """Test that histograms can observe values."""
        reconcile_duration_seconds.observe(0.2)
        api_call_duration_seconds.labels(operation="get_namespace").observe(0.05)
