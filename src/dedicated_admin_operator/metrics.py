"""Prometheus metrics for the Dedicated Admin Operator."""

from prometheus_client import Counter, Histogram

# Exclusion policy metrics
excluded_namespaces_total = Counter(
    "dedicated_admin_operator_excluded_namespaces_total",
    "Total number of reconciliation passes skipped by the exclusion policy",
)

policy_load_errors_total = Counter(
    "dedicated_admin_operator_policy_load_errors_total",
    "Total number of failed operator config loads",
)

# Reconciliation metrics
reconcile_total = Counter(
    "dedicated_admin_operator_reconcile_total",
    "Total number of reconciliations",
    ["result"],
)

reconcile_duration_seconds = Histogram(
    "dedicated_admin_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# RoleBinding operation metrics
rolebinding_operations_total = Counter(
    "dedicated_admin_operator_rolebinding_operations_total",
    "Total number of RoleBinding creation attempts by outcome",
    ["rolebinding", "result"],
)

# API call metrics
api_call_total = Counter(
    "dedicated_admin_operator_api_call_total",
    "Total number of API calls",
    ["operation", "result"],
)

api_call_duration_seconds = Histogram(
    "dedicated_admin_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

error_total = Counter(
    "dedicated_admin_operator_error_total",
    "Total number of reconciliation errors",
    ["error_type"],
)

# Resync metrics
resync_passes_total = Counter(
    "dedicated_admin_operator_resync_passes_total",
    "Total number of passes started by the resync loop",
    ["trigger"],
)

retry_scheduled_total = Counter(
    "dedicated_admin_operator_retry_scheduled_total",
    "Total number of namespaces scheduled for a retry after a failed pass",
)
