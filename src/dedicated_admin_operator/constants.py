"""Constants for the Dedicated Admin Operator."""

import os

# Operator identity
OPERATOR_NAME = "dedicated-admin-operator"
FIELD_MANAGER = OPERATOR_NAME

# Operator configuration source
OPERATOR_NAMESPACE = os.getenv("OPERATOR_NAMESPACE", "openshift-dedicated-admin")
OPERATOR_CONFIGMAP_NAME = os.getenv("OPERATOR_CONFIGMAP_NAME", "dedicated-admin-operator-config")

# Exclusion policy
POLICY_KEY_PROJECT_BLACKLIST = "project_blacklist"
POLICY_DELIMITER = ","

# Watched resource
NAMESPACE_RESOURCE = "namespaces"
KIND_NAMESPACE = "Namespace"
KIND_ROLE_BINDING = "RoleBinding"
KIND_CLUSTER_ROLE = "ClusterRole"
KIND_GROUP = "Group"
RBAC_API_GROUP = "rbac.authorization.k8s.io"
RBAC_API_VERSION = f"{RBAC_API_GROUP}/v1"

# Namespace phases
PHASE_TERMINATING = "Terminating"

# Subject group granted admin rights in every managed namespace
DEDICATED_ADMINS_GROUP = "dedicated-admins"

# Labels
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"

# Failure policy: a config load failure does not block reconciliation
FAIL_OPEN_ON_POLICY_LOAD_ERROR = True
# Failure policy: a failed rolebinding create is recorded, never fails the pass
ABORT_PASS_ON_CHILD_CREATE_ERROR = False

# Gate reasons
REASON_NOT_FOUND = "NotFound"
REASON_TERMINATING = "Terminating"
REASON_READY = "Ready"

# Event Reasons
EVENT_REASON_ROLEBINDING_CREATED = "RoleBindingCreated"
EVENT_REASON_ROLEBINDING_FAILED = "RoleBindingFailed"

# Runtime settings
METRICS_PORT = int(os.getenv("METRICS_PORT", "8080"))
# Seconds between full passes over every namespace
RESYNC_INTERVAL_SECONDS = int(os.getenv("RESYNC_INTERVAL_SECONDS", "300"))
# Backoff for namespaces whose last pass failed, doubled per attempt up to the maximum
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "10"))
RETRY_MAX_DELAY_SECONDS = float(os.getenv("RETRY_MAX_DELAY_SECONDS", str(RESYNC_INTERVAL_SECONDS)))
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "4"))
