"""Handler for Namespaces.

Each notification about a namespace runs one stateless reconciliation pass:

    load policy -> exclusion check -> read namespace -> lifecycle gate -> apply RoleBindings

Policy and namespace are read fresh on every pass, so concurrent passes
share nothing but the immutable RoleBinding templates. Passes are also
re-driven by the resync loop: periodically for every namespace, and with
backoff for namespaces whose last pass failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

import kopf

from .. import metrics
from ..applier import ApplyReport, ApplyResult, apply_desired_rolebindings
from ..builders.rolebinding import DESIRED_ROLEBINDINGS, RoleBindingTemplate
from ..constants import (
    ABORT_PASS_ON_CHILD_CREATE_ERROR,
    FAIL_OPEN_ON_POLICY_LOAD_ERROR,
    KIND_NAMESPACE,
    LABEL_MANAGED_BY,
    NAMESPACE_RESOURCE,
    OPERATOR_NAME,
    POLICY_KEY_PROJECT_BLACKLIST,
    RBAC_API_GROUP,
)
from ..exceptions import PolicyLoadError, RoleBindingApplyError
from ..lifecycle import evaluate_lifecycle
from ..policy import ExclusionPolicy
from ..tracing import add_span_attribute, trace_span
from ..utils.events import emit_rolebinding_created, emit_rolebinding_failed, namespace_event_body
from .base import BaseHandler
from .resync import ResyncLoop
from .shared import fetch_namespace, get_core_api, get_rbac_api, list_namespace_names, load_policy_document


class PassStatus(str, Enum):
    """Terminal state of a reconciliation pass."""

    SKIPPED_EXCLUDED = "skipped_excluded"
    SKIPPED_NOT_READY = "skipped_not_ready"
    APPLIED = "applied"


@dataclass(frozen=True)
class ReconcileOutcome:
    """Result of one reconciliation pass.

    Attributes:
        name: Namespace name
        status: Terminal state of the pass
        reason: Matching rule for excluded passes, gate reason for skipped ones
        report: RoleBinding outcomes for applied passes
    """

    name: str
    status: PassStatus
    reason: str | None = None
    report: ApplyReport | None = None


class NamespaceHandler(BaseHandler):
    """Grants the dedicated admins group access to every non-excluded namespace."""

    def __init__(
        self,
        core_api: Any = None,
        rbac_api: Any = None,
        desired: Iterable[RoleBindingTemplate] = DESIRED_ROLEBINDINGS,
    ):
        """Initialize namespace handler.

        Args:
            core_api: CoreV1Api instance, created on first use if omitted
            rbac_api: RbacAuthorizationV1Api instance, created on first use if omitted
            desired: RoleBinding templates to apply
        """
        super().__init__(KIND_NAMESPACE)
        self._core_api = core_api
        self._rbac_api = rbac_api
        self.desired = tuple(desired)

    @property
    def core_api(self) -> Any:
        if self._core_api is None:
            self._core_api = get_core_api()
        return self._core_api

    @property
    def rbac_api(self) -> Any:
        if self._rbac_api is None:
            self._rbac_api = get_rbac_api()
        return self._rbac_api

    def result_label(self, result: ReconcileOutcome) -> str:
        return result.status.value

    def load_policy(self, name: str) -> ExclusionPolicy:
        """Load the exclusion policy for this pass.

        A load failure yields an empty policy while FAIL_OPEN_ON_POLICY_LOAD_ERROR
        is set, and is raised otherwise.
        """
        try:
            document = load_policy_document(self.core_api)
        except PolicyLoadError as e:
            metrics.policy_load_errors_total.inc()
            if not FAIL_OPEN_ON_POLICY_LOAD_ERROR:
                raise
            self.log_warning(
                name,
                "Error loading operator config, continuing without exclusion policy",
                reason="PolicyLoadFailed",
                error=str(e),
            )
            return ExclusionPolicy()

        policy = ExclusionPolicy.from_field(document.get(POLICY_KEY_PROJECT_BLACKLIST))
        for rule in policy.invalid_rules:
            self.log_warning(name, "Invalid exclusion rule never matches", reason="InvalidRule", rule=rule.pattern, error=rule.error)
        return policy

    def reconcile(self, name: str) -> ReconcileOutcome:
        """Run one reconciliation pass for a namespace.

        Args:
            name: Namespace name

        Returns:
            Outcome of the pass

        Raises:
            ResourceFetchError: If the namespace cannot be read
            RoleBindingApplyError: If ABORT_PASS_ON_CHILD_CREATE_ERROR is set and a RoleBinding failed
        """
        with trace_span("reconcile_namespace", attributes={"namespace.name": name}):
            policy = self.load_policy(name)

            # Administrative namespaces such as kube-system never get the RoleBindings
            rule = policy.match(name)
            if rule is not None:
                self.log_info(name, "Excluded namespace - skipping", event="skip", reason="Excluded", rule=rule)
                metrics.excluded_namespaces_total.inc()
                add_span_attribute("reconcile.status", PassStatus.SKIPPED_EXCLUDED.value)
                return ReconcileOutcome(name=name, status=PassStatus.SKIPPED_EXCLUDED, reason=rule)

            namespace = fetch_namespace(self.core_api, name)
            decision = evaluate_lifecycle(namespace)
            if not decision.proceed:
                self.log_info(name, "Namespace not ready - skipping", event="skip", reason=decision.reason, phase=decision.phase)
                add_span_attribute("reconcile.status", PassStatus.SKIPPED_NOT_READY.value)
                return ReconcileOutcome(name=name, status=PassStatus.SKIPPED_NOT_READY, reason=decision.reason)

            with trace_span("apply_rolebindings", attributes={"namespace.name": name}):
                report = apply_desired_rolebindings(self.rbac_api, name, self.desired)

            self._report(namespace, report)
            add_span_attribute("reconcile.status", PassStatus.APPLIED.value)

            if report.errored and ABORT_PASS_ON_CHILD_CREATE_ERROR:
                raise RoleBindingApplyError(name, [outcome.name for outcome in report.failures])

            return ReconcileOutcome(name=name, status=PassStatus.APPLIED, report=report)

    def _report(self, namespace: Any, report: ApplyReport) -> None:
        body = namespace_event_body(namespace)
        for outcome in report.outcomes:
            if outcome.result == ApplyResult.CREATED:
                emit_rolebinding_created(body, outcome.name)
            elif outcome.result == ApplyResult.ERROR:
                self.log_error(
                    report.namespace,
                    "Error creating RoleBinding",
                    reason="RoleBindingFailed",
                    rolebinding=outcome.name,
                    error_message=outcome.error,
                )
                emit_rolebinding_failed(body, outcome.name, outcome.error or "unknown error")

        self.log_info(report.namespace, "RoleBindings reconciled", event="reconciled", reason="Applied", **report.summary())


# Global handler instance
_handler = NamespaceHandler()


def reconcile_namespace(name: str) -> ReconcileOutcome:
    """Run one reconciliation pass with metrics."""
    return _handler.reconcile_with_metrics(name, lambda: _handler.reconcile(name))


# Global resync loop, started and stopped by the operator lifecycle handlers
resync = ResyncLoop(
    reconcile=lambda name: reconcile_namespace(name),
    list_names=lambda: list_namespace_names(_handler.core_api),
)


def run_tracked_pass(name: str) -> ReconcileOutcome:
    """Run a pass and schedule a retry if it failed or left a RoleBinding uncreated.

    Errors still propagate so kopf logs them.
    """
    try:
        outcome = reconcile_namespace(name)
    except Exception:
        resync.schedule_retry(name)
        raise
    resync.record(name, outcome)
    return outcome


@kopf.on.event(NAMESPACE_RESOURCE)
def handle_namespace_event(name: str, **kwargs: Any) -> None:
    """Reconcile a namespace on every notification."""
    run_tracked_pass(name)


@kopf.on.event(RBAC_API_GROUP, "v1", "rolebindings", labels={LABEL_MANAGED_BY: OPERATOR_NAME})
def handle_rolebinding_event(event: dict[str, Any], namespace: str, **kwargs: Any) -> None:
    """Reconcile the owning namespace when a managed RoleBinding is deleted."""
    if event.get("type") != "DELETED":
        return
    run_tracked_pass(namespace)
