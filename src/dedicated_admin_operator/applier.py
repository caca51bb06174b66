"""Create the desired RoleBindings in a namespace.

Creation is idempotent: a RoleBinding that already exists counts as present,
and a failure on one RoleBinding never prevents the others from being tried.
Nothing is rolled back; the next reconciliation pass retries whatever is
missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from kubernetes.client.exceptions import ApiException

from . import metrics
from .builders.rolebinding import DESIRED_ROLEBINDINGS, RoleBindingTemplate
from .constants import FIELD_MANAGER
from .handlers.shared import call_api
from .utils.errors import sanitize_exception

logger = logging.getLogger(__name__)


class ApplyResult(str, Enum):
    """Outcome of a single RoleBinding creation attempt."""

    CREATED = "created"
    ALREADY_PRESENT = "already_present"
    ERROR = "error"


@dataclass(frozen=True)
class ItemOutcome:
    """Outcome for one desired RoleBinding."""

    name: str
    result: ApplyResult
    error: str | None = None


@dataclass
class ApplyReport:
    """Per-item outcomes of one apply, in declaration order."""

    namespace: str
    outcomes: list[ItemOutcome] = field(default_factory=list)

    def _count(self, result: ApplyResult) -> int:
        return sum(1 for outcome in self.outcomes if outcome.result == result)

    @property
    def created(self) -> int:
        return self._count(ApplyResult.CREATED)

    @property
    def already_present(self) -> int:
        return self._count(ApplyResult.ALREADY_PRESENT)

    @property
    def errored(self) -> int:
        return self._count(ApplyResult.ERROR)

    @property
    def failures(self) -> list[ItemOutcome]:
        return [outcome for outcome in self.outcomes if outcome.result == ApplyResult.ERROR]

    def summary(self) -> dict[str, int]:
        return {
            "created": self.created,
            "already_present": self.already_present,
            "errored": self.errored,
        }


def create_rolebinding(api: Any, namespace: str, template: RoleBindingTemplate) -> ItemOutcome:
    """Create one RoleBinding from a template, classifying the outcome.

    Args:
        api: RbacAuthorizationV1Api instance
        namespace: Target namespace
        template: Desired RoleBinding template

    Returns:
        Outcome of the attempt. Errors are reported, never raised.
    """
    body = template.build(namespace)
    try:
        call_api(
            "create_rolebinding",
            api.create_namespaced_role_binding,
            namespace=namespace,
            body=body,
            field_manager=FIELD_MANAGER,
        )
        outcome = ItemOutcome(name=template.name, result=ApplyResult.CREATED)
    except ApiException as e:
        if e.status == 409:
            outcome = ItemOutcome(name=template.name, result=ApplyResult.ALREADY_PRESENT)
        else:
            outcome = ItemOutcome(name=template.name, result=ApplyResult.ERROR, error=sanitize_exception(e))
    except Exception as e:
        outcome = ItemOutcome(name=template.name, result=ApplyResult.ERROR, error=sanitize_exception(e))

    metrics.rolebinding_operations_total.labels(rolebinding=template.name, result=outcome.result.value).inc()
    return outcome


def apply_desired_rolebindings(
    api: Any,
    namespace: str,
    desired: Iterable[RoleBindingTemplate] = DESIRED_ROLEBINDINGS,
) -> ApplyReport:
    """Ensure every desired RoleBinding exists in a namespace.

    Args:
        api: RbacAuthorizationV1Api instance
        namespace: Target namespace
        desired: RoleBinding templates, applied in order

    Returns:
        Report with one outcome per template
    """
    report = ApplyReport(namespace=namespace)

    for template in desired:
        logger.debug(f"Assigning RoleBinding {template.name} to namespace {namespace}")
        outcome = create_rolebinding(api, namespace, template)
        logger.debug(f"RoleBinding {template.name} in namespace {namespace}: {outcome.result.value}")
        report.outcomes.append(outcome)

    return report
