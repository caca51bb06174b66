"""Namespace lifecycle gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .constants import PHASE_TERMINATING, REASON_NOT_FOUND, REASON_READY, REASON_TERMINATING


@dataclass(frozen=True)
class LifecycleDecision:
    """Whether a namespace may receive RoleBindings, and why."""

    proceed: bool
    reason: str
    phase: str | None = None


def get_phase(namespace: Any) -> str | None:
    """Get the phase from a V1Namespace, or None if it is not reported."""
    status = getattr(namespace, "status", None)
    return getattr(status, "phase", None) if status is not None else None


def is_terminating(namespace: Any) -> bool:
    """Check whether a namespace is being deleted."""
    if get_phase(namespace) == PHASE_TERMINATING:
        return True
    metadata = getattr(namespace, "metadata", None)
    return metadata is not None and getattr(metadata, "deletion_timestamp", None) is not None


def evaluate_lifecycle(namespace: Any | None) -> LifecycleDecision:
    """Decide whether reconciliation should continue for a namespace.

    A missing namespace is a clean skip: it is being created or deleted and
    the watch delivers it again once it settles. A terminating namespace is
    skipped so RoleBindings are not recreated while it is torn down. Any
    other phase, including an unreported one, proceeds.

    Args:
        namespace: V1Namespace from the API, or None if it was not found

    Returns:
        Lifecycle decision
    """
    if namespace is None:
        return LifecycleDecision(proceed=False, reason=REASON_NOT_FOUND)

    phase = get_phase(namespace)
    if is_terminating(namespace):
        return LifecycleDecision(proceed=False, reason=REASON_TERMINATING, phase=phase)

    return LifecycleDecision(proceed=True, reason=REASON_READY, phase=phase)
