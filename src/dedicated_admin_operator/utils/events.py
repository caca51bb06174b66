"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import EVENT_REASON_ROLEBINDING_CREATED, EVENT_REASON_ROLEBINDING_FAILED, KIND_NAMESPACE


def namespace_event_body(namespace: Any) -> dict[str, Any]:
    """Build the minimal object body kopf needs to attach an event to a V1Namespace."""
    metadata = namespace.metadata
    return {
        "apiVersion": "v1",
        "kind": KIND_NAMESPACE,
        "metadata": {"name": metadata.name, "uid": metadata.uid},
    }


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Body of the object the event is about
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_rolebinding_created(body: dict[str, Any], rolebinding: str) -> None:
    """Emit RoleBinding created event."""
    emit_event(body, EVENT_REASON_ROLEBINDING_CREATED, f"RoleBinding {rolebinding} created")


def emit_rolebinding_failed(body: dict[str, Any], rolebinding: str, error: str) -> None:
    """Emit RoleBinding failed event."""
    emit_event(body, EVENT_REASON_ROLEBINDING_FAILED, f"RoleBinding {rolebinding} failed: {error}", type_="Warning")
