"""Errors raised during a reconciliation pass."""

from __future__ import annotations


class PolicyLoadError(Exception):
    """Raised when the operator ConfigMap cannot be read."""

    pass


class ResourceFetchError(Exception):
    """Raised when reading a Namespace fails for a reason other than NotFound."""

    def __init__(self, name: str, status: int | None, message: str):
        super().__init__(message)
        self.name = name
        self.status = status


class RoleBindingApplyError(Exception):
    """Raised when RoleBinding failures are configured to fail the whole pass."""

    def __init__(self, namespace: str, failed: list[str]):
        super().__init__(f"Failed to create RoleBindings in namespace {namespace}: {', '.join(failed)}")
        self.namespace = namespace
        self.failed = failed
