"""Builder for the RoleBindings granted in every managed namespace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..constants import (
    DEDICATED_ADMINS_GROUP,
    KIND_CLUSTER_ROLE,
    KIND_GROUP,
    KIND_ROLE_BINDING,
    LABEL_MANAGED_BY,
    OPERATOR_NAME,
    RBAC_API_GROUP,
    RBAC_API_VERSION,
)


@dataclass(frozen=True)
class Subject:
    """RoleBinding subject."""

    name: str
    kind: str = KIND_GROUP
    api_group: str = RBAC_API_GROUP

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "apiGroup": self.api_group, "name": self.name}


@dataclass(frozen=True)
class RoleBindingTemplate:
    """Namespace independent description of a RoleBinding."""

    name: str
    role_name: str
    subjects: tuple[Subject, ...]
    role_kind: str = KIND_CLUSTER_ROLE

    def build(self, namespace: str) -> dict[str, Any]:
        """Create a RoleBinding body scoped to a namespace.

        Every call returns a new dict, so callers may modify the result
        without affecting the template or other namespaces.

        Args:
            namespace: Namespace the RoleBinding is created in

        Returns:
            RoleBinding manifest
        """
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": KIND_ROLE_BINDING,
            "metadata": {
                "name": self.name,
                "namespace": namespace,
                "labels": {LABEL_MANAGED_BY: OPERATOR_NAME},
            },
            "roleRef": {
                "apiGroup": RBAC_API_GROUP,
                "kind": self.role_kind,
                "name": self.role_name,
            },
            "subjects": [subject.to_dict() for subject in self.subjects],
        }


_DEDICATED_ADMINS = (Subject(name=DEDICATED_ADMINS_GROUP),)

DESIRED_ROLEBINDINGS: tuple[RoleBindingTemplate, ...] = (
    RoleBindingTemplate(
        name="dedicated-admins-project",
        role_name="dedicated-admins-project",
        subjects=_DEDICATED_ADMINS,
    ),
    RoleBindingTemplate(
        name="admin-dedicated-admins",
        role_name="admin",
        subjects=_DEDICATED_ADMINS,
    ),
)
