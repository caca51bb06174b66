"""Namespace exclusion policy.

The policy is a comma separated list of regular expressions stored in the
operator ConfigMap. A namespace matching any rule is left alone. Rules are
unanchored: ``kube-`` excludes ``kube-system`` as well as ``my-kube-tools``.
Whitespace around each rule is stripped and empty entries are dropped, so
``"kube-.*, openshift-.*,"`` holds exactly two rules.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .constants import POLICY_DELIMITER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExclusionRule:
    """A single exclusion rule.

    Attributes:
        pattern: The rule as written in the ConfigMap.
        regex: The compiled pattern, or None if it failed to compile.
        error: Compilation error message for invalid rules.
    """

    pattern: str
    regex: re.Pattern[str] | None
    error: str | None = None

    @property
    def valid(self) -> bool:
        return self.regex is not None

    def matches(self, identifier: str) -> bool:
        """Check the rule against an identifier. Invalid rules never match."""
        if self.regex is None:
            return False
        return self.regex.search(identifier) is not None


def compile_rule(pattern: str) -> ExclusionRule:
    """Compile one rule, keeping invalid patterns as never-matching rules."""
    try:
        return ExclusionRule(pattern=pattern, regex=re.compile(pattern))
    except re.error as e:
        logger.warning(f"Ignoring invalid exclusion rule {pattern!r}: {e}")
        return ExclusionRule(pattern=pattern, regex=None, error=str(e))


@dataclass(frozen=True)
class ExclusionPolicy:
    """Compiled set of exclusion rules, evaluated in declaration order."""

    rules: tuple[ExclusionRule, ...] = ()

    @classmethod
    def from_field(cls, raw: str | None) -> ExclusionPolicy:
        """Build a policy from the raw ConfigMap field.

        Empty entries are dropped, so an empty or missing field gives a policy
        with no rules. An empty pattern would otherwise match every namespace.

        Args:
            raw: Comma separated rules, or None if the field is absent

        Returns:
            Compiled exclusion policy
        """
        if not raw:
            return cls()

        patterns = [entry.strip() for entry in raw.split(POLICY_DELIMITER)]
        return cls(rules=tuple(compile_rule(p) for p in patterns if p))

    @property
    def invalid_rules(self) -> list[ExclusionRule]:
        return [rule for rule in self.rules if not rule.valid]

    def match(self, identifier: str) -> str | None:
        """Return the pattern of the first rule matching the identifier, if any."""
        for rule in self.rules:
            if rule.matches(identifier):
                return rule.pattern
        return None

    def excludes(self, identifier: str) -> bool:
        return self.match(identifier) is not None


def is_excluded(identifier: str, policy_field: str | None) -> bool:
    """Check whether an identifier is excluded by a raw policy field.

    Args:
        identifier: Namespace name
        policy_field: Raw comma separated rule list (may be empty or None)

    Returns:
        True if any rule matches the identifier
    """
    return ExclusionPolicy.from_field(policy_field).excludes(identifier)
