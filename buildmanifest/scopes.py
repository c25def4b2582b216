"""Scope filter — decides which configurations contribute dependencies."""

from __future__ import annotations

from dataclasses import dataclass


def _split_csv(value: str | None) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class ScopePolicy:
    """Include/exclude policy over scope (configuration) names.

    Every scope is included unless it is excluded, or an include list is
    configured and does not name it. Exclusion wins over inclusion.
    """

    excluded_scopes: frozenset[str] = frozenset()
    included_scopes: frozenset[str] | None = None

    def should_include(self, scope: str) -> bool:
        if scope in self.excluded_scopes:
            return False
        if self.included_scopes is not None:
            return scope in self.included_scopes
        return True

    @classmethod
    def from_csv(cls, included: str | None = None, excluded: str | None = None) -> ScopePolicy:
        """Build a policy from comma-separated scope lists.

        An empty or missing *included* value means "no include list".
        """
        included_set = _split_csv(included)
        return cls(
            excluded_scopes=_split_csv(excluded),
            included_scopes=included_set or None,
        )
