"""Dependency merger — fold freshly resolved dependencies into a prior set."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import structlog

from buildmanifest.collaborator import ResolvedConfiguration, module_id
from buildmanifest.identity import ExternalId
from buildmanifest.models import Dependency
from buildmanifest.scopes import ScopePolicy

log = structlog.get_logger("buildmanifest.merger")


@dataclass(frozen=True)
class ScopedCoordinate:
    """One module observed under one scope."""

    scope: str
    external_id: ExternalId


def observations_from_configurations(
    configurations: Iterable[ResolvedConfiguration],
) -> Iterator[ScopedCoordinate]:
    """Flatten resolved configurations into scoped observations.

    Each first-level module contributes its full transitive artifact set,
    or its own coordinates when the build tool reports no artifacts.
    Every configuration is scanned; the scope policy is applied by
    :func:`merge_dependencies`.
    """
    for configuration in configurations:
        scope = configuration.name
        for module in configuration.dependencies:
            artifacts = module.all_module_artifacts()
            if artifacts:
                for artifact_id in artifacts:
                    yield ScopedCoordinate(scope, artifact_id)
            else:
                yield ScopedCoordinate(scope, module_id(module, scope))


def merge_dependencies(
    prior: Iterable[Dependency],
    observations: Iterable[ScopedCoordinate],
    policy: ScopePolicy,
) -> list[Dependency]:
    """Merge *observations* into *prior* and return the new dependency list.

    * known identity: the scope is added to its scope list (idempotent);
    * new identity: inserted with ``[scope]`` if the policy includes the
      scope, otherwise discarded.

    The policy gates insertion only: once an identity is recorded, later
    sightings add their scope whatever the policy says, and prior
    dependencies are always kept since they passed the filter when first
    recorded. A discarded sighting leaves no trace, so the same identity
    is inserted if it later shows up under an included scope. Inputs are
    not mutated.
    """
    merged: dict[ExternalId, Dependency] = {}
    for dep in prior:
        existing = merged.get(dep.external_id)
        if existing is None:
            merged[dep.external_id] = dep.copy()
        else:
            for scope in dep.scopes:
                existing.add_scope(scope)

    added = 0
    discarded = 0
    for obs in observations:
        existing = merged.get(obs.external_id)
        if existing is not None:
            existing.add_scope(obs.scope)
        elif policy.should_include(obs.scope):
            merged[obs.external_id] = Dependency(obs.external_id, [obs.scope])
            added += 1
        else:
            discarded += 1
            log.debug("merge.excluded", dependency=str(obs.external_id), scope=obs.scope)

    log.debug("merge.done", total=len(merged), added=added, discarded=discarded)
    return list(merged.values())
