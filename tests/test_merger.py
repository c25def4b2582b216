"""Tests for the dependency merger."""

from __future__ import annotations

import pytest

from buildmanifest.collaborator import ResolvedConfiguration, ResolvedModule
from buildmanifest.exceptions import CollaboratorDataError
from buildmanifest.identity import ExternalId
from buildmanifest.merger import (
    ScopedCoordinate,
    merge_dependencies,
    observations_from_configurations,
)
from buildmanifest.models import Dependency
from buildmanifest.scopes import ScopePolicy

LIB = ExternalId("com.x", "lib", "1.0")
UTIL = ExternalId("com.y", "util", "2.0")


def _obs(scope: str, ext: ExternalId = LIB) -> ScopedCoordinate:
    return ScopedCoordinate(scope, ext)


def _by_id(deps: list[Dependency]) -> dict[ExternalId, list[str]]:
    return {d.external_id: d.scopes for d in deps}


# ── merge_dependencies ──────────────────────────────────────────────────


class TestMergeDependencies:
    def test_fresh_insert(self):
        result = merge_dependencies([], [_obs("compile")], ScopePolicy())
        assert _by_id(result) == {LIB: ["compile"]}

    def test_scope_union_in_insertion_order(self):
        result = merge_dependencies([], [_obs("compile"), _obs("test")], ScopePolicy())
        assert _by_id(result) == {LIB: ["compile", "test"]}

    def test_duplicate_scope_is_noop(self):
        result = merge_dependencies([], [_obs("compile"), _obs("compile")], ScopePolicy())
        assert _by_id(result) == {LIB: ["compile"]}

    def test_prior_extended(self):
        prior = [Dependency(LIB, ["compile"])]
        result = merge_dependencies(prior, [_obs("test"), _obs("compile", UTIL)], ScopePolicy())
        assert _by_id(result) == {LIB: ["compile", "test"], UTIL: ["compile"]}

    def test_prior_not_mutated(self):
        prior = [Dependency(LIB, ["compile"])]
        merge_dependencies(prior, [_obs("test")], ScopePolicy())
        assert prior[0].scopes == ["compile"]

    def test_excluded_new_identity_discarded(self):
        policy = ScopePolicy(excluded_scopes=frozenset({"test"}))
        result = merge_dependencies([], [_obs("test")], policy)
        assert result == []

    def test_prior_kept_even_if_now_excluded(self):
        policy = ScopePolicy(excluded_scopes=frozenset({"compile"}))
        prior = [Dependency(LIB, ["compile"])]
        result = merge_dependencies(prior, [], policy)
        assert _by_id(result) == {LIB: ["compile"]}

    def test_known_identity_gains_excluded_scope(self):
        policy = ScopePolicy(excluded_scopes=frozenset({"test"}))
        result = merge_dependencies([], [_obs("compile"), _obs("test")], policy)
        assert _by_id(result) == {LIB: ["compile", "test"]}

    def test_included_sighting_after_excluded_one_inserts(self):
        policy = ScopePolicy(excluded_scopes=frozenset({"test"}))
        result = merge_dependencies([], [_obs("test"), _obs("compile")], policy)
        assert _by_id(result) == {LIB: ["compile"]}

    def test_idempotent(self):
        fresh = [_obs("compile"), _obs("test"), _obs("runtime", UTIL)]
        once = merge_dependencies([], fresh, ScopePolicy())
        twice = merge_dependencies(once, fresh, ScopePolicy())
        assert _by_id(once) == _by_id(twice)

    def test_colon_in_coordinates_does_not_collide(self):
        first = ExternalId("a:b", "c", "d")
        second = ExternalId("a", "b:c", "d")
        result = merge_dependencies([], [_obs("compile", first), _obs("test", second)], ScopePolicy())
        assert _by_id(result) == {first: ["compile"], second: ["test"]}

    def test_duplicate_prior_entries_collapsed(self):
        prior = [Dependency(LIB, ["compile"]), Dependency(LIB, ["test"])]
        result = merge_dependencies(prior, [], ScopePolicy())
        assert _by_id(result) == {LIB: ["compile", "test"]}


# ── observations_from_configurations ────────────────────────────────────


class TestObservations:
    def test_uses_transitive_artifacts(self):
        module = ResolvedModule("com.x", "lib", "1.0", artifacts=[LIB, UTIL])
        config = ResolvedConfiguration("compile", [module])
        assert list(observations_from_configurations([config])) == [
            ScopedCoordinate("compile", LIB),
            ScopedCoordinate("compile", UTIL),
        ]

    def test_falls_back_to_module_coordinates(self):
        module = ResolvedModule("com.x", "lib", "1.0")
        config = ResolvedConfiguration("compile", [module])
        assert list(observations_from_configurations([config])) == [
            ScopedCoordinate("compile", LIB)
        ]

    def test_every_configuration_scanned(self):
        configs = [
            ResolvedConfiguration("compile", [ResolvedModule("com.x", "lib", "1.0")]),
            ResolvedConfiguration("test", [ResolvedModule("com.x", "lib", "1.0")]),
        ]
        scopes = [o.scope for o in observations_from_configurations(configs)]
        assert scopes == ["compile", "test"]

    def test_incomplete_module_rejected(self):
        module = ResolvedModule("com.x", None, "1.0")  # type: ignore[arg-type]
        config = ResolvedConfiguration("compile", [module])
        with pytest.raises(CollaboratorDataError) as exc_info:
            list(observations_from_configurations([config]))
        assert exc_info.value.scope == "compile"
        assert "compile" in str(exc_info.value)
