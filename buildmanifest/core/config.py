"""Run configuration — CLI flags with environment-variable fallbacks."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from buildmanifest.scopes import ScopePolicy

ENV_BUILD_ID = "BUILDMANIFEST_BUILD_ID"
ENV_OUTPUT_DIR = "BUILDMANIFEST_OUTPUT_DIR"
ENV_INCLUDED_SCOPES = "BUILDMANIFEST_INCLUDED_SCOPES"
ENV_EXCLUDED_SCOPES = "BUILDMANIFEST_EXCLUDED_SCOPES"

DEFAULT_OUTPUT_DIR = "build/BlackDuck"


@dataclass(frozen=True)
class RunConfig:
    """Everything one invocation needs besides the project model."""

    output_dir: Path
    build_id: str | None
    policy: ScopePolicy
    excluded_modules: tuple[str, ...] = ()
    project_name: str | None = None  # overrides the tree root's artifact name
    version_name: str | None = None  # overrides the tree root's version


def resolve_build_id(flag: str | None) -> str | None:
    """CLI flag first, then BUILDMANIFEST_BUILD_ID; blank counts as missing."""
    value = flag if flag is not None else os.environ.get(ENV_BUILD_ID)
    if value is None or not value.strip():
        return None
    return value.strip()


def resolve_output_dir(flag: str | None) -> Path:
    return Path(flag or os.environ.get(ENV_OUTPUT_DIR) or DEFAULT_OUTPUT_DIR)


def resolve_policy(included: str | None, excluded: str | None) -> ScopePolicy:
    """Build the scope policy; each flag overrides its environment variable."""
    if included is None:
        included = os.environ.get(ENV_INCLUDED_SCOPES)
    if excluded is None:
        excluded = os.environ.get(ENV_EXCLUDED_SCOPES)
    return ScopePolicy.from_csv(included=included, excluded=excluded)


def load_config(
    *,
    output_dir: str | None = None,
    build_id: str | None = None,
    included_scopes: str | None = None,
    excluded_scopes: str | None = None,
    excluded_modules: tuple[str, ...] = (),
    project_name: str | None = None,
    version_name: str | None = None,
) -> RunConfig:
    return RunConfig(
        output_dir=resolve_output_dir(output_dir),
        build_id=resolve_build_id(build_id),
        policy=resolve_policy(included_scopes, excluded_scopes),
        excluded_modules=tuple(excluded_modules),
        project_name=project_name,
        version_name=version_name,
    )
