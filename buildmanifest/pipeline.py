"""Pipeline — turn a resolved project model into build-info and tree files.

Two tasks share one output directory:

* :func:`gather_build_info` merges this project's dependencies into
  ``build-info.json`` (continuing the manifest of the same build id);
* :func:`create_dependency_tree` writes ``<project>_bdio.json``.

:func:`run` performs both.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

import structlog

from buildmanifest.collaborator import ProjectModel
from buildmanifest.core.config import RunConfig
from buildmanifest.emitter import OutputEmitter
from buildmanifest.graph import DependencyGraphBuilder
from buildmanifest.identity import ExternalId
from buildmanifest.merger import merge_dependencies, observations_from_configurations
from buildmanifest.models import DEFAULT_ARTIFACT_TYPE, BuildArtifact, BuildManifest, DependencyNode
from buildmanifest.store import ManifestStore, reconcile

log = structlog.get_logger("buildmanifest.pipeline")


@dataclass
class RunResult:
    """Outcome of a full run."""

    manifest: BuildManifest
    manifest_path: Path
    tree: DependencyNode
    tree_path: Path


def project_artifact(project: ProjectModel) -> BuildArtifact:
    return BuildArtifact(
        type=DEFAULT_ARTIFACT_TYPE,
        group=project.group,
        artifact=project.name,
        version=project.version,
    )


def _merged_manifest(store: ManifestStore, project: ProjectModel, config: RunConfig) -> BuildManifest:
    """Load, reconcile and merge; the caller must hold ``store.lock()``."""
    existing = store.load_or_none()
    manifest = reconcile(existing, config.build_id, project_artifact(project))
    dependencies = merge_dependencies(
        manifest.dependencies,
        observations_from_configurations(project.configurations),
        config.policy,
    )
    return replace(manifest, dependencies=dependencies)


def _tree_name(project: ProjectModel, config: RunConfig) -> str:
    return config.project_name or project.name


def _build_tree(project: ProjectModel, config: RunConfig) -> DependencyNode:
    root_id = ExternalId(
        project.group, _tree_name(project, config), config.version_name or project.version
    )
    log.info("tree.start", project=root_id.artifact, root=str(root_id))
    builder = DependencyGraphBuilder(config.policy, config.excluded_modules)
    return builder.build(root_id, project.configurations)


def gather_build_info(project: ProjectModel, config: RunConfig) -> tuple[BuildManifest, Path]:
    """Merge *project*'s resolved dependencies into the stored manifest.

    The whole load → reconcile → merge → persist sequence runs under the
    store lock, so sibling sub-projects writing to the same directory are
    serialized instead of losing each other's updates.
    """
    store = ManifestStore(config.output_dir)
    log.info("build_info.start", project=project.name, build_id=config.build_id)

    with store.lock():
        manifest = _merged_manifest(store, project, config)
        path = OutputEmitter(config.output_dir).emit_manifest(manifest)

    log.info(
        "build_info.finished",
        project=project.name,
        dependencies=len(manifest.dependencies),
    )
    return manifest, path


def create_dependency_tree(
    project: ProjectModel, config: RunConfig
) -> tuple[DependencyNode, Path]:
    """Walk *project*'s configurations and write the dependency tree file."""
    tree = _build_tree(project, config)
    path = OutputEmitter(config.output_dir).emit_tree(tree, _tree_name(project, config))
    return tree, path


def run(project: ProjectModel, config: RunConfig) -> RunResult:
    """Build the merged manifest and the tree in memory, then write both.

    Nothing is written if the graph walk fails.
    """
    store = ManifestStore(config.output_dir)
    log.info("run.start", project=project.name, build_id=config.build_id)

    with store.lock():
        manifest = _merged_manifest(store, project, config)
        tree = _build_tree(project, config)
        manifest_path, tree_path = OutputEmitter(config.output_dir).emit(
            manifest, tree, _tree_name(project, config)
        )

    log.info("run.finished", project=project.name, dependencies=len(manifest.dependencies))
    return RunResult(
        manifest=manifest,
        manifest_path=manifest_path,
        tree=tree,
        tree_path=tree_path,
    )
