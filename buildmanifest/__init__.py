"""buildmanifest: resolved dependency graph to build-info manifest and dependency tree."""

__version__ = "0.1.0"

from buildmanifest.collaborator import (
    ProjectModel,
    ResolvedConfiguration,
    ResolvedModule,
    load_project_model,
)
from buildmanifest.emitter import OutputEmitter
from buildmanifest.graph import DependencyGraphBuilder
from buildmanifest.identity import ExternalId, encode, parse
from buildmanifest.merger import merge_dependencies
from buildmanifest.models import BuildArtifact, BuildManifest, Dependency, DependencyNode
from buildmanifest.scopes import ScopePolicy
from buildmanifest.store import ManifestStore, reconcile

__all__ = [
    "BuildArtifact",
    "BuildManifest",
    "Dependency",
    "DependencyGraphBuilder",
    "DependencyNode",
    "ExternalId",
    "ManifestStore",
    "OutputEmitter",
    "ProjectModel",
    "ResolvedConfiguration",
    "ResolvedModule",
    "ScopePolicy",
    "encode",
    "load_project_model",
    "merge_dependencies",
    "parse",
    "reconcile",
]
