"""Data models for build manifests and dependency trees."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from buildmanifest.identity import ExternalId

DEFAULT_ARTIFACT_TYPE = "org.gradle"


@dataclass
class Dependency:
    """A resolved dependency and every scope it was seen under."""

    external_id: ExternalId
    scopes: list[str] = field(default_factory=list)  # insertion order, unique

    @property
    def group(self) -> str:
        return self.external_id.group

    @property
    def artifact(self) -> str:
        return self.external_id.artifact

    @property
    def version(self) -> str:
        return self.external_id.version

    def add_scope(self, scope: str) -> bool:
        """Record *scope*; returns False if it was already present."""
        if scope in self.scopes:
            return False
        self.scopes.append(scope)
        return True

    def copy(self) -> Dependency:
        return Dependency(external_id=self.external_id, scopes=list(self.scopes))


@dataclass(frozen=True)
class BuildArtifact:
    """The project being built (root of the build, not a dependency)."""

    type: str
    group: str
    artifact: str
    version: str


@dataclass
class BuildManifest:
    """Build-info record persisted between sub-module runs of one build."""

    build_id: str | None
    artifact: BuildArtifact
    dependencies: list[Dependency] = field(default_factory=list)


@dataclass(eq=False)
class DependencyNode:
    """Node of the dependency tree.

    Compared by identity: a module reachable through several parents is a
    single shared node object.
    """

    external_id: ExternalId
    children: list[DependencyNode] = field(default_factory=list)

    def add_child(self, child: DependencyNode) -> bool:
        """Append *child* unless a node with the same identity is already a child."""
        if any(c.external_id == child.external_id for c in self.children):
            return False
        self.children.append(child)
        return True

    def iter_nodes(self) -> Iterator[DependencyNode]:
        """Yield each distinct node reachable from this one (pre-order)."""
        seen: set[int] = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            stack.extend(reversed(node.children))
