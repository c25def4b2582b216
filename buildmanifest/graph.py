"""Dependency graph builder — walk resolved modules into a dependency tree."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from buildmanifest.collaborator import ResolvedConfiguration, ResolvedModule, module_id
from buildmanifest.identity import ExternalId
from buildmanifest.models import DependencyNode
from buildmanifest.scopes import ScopePolicy

log = structlog.get_logger("buildmanifest.graph")


class DependencyGraphBuilder:
    """Build a :class:`DependencyNode` tree rooted at the project.

    The walk is depth-first and iterative (an explicit stack of child
    iterators), so tree depth is not bounded by the interpreter's recursion
    limit. Nodes are memoized by :class:`ExternalId`: a module reached from
    several parents becomes one shared node and its subtree is walked once.

    A node is registered before its children are walked. A reference back
    to a node still on the current walk path (a cycle in the build tool's
    data) is dropped, so no node ends up as its own descendant.
    """

    def __init__(
        self,
        policy: ScopePolicy | None = None,
        excluded_modules: Iterable[str] = (),
    ) -> None:
        self._policy = policy or ScopePolicy()
        self._excluded_modules = frozenset(excluded_modules)

    def build(
        self,
        root_id: ExternalId,
        configurations: Iterable[ResolvedConfiguration],
    ) -> DependencyNode:
        root = DependencyNode(root_id)
        visited: dict[ExternalId, DependencyNode] = {root_id: root}
        on_path: set[ExternalId] = {root_id}

        for configuration in configurations:
            if not self._policy.should_include(configuration.name):
                log.debug("graph.scope_skipped", scope=configuration.name)
                continue
            self._walk(root, configuration, visited, on_path)

        log.debug("graph.built", root=str(root_id), nodes=len(visited))
        return root

    def _walk(
        self,
        root: DependencyNode,
        configuration: ResolvedConfiguration,
        visited: dict[ExternalId, DependencyNode],
        on_path: set[ExternalId],
    ) -> None:
        scope = configuration.name
        stack: list[tuple[DependencyNode, Iterator[ResolvedModule]]] = [
            (root, iter(configuration.dependencies))
        ]
        while stack:
            parent, pending = stack[-1]
            module = next(pending, None)
            if module is None:
                stack.pop()
                if parent is not root:
                    on_path.discard(parent.external_id)
                continue

            if self._is_excluded(module):
                log.debug("graph.module_excluded", module=module.name, scope=scope)
                continue

            ext_id = module_id(module, scope)
            node = visited.get(ext_id)
            if node is not None:
                if ext_id in on_path:
                    log.debug(
                        "graph.cycle_skipped",
                        parent=str(parent.external_id),
                        module=str(ext_id),
                    )
                else:
                    parent.add_child(node)
                continue

            node = DependencyNode(ext_id)
            visited[ext_id] = node
            parent.add_child(node)
            on_path.add(ext_id)
            stack.append((node, iter(module.children)))

    def _is_excluded(self, module: ResolvedModule) -> bool:
        if not self._excluded_modules:
            return False
        return (
            module.name in self._excluded_modules
            or f"{module.group}:{module.name}" in self._excluded_modules
        )
