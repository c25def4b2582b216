"""Output emitter — write the manifest and the dependency tree to disk.

The tree file is nested ``{group, artifact, version, children}`` objects.
``json.dumps`` walks nested containers recursively, so the tree is
encoded by :func:`iter_tree_json` from an explicit stack instead; any
depth the graph builder produces can be written.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import structlog

from buildmanifest.models import BuildManifest, DependencyNode
from buildmanifest.store import ManifestStore, write_atomic

log = structlog.get_logger("buildmanifest.emitter")


def bdio_filename(project_name: str) -> str:
    return f"{project_name}_bdio.json"


def iter_tree_json(root: DependencyNode, indent: int = 2) -> Iterator[str]:
    """Yield the JSON text of *root* in chunks, laid out like ``json.dumps(indent=...)``.

    Shared nodes are written in full at every place they occur. Raises
    ``ValueError`` if a node is its own descendant.
    """
    # Entries: ("node", node, level) | ("text", chunk) | ("close", node, chunk)
    stack: list[tuple] = [("node", root, 0)]
    on_path: set[int] = set()
    while stack:
        entry = stack.pop()
        kind = entry[0]
        if kind == "text":
            yield entry[1]
            continue
        if kind == "close":
            on_path.discard(id(entry[1]))
            yield entry[2]
            continue

        node, level = entry[1], entry[2]
        if id(node) in on_path:
            raise ValueError(f"dependency tree has a cycle through {node.external_id}")

        pad = " " * (indent * level)
        inner = pad + " " * indent
        ext = node.external_id
        yield (
            "{\n"
            f"{inner}\"group\": {json.dumps(ext.group)},\n"
            f"{inner}\"artifact\": {json.dumps(ext.artifact)},\n"
            f"{inner}\"version\": {json.dumps(ext.version)},\n"
            f"{inner}\"children\": "
        )
        if not node.children:
            yield f"[]\n{pad}}}"
            continue

        yield "[\n"
        on_path.add(id(node))
        child_pad = inner + " " * indent
        stack.append(("close", node, f"\n{inner}]\n{pad}}}"))
        for i in range(len(node.children) - 1, -1, -1):
            stack.append(("node", node.children[i], level + 2))
            stack.append(("text", child_pad if i == 0 else f",\n{child_pad}"))


class OutputEmitter:
    """Writes ``build-info.json`` and ``<project>_bdio.json`` into one directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def emit_manifest(self, manifest: BuildManifest) -> Path:
        return ManifestStore(self.output_dir).persist(manifest)

    def emit_tree(self, tree: DependencyNode, project_name: str) -> Path:
        path = self.output_dir / bdio_filename(project_name)
        write_atomic(path, "".join(iter_tree_json(tree)) + "\n")
        log.info("tree.written", path=str(path), root=str(tree.external_id))
        return path

    def emit(
        self, manifest: BuildManifest, tree: DependencyNode, project_name: str
    ) -> tuple[Path, Path]:
        return self.emit_manifest(manifest), self.emit_tree(tree, project_name)
