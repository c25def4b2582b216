"""Tests for OutputEmitter and tree encoding."""

from __future__ import annotations

import json

import pytest

from buildmanifest.emitter import OutputEmitter, bdio_filename, iter_tree_json
from buildmanifest.identity import ExternalId
from buildmanifest.models import BuildArtifact, BuildManifest, Dependency, DependencyNode
from buildmanifest.store import BUILD_INFO_FILE_NAME


def _node(name: str, *children: DependencyNode) -> DependencyNode:
    return DependencyNode(ExternalId("g", name, "1"), list(children))


def _expected(name: str, *children: dict) -> dict:
    return {"group": "g", "artifact": name, "version": "1", "children": list(children)}


def _encode(root: DependencyNode) -> str:
    return "".join(iter_tree_json(root))


def _chain(depth: int) -> DependencyNode:
    head = _node("m0")
    current = head
    for i in range(1, depth):
        nxt = _node(f"m{i}")
        current.children.append(nxt)
        current = nxt
    return head


class TestIterTreeJson:
    def test_leaf_matches_json_dumps(self):
        assert _encode(_node("a")) == json.dumps(_expected("a"), indent=2)

    def test_nested_matches_json_dumps(self):
        root = _node("root", _node("b", _node("c"), _node("d")), _node("a"))
        expected = _expected("root", _expected("b", _expected("c"), _expected("d")), _expected("a"))
        assert _encode(root) == json.dumps(expected, indent=2)

    def test_escapes_strings(self):
        root = DependencyNode(ExternalId('we"ird', "café", "1\\2"))
        assert json.loads(_encode(root))["group"] == 'we"ird'
        assert _encode(root) == json.dumps(
            {"group": 'we"ird', "artifact": "café", "version": "1\\2", "children": []},
            indent=2,
        )

    def test_shared_node_written_at_each_parent(self):
        shared = _node("d", _node("e"))
        rendered = json.loads(_encode(_node("root", _node("b", shared), _node("c", shared))))
        left = rendered["children"][0]["children"][0]
        right = rendered["children"][1]["children"][0]
        assert left == right == _expected("d", _expected("e"))

    def test_cycle_rejected(self):
        a = _node("a")
        b = _node("b", a)
        a.children.append(b)
        with pytest.raises(ValueError, match="cycle"):
            _encode(_node("root", a))

    def test_deep_chain_no_recursion_limit(self):
        text = _encode(_node("root", _chain(5000)))
        assert text.count('"artifact"') == 5001
        assert '"artifact": "m4999"' in text
        assert text.startswith("{\n") and text.endswith("\n}")


class TestOutputEmitter:
    def test_bdio_filename(self):
        assert bdio_filename("app") == "app_bdio.json"

    def test_emit_writes_both_files(self, tmp_path):
        manifest = BuildManifest(
            build_id="B1",
            artifact=BuildArtifact("org.gradle", "com.acme", "app", "1.0"),
            dependencies=[Dependency(ExternalId("com.x", "lib", "1.0"), ["compile"])],
        )
        tree = _node("app", _node("lib"))
        out = tmp_path / "out"

        manifest_path, tree_path = OutputEmitter(out).emit(manifest, tree, "app")

        assert manifest_path == out / BUILD_INFO_FILE_NAME
        assert tree_path == out / "app_bdio.json"
        assert json.loads(manifest_path.read_text())["dependencies"][0]["scopes"] == ["compile"]
        assert json.loads(tree_path.read_text()) == _expected("app", _expected("lib"))

    def test_emit_tree_overwrites(self, tmp_path):
        emitter = OutputEmitter(tmp_path)
        emitter.emit_tree(_node("app", _node("old")), "app")
        path = emitter.emit_tree(_node("app", _node("new")), "app")
        assert json.loads(path.read_text())["children"][0]["artifact"] == "new"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["app_bdio.json"]

    def test_emit_deep_tree(self, tmp_path):
        path = OutputEmitter(tmp_path).emit_tree(_node("app", _chain(5000)), "app")
        text = path.read_text()
        assert text.count('"artifact"') == 5001
        assert text.endswith("}\n")
