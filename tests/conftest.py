"""Shared pytest fixtures for buildmanifest tests."""

import json

import pytest


@pytest.fixture
def export_data():
    """A small project export: one compile and one test configuration."""
    return {
        "group": "com.acme",
        "name": "app",
        "version": "1.0",
        "modules": {
            "com.x:lib:1.0": {
                "group": "com.x",
                "name": "lib",
                "version": "1.0",
                "children": ["com.y:util:2.0"],
                "artifacts": [
                    {"group": "com.x", "name": "lib", "version": "1.0"},
                    {"group": "com.y", "name": "util", "version": "2.0"},
                ],
            },
            "com.y:util:2.0": {"group": "com.y", "name": "util", "version": "2.0"},
            "junit:junit:4.12": {"group": "junit", "name": "junit", "version": "4.12"},
        },
        "configurations": [
            {"name": "compile", "dependencies": ["com.x:lib:1.0"]},
            {"name": "test", "dependencies": ["junit:junit:4.12"]},
        ],
    }


@pytest.fixture
def export_file(tmp_path, export_data):
    path = tmp_path / "project.json"
    path.write_text(json.dumps(export_data))
    return path


@pytest.fixture
def chain_export():
    """Factory: export whose compile configuration is one chain m0 -> m1 -> ... of *depth* modules."""

    def _build(depth: int) -> dict:
        modules = {
            f"m{i}": {
                "group": "g",
                "name": f"m{i}",
                "version": "1",
                "children": [f"m{i + 1}"] if i + 1 < depth else [],
            }
            for i in range(depth)
        }
        return {
            "group": "com.acme",
            "name": "app",
            "version": "1.0",
            "modules": modules,
            "configurations": [{"name": "compile", "dependencies": ["m0"]}],
        }

    return _build
