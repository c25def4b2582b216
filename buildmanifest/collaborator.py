"""Host build model — resolved configurations handed to us by the build tool.

The build tool does the resolving; this module only describes the shape
of its output and loads the JSON export written by the build plugin.
Modules are listed once in a flat table and referenced by id, which also
lets the export describe shared and cyclic module references::

    {
      "group": "com.acme", "name": "app", "version": "1.0",
      "modules": {
        "com.x:lib:1.0": {"group": "com.x", "name": "lib", "version": "1.0",
                          "children": ["com.y:util:2.0"],
                          "artifacts": [{"group": ..., "name": ..., "version": ...}]},
        "com.y:util:2.0": {"group": "com.y", "name": "util", "version": "2.0"}
      },
      "configurations": [{"name": "compile", "dependencies": ["com.x:lib:1.0"]}]
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from buildmanifest.exceptions import CollaboratorDataError
from buildmanifest.identity import ExternalId
from buildmanifest.schemas import ProjectExportSchema


@dataclass(eq=False)
class ResolvedModule:
    """A resolved module reference and its transitive module references."""

    group: str
    name: str
    version: str
    children: list[ResolvedModule] = field(default_factory=list)
    artifacts: list[ExternalId] = field(default_factory=list)

    def all_module_artifacts(self) -> list[ExternalId]:
        """Full transitive artifact set reported by the build tool (may be empty)."""
        return list(self.artifacts)


@dataclass
class ResolvedConfiguration:
    """A named scope and its first-level resolved modules."""

    name: str
    dependencies: list[ResolvedModule] = field(default_factory=list)


@dataclass
class ProjectModel:
    """Coordinates and resolved configurations of the project being built."""

    group: str
    name: str
    version: str
    configurations: list[ResolvedConfiguration] = field(default_factory=list)


def module_id(module: ResolvedModule, scope: str | None = None) -> ExternalId:
    """Return the identity of *module*, rejecting incomplete coordinates."""
    coords = (module.group, module.name, module.version)
    if any(not isinstance(c, str) for c in coords) or not module.name:
        raise CollaboratorDataError(
            "resolved module has incomplete coordinates",
            scope=scope,
            module=":".join(str(c) for c in coords),
        )
    return ExternalId(module.group, module.name, module.version)


def _link_modules(export: ProjectExportSchema) -> dict[str, ResolvedModule]:
    """Create one ResolvedModule per table entry, then wire children by id."""
    modules = {
        key: ResolvedModule(
            entry.group,
            entry.name,
            entry.version,
            artifacts=[ExternalId(a.group, a.name, a.version) for a in entry.artifacts],
        )
        for key, entry in export.modules.items()
    }
    for key, entry in export.modules.items():
        module = modules[key]
        for child_key in entry.children:
            child = modules.get(child_key)
            if child is None:
                raise CollaboratorDataError(
                    f"module {key!r} lists unknown child {child_key!r}", module=key
                )
            module.children.append(child)
    return modules


def load_project_model(path: Path) -> ProjectModel:
    """Load a project export written by the build plugin.

    Raises :class:`CollaboratorDataError` if the file is missing,
    unreadable, does not match the export schema, or refers to a module
    id that is not in the module table.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CollaboratorDataError(f"cannot read project export {path}: {e}") from e

    try:
        export = ProjectExportSchema.model_validate_json(raw)
    except ValidationError as e:
        messages = []
        for err in e.errors():
            loc = " -> ".join(str(part) for part in err["loc"])
            messages.append(f"{loc}: {err['msg']}")
        raise CollaboratorDataError(
            f"invalid project export {path}: {'; '.join(messages)}"
        ) from e

    modules = _link_modules(export)
    configurations = []
    for cfg in export.configurations:
        dependencies = []
        for key in cfg.dependencies:
            module = modules.get(key)
            if module is None:
                raise CollaboratorDataError(
                    f"configuration lists unknown module {key!r}", scope=cfg.name, module=key
                )
            dependencies.append(module)
        configurations.append(ResolvedConfiguration(name=cfg.name, dependencies=dependencies))

    return ProjectModel(
        group=export.group,
        name=export.name,
        version=export.version,
        configurations=configurations,
    )
