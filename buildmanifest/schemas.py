"""On-disk JSON schemas (pydantic) for the manifest and the project export."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from buildmanifest.identity import ExternalId
from buildmanifest.models import BuildArtifact, BuildManifest, Dependency


class DependencySchema(BaseModel):
    group: str
    artifact: str
    version: str
    scopes: list[str] = Field(default_factory=list)


class BuildArtifactSchema(BaseModel):
    type: str
    group: str
    artifact: str
    version: str


class BuildManifestSchema(BaseModel):
    """``build-info.json`` document."""

    model_config = ConfigDict(populate_by_name=True)

    build_id: str | None = Field(default=None, alias="buildId")
    artifact: BuildArtifactSchema
    dependencies: list[DependencySchema] = Field(default_factory=list)

    @classmethod
    def from_manifest(cls, manifest: BuildManifest) -> BuildManifestSchema:
        a = manifest.artifact
        return cls(
            build_id=manifest.build_id,
            artifact=BuildArtifactSchema(
                type=a.type, group=a.group, artifact=a.artifact, version=a.version
            ),
            dependencies=[
                DependencySchema(
                    group=d.group,
                    artifact=d.artifact,
                    version=d.version,
                    scopes=list(d.scopes),
                )
                for d in manifest.dependencies
            ],
        )

    def to_manifest(self) -> BuildManifest:
        a = self.artifact
        deps: list[Dependency] = []
        for d in self.dependencies:
            # Drop duplicate scope names a hand-edited file might carry.
            scopes = list(dict.fromkeys(d.scopes))
            deps.append(Dependency(ExternalId(d.group, d.artifact, d.version), scopes))
        return BuildManifest(
            build_id=self.build_id,
            artifact=BuildArtifact(
                type=a.type, group=a.group, artifact=a.artifact, version=a.version
            ),
            dependencies=deps,
        )


# ── project export (written by the build plugin) ──
#
# Modules form a flat table keyed by an export-local id; ``children`` and
# configuration ``dependencies`` refer to those ids, so the JSON nesting
# depth is fixed however deep the dependency graph is.


class ArtifactRefSchema(BaseModel):
    group: str
    name: str = Field(min_length=1)
    version: str


class ModuleEntrySchema(BaseModel):
    group: str
    name: str = Field(min_length=1)
    version: str
    children: list[str] = Field(default_factory=list)
    artifacts: list[ArtifactRefSchema] = Field(default_factory=list)


class ConfigurationSchema(BaseModel):
    name: str = Field(min_length=1)
    dependencies: list[str] = Field(default_factory=list)


class ProjectExportSchema(BaseModel):
    group: str = ""
    name: str = Field(min_length=1)
    version: str = "unspecified"
    modules: dict[str, ModuleEntrySchema] = Field(default_factory=dict)
    configurations: list[ConfigurationSchema] = Field(default_factory=list)
