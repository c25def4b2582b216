"""Build manifest store — load, reconcile and persist ``build-info.json``.

One manifest exists per output directory. Sub-projects of a multi-module
build run one after another against the same directory; each run reads
the manifest, merges its dependencies and writes it back. When the stored
build id matches the current one the manifest is extended, otherwise it
belongs to an unrelated earlier build and is replaced.

Writes go to a temp file in the same directory followed by ``os.replace``,
so a reader never sees a half-written manifest. :meth:`ManifestStore.lock`
serializes the read-merge-write cycle across processes (POSIX ``flock``).
"""

from __future__ import annotations

import fcntl
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog
from pydantic import ValidationError

from buildmanifest.exceptions import (
    CorruptManifestError,
    ManifestIOError,
    ManifestNotFoundError,
)
from buildmanifest.models import BuildArtifact, BuildManifest
from buildmanifest.schemas import BuildManifestSchema

log = structlog.get_logger("buildmanifest.store")

BUILD_INFO_FILE_NAME = "build-info.json"


def ensure_dir(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ManifestIOError(directory, f"cannot create directory: {e}") from e


def write_atomic(path: Path, text: str) -> None:
    """Write *text* to *path* via temp file + rename (directory created if missing)."""
    ensure_dir(path.parent)
    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise ManifestIOError(path, f"cannot create temp file: {e}") from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise ManifestIOError(path, str(e)) from e


def reconcile(
    existing: BuildManifest | None,
    current_build_id: str | None,
    new_artifact: BuildArtifact,
) -> BuildManifest:
    """Decide whether this run continues *existing* or starts a fresh manifest.

    *existing* is returned as-is (artifact and build id preserved) only when
    its build id equals *current_build_id*. A missing current build id never
    matches, so every run without one starts fresh.
    """
    if current_build_id is None:
        log.warning("manifest.build_id_missing", artifact=new_artifact.artifact)
    elif existing is not None and existing.build_id == current_build_id:
        log.info(
            "manifest.continue",
            build_id=current_build_id,
            dependencies=len(existing.dependencies),
        )
        return existing

    if existing is not None:
        log.info(
            "manifest.replaced",
            old_build_id=existing.build_id,
            build_id=current_build_id,
        )
    else:
        log.info("manifest.fresh", build_id=current_build_id)
    return BuildManifest(build_id=current_build_id, artifact=new_artifact, dependencies=[])


class ManifestStore:
    """Owns ``build-info.json`` inside one output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    @property
    def path(self) -> Path:
        return self.output_dir / BUILD_INFO_FILE_NAME

    def load(self) -> BuildManifest:
        """Read the stored manifest.

        Raises:
            ManifestNotFoundError: no file, or the file is empty.
            CorruptManifestError: non-empty content that is not a manifest.
            ManifestIOError: the file exists but cannot be read.
        """
        path = self.path
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ManifestNotFoundError(path) from None
        except OSError as e:
            raise ManifestIOError(path, str(e)) from e

        if not raw.strip():
            raise ManifestNotFoundError(path)

        try:
            schema = BuildManifestSchema.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptManifestError(path, f"{e.error_count()} validation error(s): {e}") from e
        return schema.to_manifest()

    def load_or_none(self) -> BuildManifest | None:
        try:
            return self.load()
        except ManifestNotFoundError:
            log.debug("manifest.absent", path=str(self.path))
            return None

    def persist(self, manifest: BuildManifest) -> Path:
        """Overwrite the stored manifest with *manifest*."""
        text = BuildManifestSchema.from_manifest(manifest).model_dump_json(by_alias=True, indent=2)
        write_atomic(self.path, text + "\n")
        log.info(
            "manifest.written",
            path=str(self.path),
            build_id=manifest.build_id,
            dependencies=len(manifest.dependencies),
        )
        return self.path

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold an exclusive advisory lock on this output directory."""
        ensure_dir(self.output_dir)
        lock_path = self.output_dir / f".{BUILD_INFO_FILE_NAME}.lock"
        try:
            lock_file = open(lock_path, "w")
        except OSError as e:
            raise ManifestIOError(lock_path, f"cannot open lock file: {e}") from e
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            lock_file.close()
