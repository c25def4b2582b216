"""Custom exceptions for buildmanifest."""

from __future__ import annotations

from pathlib import Path


class BuildManifestError(Exception):
    """Base exception for all buildmanifest errors."""


class ManifestNotFoundError(BuildManifestError):
    """Raised when no manifest file exists in the output directory."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No build manifest at {path}")


class CorruptManifestError(BuildManifestError):
    """Raised when an existing manifest file cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Build manifest at {path} is unreadable: {reason}")


class ManifestIOError(BuildManifestError):
    """Raised when the output directory or one of its files cannot be read or written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"I/O failure on {path}: {reason}")


class CollaboratorDataError(BuildManifestError):
    """Raised when the host build model supplies malformed or incomplete module data."""

    def __init__(self, message: str, *, scope: str | None = None, module: str | None = None):
        self.scope = scope
        self.module = module
        context = []
        if scope is not None:
            context.append(f"scope={scope!r}")
        if module is not None:
            context.append(f"module={module!r}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
