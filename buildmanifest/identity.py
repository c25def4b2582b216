"""Identity codec — canonical (group, artifact, version) identifiers."""

from __future__ import annotations

from dataclasses import dataclass

SEPARATOR = ":"


@dataclass(frozen=True)
class ExternalId:
    """Canonical identity of a module, used as the dedup key everywhere.

    Equality and hashing use the three fields directly (exact,
    case-sensitive). Maps are keyed by the ``ExternalId`` itself, so a
    coordinate containing ``:`` cannot collide with another one even
    though its :func:`encode` form is ambiguous.
    """

    group: str
    artifact: str
    version: str

    def __str__(self) -> str:
        return encode(self.group, self.artifact, self.version)


def encode(group: str, artifact: str, version: str) -> str:
    """Return ``group:artifact:version`` (no escaping of the separator)."""
    return f"{group}{SEPARATOR}{artifact}{SEPARATOR}{version}"


def parse(text: str) -> ExternalId:
    """Split a ``group:artifact:version`` string.

    Raises ``ValueError`` unless the text has exactly three fields.
    """
    parts = text.split(SEPARATOR)
    if len(parts) != 3:
        raise ValueError(
            f"expected 'group:artifact:version', got {text!r} ({len(parts)} fields)"
        )
    return ExternalId(*parts)
