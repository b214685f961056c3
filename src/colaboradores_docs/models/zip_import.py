"""Data models for the bulk collaborator import from ZIP archives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ArchiveFormatError(Exception):
    """Raised when the uploaded bytes cannot be decoded as a supported ZIP archive."""


class ImportValidationError(Exception):
    """Raised when an import request is rejected before the archive is parsed."""


class StorageError(Exception):
    """Raised when the remote file-storage API cannot serve a request."""


@dataclass(slots=True)
class ArchiveEntry:
    """A single entry decoded from the archive's central directory.

    Attributes:
        path: Forward-slash separated path as stored in the archive.
        content: Decompressed bytes (empty for directories).
        is_directory: True when ``path`` ends with ``/``.
    """

    path: str
    content: bytes
    is_directory: bool


@dataclass(slots=True)
class CollaboratorFile:
    """A PDF payload assigned to a collaborator group."""

    file_name: str
    buffer: bytes


@dataclass(slots=True)
class ClassifiedEntries:
    """Archive entries grouped by collaborator name, plus rejection messages.

    ``groups`` preserves the archive's encounter order for both keys and files.
    """

    groups: dict[str, list[CollaboratorFile]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ImportSummary:
    """Counts and diagnostics accumulated during one import run."""

    created_count: int = 0
    imported_document_count: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the response-body representation of the summary."""
        return {
            "colaboradoresCriados": self.created_count,
            "documentosImportados": self.imported_document_count,
            "erros": list(self.errors),
        }


@dataclass(slots=True)
class ImportOutcome:
    """Overall result of an import run.

    Attributes:
        success: True when at least one collaborator was created.
        summary: Counts and error lines for the run.
        error: Headline message when ``success`` is False.
    """

    success: bool
    summary: ImportSummary
    error: str | None = None
