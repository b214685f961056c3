"""Data models and type definitions"""

from colaboradores_docs.models.zip_import import (
    ArchiveEntry,
    ArchiveFormatError,
    ClassifiedEntries,
    CollaboratorFile,
    ImportOutcome,
    ImportSummary,
    ImportValidationError,
    StorageError,
)

__all__ = [
    "ArchiveEntry",
    "ArchiveFormatError",
    "ClassifiedEntries",
    "CollaboratorFile",
    "ImportOutcome",
    "ImportSummary",
    "ImportValidationError",
    "StorageError",
]
