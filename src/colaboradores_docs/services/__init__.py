"""Services"""

from colaboradores_docs.services.entry_classifier import classify_entries
from colaboradores_docs.services.import_orchestrator import (
    ImportOrchestrator,
    import_colaboradores_zip,
    validate_import_upload,
)
from colaboradores_docs.services.storage_client import StorageClient, StorageResult
from colaboradores_docs.services.zip_reader import ArchiveLimits, read_zip_entries

__all__ = [
    "ArchiveLimits",
    "ImportOrchestrator",
    "StorageClient",
    "StorageResult",
    "classify_entries",
    "import_colaboradores_zip",
    "read_zip_entries",
    "validate_import_upload",
]
