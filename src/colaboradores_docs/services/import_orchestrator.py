"""Bulk import of collaborators and their PDFs from a ZIP archive.

The import is best effort: each collaborator, folder, upload and document row is
written independently and nothing is rolled back when a later step fails.
Failures are collected as error lines in the returned summary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import PurePosixPath
from typing import Any, Protocol

from colaboradores_docs.models.zip_import import (
    CollaboratorFile,
    ImportOutcome,
    ImportSummary,
    ImportValidationError,
)
from colaboradores_docs.services.entry_classifier import classify_entries
from colaboradores_docs.services.placeholder_data import (
    extract_numeric,
    format_matricula,
    generate_placeholder_admission_date,
    generate_placeholder_email,
    generate_placeholder_phone,
)
from colaboradores_docs.services.storage_client import StorageResult, colaborador_folder_name
from colaboradores_docs.services.zip_reader import ArchiveLimits, read_zip_entries

logger = logging.getLogger(__name__)

__all__ = [
    "ImportOrchestrator",
    "ImportRepository",
    "ImportStorage",
    "import_colaboradores_zip",
    "validate_import_upload",
]

ALLOWED_EXTENSION = ".zip"
PDF_MIME_TYPE = "application/pdf"

DEFAULT_CARGO = "Operador"
DEFAULT_DEPARTAMENTO = "Operação"
DEFAULT_STATUS = "Ativo"
IMPORTED_CATEGORY = "Importado"

NO_GROUPS_ERROR = "Nenhum colaborador válido encontrado no arquivo informado."
GENERIC_FAILURE_ERROR = "Não foi possível importar os colaboradores informados."


class ImportRepository(Protocol):
    """Database operations the import needs."""

    def find_greatest_matricula(self) -> str | None: ...

    def insert_colaborador(self, fields: Mapping[str, Any]) -> int: ...

    def set_storage_folder(self, colaborador_id: int, folder_name: str) -> None: ...

    def insert_documento(self, fields: Mapping[str, Any]) -> int: ...


class ImportStorage(Protocol):
    """Remote storage operations the import needs."""

    def create_folder(self, folder_name: str) -> StorageResult: ...

    def upload_buffer(
        self, buffer: bytes, file_name: str, folder_name: str, mime_type: str
    ) -> StorageResult: ...


def validate_import_upload(
    filename: str | None, size_bytes: int, limits: ArchiveLimits | None = None
) -> None:
    """Reject uploads that must not reach the archive reader.

    Raises:
        ImportValidationError: On a missing name, wrong extension, empty or oversized file.
    """
    limits = limits or ArchiveLimits.from_env()
    if not filename:
        raise ImportValidationError("Arquivo de importação não informado.")
    if PurePosixPath(filename).suffix.lower() != ALLOWED_EXTENSION:
        raise ImportValidationError("Formato de arquivo não suportado. Utilize um arquivo .zip.")
    if size_bytes == 0:
        raise ImportValidationError("Arquivo de importação vazio.")
    if size_bytes > limits.max_archive_bytes:
        raise ImportValidationError("Arquivo de importação excede o tamanho máximo permitido.")


class ImportOrchestrator:
    """Create collaborators, storage folders and documents for classified groups."""

    def __init__(self, repository: ImportRepository, storage: ImportStorage) -> None:
        self.repository = repository
        self.storage = storage

    def run(
        self,
        groups: Mapping[str, Sequence[CollaboratorFile]],
        errors: Iterable[str] = (),
    ) -> ImportOutcome:
        """Import every group in mapping order.

        Args:
            groups: PDF files keyed by collaborator name.
            errors: Error lines already produced upstream; they lead the summary.

        Returns:
            ImportOutcome that succeeds when at least one collaborator was created.
        """
        summary = ImportSummary(errors=list(errors))
        next_number = extract_numeric(self.repository.find_greatest_matricula()) + 1

        for name, files in groups.items():
            if not files:
                summary.errors.append(f'Nenhum documento encontrado para o colaborador "{name}".')
                continue

            matricula = format_matricula(next_number)
            next_number += 1

            colaborador_id = self._create_colaborador(name, matricula, summary)
            if colaborador_id is None:
                continue
            summary.created_count += 1

            folder_name = colaborador_folder_name(colaborador_id, matricula)
            self._create_folder(name, colaborador_id, folder_name, summary)

            for item in files:
                self._import_file(name, colaborador_id, folder_name, item, summary)

        logger.info(
            "Import finished: %d collaborators, %d documents, %d errors",
            summary.created_count,
            summary.imported_document_count,
            len(summary.errors),
        )

        if summary.created_count == 0:
            headline = summary.errors[0] if summary.errors else GENERIC_FAILURE_ERROR
            return ImportOutcome(success=False, summary=summary, error=headline)
        return ImportOutcome(success=True, summary=summary)

    def _create_colaborador(self, name: str, matricula: str, summary: ImportSummary) -> int | None:
        fields = {
            "nome": name,
            "matricula": matricula,
            "cargo": DEFAULT_CARGO,
            "departamento": DEFAULT_DEPARTAMENTO,
            "status": DEFAULT_STATUS,
            "email": generate_placeholder_email(name),
            "telefone": generate_placeholder_phone(),
            "data_admissao": generate_placeholder_admission_date(),
        }
        try:
            return self.repository.insert_colaborador(fields)
        except Exception:
            logger.exception("Failed to create collaborator %r", name)
            summary.errors.append(f'Falha ao criar o colaborador "{name}".')
            return None

    def _create_folder(
        self, name: str, colaborador_id: int, folder_name: str, summary: ImportSummary
    ) -> None:
        result = self.storage.create_folder(folder_name)
        if not result.success:
            logger.warning("Storage folder %s not created: %s", folder_name, result.error)
            summary.errors.append(
                f'Colaborador "{name}" criado, mas não foi possível gerar a pasta de documentos.'
            )
            return

        try:
            self.repository.set_storage_folder(colaborador_id, result.folder_name or folder_name)
        except Exception:
            logger.exception("Failed to record storage folder for collaborator %d", colaborador_id)

    def _import_file(
        self,
        name: str,
        colaborador_id: int,
        folder_name: str,
        item: CollaboratorFile,
        summary: ImportSummary,
    ) -> None:
        try:
            upload = self.storage.upload_buffer(
                item.buffer, item.file_name, folder_name, PDF_MIME_TYPE
            )
            if not upload.success or not upload.stored_file_name:
                summary.errors.append(
                    f'Falha ao enviar o arquivo "{item.file_name}" do colaborador "{name}".'
                )
                return

            stored_name = upload.stored_file_name
            try:
                self.repository.insert_documento(
                    {
                        "colaborador_id": colaborador_id,
                        "nome": stored_name,
                        "nome_original": item.file_name,
                        "tipo": "pdf",
                        "tamanho": len(item.buffer),
                        "categoria": IMPORTED_CATEGORY,
                        "storage_folder": folder_name,
                        "storage_filename": stored_name,
                        "url": upload.file_url or f"files/{folder_name}/{stored_name}",
                    }
                )
            except Exception:
                logger.exception("Failed to record document %r", item.file_name)
                summary.errors.append(
                    f'Arquivo "{item.file_name}" enviado, mas não foi possível salvar no banco '
                    f'de dados para o colaborador "{name}".'
                )
                return
        except Exception:
            logger.exception("Unexpected error importing %r for %r", item.file_name, name)
            summary.errors.append(
                f'Erro inesperado ao importar o arquivo "{item.file_name}" do colaborador "{name}".'
            )
            return

        summary.imported_document_count += 1


def import_colaboradores_zip(
    data: bytes,
    repository: ImportRepository,
    storage: ImportStorage,
    limits: ArchiveLimits | None = None,
) -> ImportOutcome:
    """Run the whole pipeline: read the archive, group entries, import groups.

    The archive is fully decoded and classified before the repository or the
    storage API is touched.

    Raises:
        ArchiveFormatError: If the archive cannot be decoded.
    """
    entries = read_zip_entries(data, limits)
    classified = classify_entries(entries)

    if not classified.groups:
        summary = ImportSummary(errors=classified.errors)
        return ImportOutcome(success=False, summary=summary, error=NO_GROUPS_ERROR)

    logger.info("Importing %d collaborators from archive", len(classified.groups))
    return ImportOrchestrator(repository, storage).run(classified.groups, classified.errors)
