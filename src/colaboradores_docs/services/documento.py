"""Document service: metadata rows backed by files on the storage API."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import Colaborador, Documento
from colaboradores_docs.models.zip_import import StorageError
from colaboradores_docs.services.storage_client import StorageClient, colaborador_folder_name

logger = logging.getLogger(__name__)

__all__ = [
    "ALLOWED_MIME_TYPES",
    "DocumentoError",
    "MAX_DOCUMENT_BYTES",
    "delete_documento",
    "download_documento",
    "get_documento",
    "list_documentos",
    "upload_documento",
]

ALLOWED_MIME_TYPES = {
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/png": "png",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}
MAX_DOCUMENT_BYTES = 10 * 1024 * 1024
DEFAULT_CATEGORY = "Outros"


class DocumentoError(Exception):
    """Raised when a document upload is rejected or cannot be stored."""


def _documento_to_dict(documento: Documento) -> dict:
    return {
        "id": documento.id,
        "colaborador_id": documento.colaborador_id,
        "nome": documento.nome,
        "nome_original": documento.nome_original,
        "tipo": documento.tipo,
        "tamanho": documento.tamanho,
        "categoria": documento.categoria,
        "storage_folder": documento.storage_folder,
        "storage_filename": documento.storage_filename,
        "url": documento.url,
        "created_at": documento.created_at,
        "updated_at": documento.updated_at,
    }


def list_documentos(colaborador_id: int) -> list[dict] | None:
    """Return a collaborator's documents, newest first; None if the collaborator is unknown."""
    with get_session() as session:
        if session.get(Colaborador, colaborador_id) is None:
            return None
        documentos = (
            session.query(Documento)
            .filter(Documento.colaborador_id == colaborador_id)
            .order_by(Documento.created_at.desc(), Documento.id.desc())
            .all()
        )
        return [_documento_to_dict(d) for d in documentos]


def get_documento(documento_id: int) -> dict | None:
    with get_session() as session:
        documento = session.get(Documento, documento_id)
        return _documento_to_dict(documento) if documento is not None else None


def upload_documento(
    colaborador_id: int,
    filename: str,
    content: bytes,
    content_type: str | None,
    storage: StorageClient,
    categoria: str | None = None,
) -> dict | None:
    """Store a single file for a collaborator and record its metadata.

    Returns:
        The document dict, or None when the collaborator does not exist.

    Raises:
        DocumentoError: On a disallowed type, oversized file or storage failure.
    """
    mime_type = (content_type or "").split(";")[0].strip().lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise DocumentoError(
            "Tipo de arquivo não permitido. Apenas PDF, JPG, PNG, DOC e DOCX são aceitos."
        )
    if len(content) > MAX_DOCUMENT_BYTES:
        raise DocumentoError("Arquivo muito grande. Tamanho máximo: 10MB")

    with get_session() as session:
        colaborador = session.get(Colaborador, colaborador_id)
        if colaborador is None:
            return None

        folder_name = colaborador.storage_folder or colaborador_folder_name(
            colaborador.id, colaborador.matricula
        )
        original_name = PurePosixPath(filename).name or "documento"
        upload = storage.upload_buffer(content, original_name, folder_name, mime_type)
        if not upload.success or not upload.stored_file_name:
            raise DocumentoError(f"Erro no upload: {upload.error}")

        documento = Documento(
            colaborador_id=colaborador.id,
            nome=upload.stored_file_name,
            nome_original=original_name,
            tipo=ALLOWED_MIME_TYPES[mime_type],
            tamanho=len(content),
            categoria=categoria or DEFAULT_CATEGORY,
            storage_folder=folder_name,
            storage_filename=upload.stored_file_name,
            url=upload.file_url or storage.get_file_view_url(folder_name, upload.stored_file_name),
        )
        session.add(documento)
        session.flush()
        session.refresh(documento)
        return _documento_to_dict(documento)


def download_documento(documento_id: int, storage: StorageClient) -> tuple[dict, bytes] | None:
    """Fetch a document's bytes from storage.

    Returns:
        Tuple of (document dict, file bytes), or None when the document is unknown.

    Raises:
        StorageError: If the storage API cannot serve the file.
    """
    documento = get_documento(documento_id)
    if documento is None:
        return None
    content = storage.download_file(documento["storage_folder"], documento["storage_filename"])
    return documento, content


def delete_documento(documento_id: int, storage: StorageClient) -> bool:
    """Remove a document from storage and delete its row.

    Raises:
        StorageError: If the storage API refuses the deletion.
    """
    with get_session() as session:
        documento = session.get(Documento, documento_id)
        if documento is None:
            return False

        result = storage.delete_file(documento.storage_folder, documento.storage_filename)
        if not result.success:
            raise StorageError(result.error or "Erro ao remover arquivo")

        session.delete(documento)
    return True
