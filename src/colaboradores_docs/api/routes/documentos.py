"""Document routes for the API."""

from __future__ import annotations

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from colaboradores_docs.api.dependencies import get_storage_client, require_editor, require_reader
from colaboradores_docs.api.schemas.documentos import DocumentoResponse
from colaboradores_docs.models.zip_import import StorageError
from colaboradores_docs.services.documento import (
    ALLOWED_MIME_TYPES,
    DocumentoError,
    delete_documento,
    download_documento,
    get_documento,
    list_documentos,
    upload_documento,
)
from colaboradores_docs.services.storage_client import StorageClient

router = APIRouter(tags=["documentos"])

_MEDIA_TYPES = {extension: mime for mime, extension in ALLOWED_MIME_TYPES.items()}


def media_type_for(tipo: str) -> str:
    return _MEDIA_TYPES.get(tipo.lower(), "application/octet-stream")


def file_response(content: bytes, filename: str, tipo: str, disposition: str) -> Response:
    """Build a binary response carrying *filename* in Content-Disposition."""
    return Response(
        content=content,
        media_type=media_type_for(tipo),
        headers={
            "Content-Disposition": f"{disposition}; filename*=UTF-8''{quote(filename)}",
            "Content-Length": str(len(content)),
        },
    )


@router.get(
    "/colaboradores/{colaborador_id}/documentos",
    response_model=list[DocumentoResponse],
    summary="List a collaborator's documents",
    responses={404: {"description": "Collaborator not found"}},
)
def get_colaborador_documentos(
    colaborador_id: int, _: Annotated[str, Depends(require_reader)]
) -> list[DocumentoResponse]:
    documentos = list_documentos(colaborador_id)
    if documentos is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return [DocumentoResponse(**item) for item in documentos]


@router.post(
    "/colaboradores/{colaborador_id}/documentos",
    response_model=DocumentoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
    description="Upload a PDF, JPG, PNG, DOC or DOCX file (max 10MB) for a collaborator.",
    responses={
        400: {"description": "Invalid file or storage failure"},
        404: {"description": "Collaborator not found"},
    },
)
async def post_colaborador_documento(
    colaborador_id: int,
    file: Annotated[UploadFile, File(description="Document file")],
    _: Annotated[str, Depends(require_editor)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    categoria: Annotated[str | None, Form(description="Document category")] = None,
) -> DocumentoResponse:
    content = await file.read()
    try:
        documento = upload_documento(
            colaborador_id,
            filename=file.filename or "documento",
            content=content,
            content_type=file.content_type,
            storage=storage,
            categoria=categoria,
        )
    except DocumentoError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if documento is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return DocumentoResponse(**documento)


@router.get(
    "/documentos/{documento_id}",
    response_model=DocumentoResponse,
    summary="Get document metadata",
    responses={404: {"description": "Document not found"}},
)
def get_documento_by_id(
    documento_id: int, _: Annotated[str, Depends(require_reader)]
) -> DocumentoResponse:
    documento = get_documento(documento_id)
    if documento is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Documento não encontrado"
        )
    return DocumentoResponse(**documento)


def _serve_documento(documento_id: int, storage: StorageClient, disposition: str) -> Response:
    try:
        result = download_documento(documento_id, storage)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Documento não encontrado"
        )
    documento, content = result
    return file_response(content, documento["nome_original"], documento["tipo"], disposition)


@router.get(
    "/documentos/{documento_id}/download",
    summary="Download a document",
    responses={
        404: {"description": "Document not found"},
        502: {"description": "Storage API failure"},
    },
)
def download_documento_file(
    documento_id: int,
    _: Annotated[str, Depends(require_reader)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> Response:
    return _serve_documento(documento_id, storage, "attachment")


@router.get(
    "/documentos/{documento_id}/view",
    summary="View a document inline",
    responses={
        404: {"description": "Document not found"},
        502: {"description": "Storage API failure"},
    },
)
def view_documento_file(
    documento_id: int,
    _: Annotated[str, Depends(require_reader)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> Response:
    return _serve_documento(documento_id, storage, "inline")


@router.delete(
    "/documentos/{documento_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a document",
    responses={
        404: {"description": "Document not found"},
        502: {"description": "Storage API failure"},
    },
)
def remove_documento(
    documento_id: int,
    _: Annotated[str, Depends(require_editor)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> Response:
    try:
        deleted = delete_documento(documento_id, storage)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Documento não encontrado"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
