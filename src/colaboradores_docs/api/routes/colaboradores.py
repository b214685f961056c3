"""Collaborator routes for the API, including the bulk ZIP import."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from colaboradores_docs.api.dependencies import (
    get_storage_client,
    require_admin,
    require_editor,
    require_reader,
)
from colaboradores_docs.api.schemas.colaboradores import (
    ColaboradorCreateRequest,
    ColaboradorResponse,
    ColaboradorUpdateRequest,
    ImportResponse,
)
from colaboradores_docs.data.crud.colaborador_repo import ColaboradorRepository
from colaboradores_docs.models.zip_import import ArchiveFormatError, ImportValidationError
from colaboradores_docs.services.colaborador import (
    ColaboradorError,
    DuplicateColaboradorError,
    create_colaborador,
    delete_colaborador,
    get_colaborador,
    list_colaboradores,
    update_colaborador,
)
from colaboradores_docs.services.import_orchestrator import (
    import_colaboradores_zip,
    validate_import_upload,
)
from colaboradores_docs.services.storage_client import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/colaboradores", tags=["colaboradores"])


def _import_failure(status_code: int, error: str, summary: dict | None = None) -> JSONResponse:
    body = ImportResponse(success=False, error=error, summary=summary)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.get(
    "/",
    response_model=list[ColaboradorResponse],
    summary="List collaborators",
    description="Return collaborators ordered by name, optionally filtered by name or matrícula.",
)
def get_colaboradores(
    _: Annotated[str, Depends(require_reader)],
    search: Annotated[str | None, Query(description="Substring of name or matrícula")] = None,
) -> list[ColaboradorResponse]:
    return [ColaboradorResponse(**item) for item in list_colaboradores(search)]


@router.post(
    "/",
    response_model=ColaboradorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a collaborator",
    description="Register a collaborator and create its storage folder.",
    responses={
        400: {"description": "Invalid collaborator data"},
        409: {"description": "Matrícula or e-mail already registered"},
    },
)
def post_colaborador(
    request: ColaboradorCreateRequest,
    _: Annotated[str, Depends(require_editor)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> ColaboradorResponse:
    try:
        created = create_colaborador(request.model_dump(), storage)
    except DuplicateColaboradorError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ColaboradorError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ColaboradorResponse(**created)


@router.post(
    "/import",
    response_model=ImportResponse,
    response_model_exclude_none=True,
    summary="Bulk import collaborators from a ZIP archive",
    description=(
        "Create one collaborator per top-level folder of the archive (an optional "
        "common root folder is skipped) and store its PDFs as documents."
    ),
    responses={
        400: {"description": "Invalid upload or nothing could be imported"},
        500: {"description": "Malformed archive or unexpected failure"},
    },
)
async def import_colaboradores(
    _: Annotated[str, Depends(require_admin)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    file: Annotated[
        UploadFile | None,
        File(description="ZIP archive with one folder of PDFs per collaborator"),
    ] = None,
) -> ImportResponse | JSONResponse:
    if file is None:
        return _import_failure(status.HTTP_400_BAD_REQUEST, "Arquivo de importação não informado.")

    try:
        # Reject on the declared size before buffering the whole upload.
        if file.size is not None:
            validate_import_upload(file.filename, file.size)
        data = await file.read()
        validate_import_upload(file.filename, len(data))
    except ImportValidationError as exc:
        return _import_failure(status.HTTP_400_BAD_REQUEST, str(exc))

    try:
        outcome = await run_in_threadpool(
            import_colaboradores_zip, data, ColaboradorRepository(), storage
        )
    except ArchiveFormatError as exc:
        logger.warning("Rejected archive %s: %s", file.filename, exc)
        return _import_failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except Exception:
        logger.exception("Bulk import of %s failed", file.filename)
        return _import_failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Erro interno ao processar a importação."
        )

    summary = outcome.summary.to_dict()
    if not outcome.success:
        return _import_failure(status.HTTP_400_BAD_REQUEST, outcome.error or "", summary)
    return ImportResponse(success=True, summary=summary)


@router.get(
    "/{colaborador_id}",
    response_model=ColaboradorResponse,
    summary="Get a collaborator",
    responses={404: {"description": "Collaborator not found"}},
)
def get_colaborador_by_id(
    colaborador_id: int, _: Annotated[str, Depends(require_reader)]
) -> ColaboradorResponse:
    colaborador = get_colaborador(colaborador_id)
    if colaborador is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return ColaboradorResponse(**colaborador)


@router.patch(
    "/{colaborador_id}",
    response_model=ColaboradorResponse,
    summary="Update a collaborator",
    responses={
        404: {"description": "Collaborator not found"},
        409: {"description": "Matrícula or e-mail already registered"},
    },
)
def patch_colaborador(
    colaborador_id: int,
    request: ColaboradorUpdateRequest,
    _: Annotated[str, Depends(require_editor)],
) -> ColaboradorResponse:
    updates = request.model_dump(exclude_unset=True)
    try:
        updated = update_colaborador(colaborador_id, updates)
    except DuplicateColaboradorError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ColaboradorError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return ColaboradorResponse(**updated)


@router.delete(
    "/{colaborador_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a collaborator",
    description="Delete a collaborator, its documents (also from storage) and share links.",
    responses={404: {"description": "Collaborator not found"}},
)
def remove_colaborador(
    colaborador_id: int,
    _: Annotated[str, Depends(require_editor)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> Response:
    if not delete_colaborador(colaborador_id, storage):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
