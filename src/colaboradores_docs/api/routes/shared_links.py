"""Share-link routes: staff management and public read-only access."""

from __future__ import annotations

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status

from colaboradores_docs.api.dependencies import get_storage_client, require_editor
from colaboradores_docs.api.routes.documentos import file_response
from colaboradores_docs.api.schemas.shared_links import (
    SharedAccessResponse,
    SharedLinkCreateRequest,
    SharedLinkResponse,
)
from colaboradores_docs.models.zip_import import StorageError
from colaboradores_docs.services.shared_link import (
    SharedLinkError,
    SharedLinkExpiredError,
    SharedLinkNotFoundError,
    create_shared_link,
    deactivate_shared_link,
    get_shared_document,
    list_shared_links,
    resolve_shared_link,
)
from colaboradores_docs.services.storage_client import StorageClient

router = APIRouter(tags=["shared-links"])


def _raise_for_link_error(exc: SharedLinkError) -> NoReturn:
    if isinstance(exc, SharedLinkExpiredError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, SharedLinkNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get(
    "/colaboradores/{colaborador_id}/shared-links",
    response_model=list[SharedLinkResponse],
    summary="List share-links of a collaborator",
    responses={404: {"description": "Collaborator not found"}},
)
def get_shared_links(
    colaborador_id: int, _: Annotated[str, Depends(require_editor)]
) -> list[SharedLinkResponse]:
    links = list_shared_links(colaborador_id)
    if links is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return [SharedLinkResponse(**link) for link in links]


@router.post(
    "/colaboradores/{colaborador_id}/shared-links",
    response_model=SharedLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a share-link",
    responses={
        400: {"description": "Expiration outside 1-365 days"},
        404: {"description": "Collaborator not found"},
    },
)
def post_shared_link(
    colaborador_id: int,
    request: SharedLinkCreateRequest,
    username: Annotated[str, Depends(require_editor)],
) -> SharedLinkResponse:
    try:
        link = create_shared_link(colaborador_id, request.expires_in_days, created_by=username)
    except SharedLinkError as exc:
        _raise_for_link_error(exc)
    if link is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Colaborador não encontrado"
        )
    return SharedLinkResponse(**link)


@router.delete(
    "/shared-links/{link_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a share-link",
    responses={404: {"description": "Share-link not found"}},
)
def remove_shared_link(link_id: int, _: Annotated[str, Depends(require_editor)]) -> Response:
    if not deactivate_shared_link(link_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link não encontrado")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/shared-access/{token}",
    response_model=SharedAccessResponse,
    summary="Open a share-link",
    description="Public, read-only view of a collaborator's documents.",
    responses={
        403: {"description": "Link expired or inactive"},
        404: {"description": "Link not found"},
    },
)
def get_shared_access(token: str) -> SharedAccessResponse:
    try:
        payload = resolve_shared_link(token)
    except SharedLinkError as exc:
        _raise_for_link_error(exc)
    return SharedAccessResponse(**payload)


@router.get(
    "/shared-access/{token}/documentos/{documento_id}",
    summary="Download a document through a share-link",
    responses={
        403: {"description": "Link expired or inactive"},
        404: {"description": "Link or document not found"},
        502: {"description": "Storage API failure"},
    },
)
def get_shared_access_documento(
    token: str,
    documento_id: int,
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> Response:
    try:
        documento, content = get_shared_document(token, documento_id, storage)
    except SharedLinkError as exc:
        _raise_for_link_error(exc)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return file_response(content, documento["nome_original"], documento["tipo"], "inline")
