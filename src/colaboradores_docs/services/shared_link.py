"""Expiring public share-links to a collaborator's documents."""

from __future__ import annotations

import hashlib
import logging
import math
import os
import secrets
import time
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import Colaborador, Documento, SharedLink
from colaboradores_docs.services.storage_client import StorageClient

logger = logging.getLogger(__name__)

MIN_EXPIRATION_DAYS = 1
MAX_EXPIRATION_DAYS = 365
TOKEN_LENGTH = 32


class SharedLinkError(Exception):
    """Raised when a share-link request is invalid."""


class SharedLinkNotFoundError(SharedLinkError):
    """Raised when a token or document does not match any share-link."""


class SharedLinkExpiredError(SharedLinkError):
    """Raised when a share-link is inactive or past its expiration."""


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def generate_shared_token() -> str:
    """Return a 32 hex-character token derived from random bytes and the clock."""
    combined = f"{secrets.token_hex(32)}-{int(time.time() * 1000)}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()[:TOKEN_LENGTH]


def is_shared_link_valid(
    is_active: bool, expires_at: datetime, now: datetime | None = None
) -> bool:
    if not is_active:
        return False
    now = now or datetime.now(UTC)
    return _as_utc(expires_at) > now


def days_until_expiration(expires_at: datetime, now: datetime | None = None) -> int:
    """Return whole days left before expiration, rounded up and never negative."""
    now = now or datetime.now(UTC)
    remaining = (_as_utc(expires_at) - now).total_seconds() / 86400
    return max(0, math.ceil(remaining))


def format_shared_link_url(token: str, base_url: str | None = None) -> str:
    base = base_url if base_url is not None else os.getenv("SHARED_LINK_BASE_URL", "")
    return f"{base.rstrip('/')}/shared/{token}"


def _shared_link_to_dict(link: SharedLink) -> dict:
    return {
        "id": link.id,
        "token": link.token,
        "colaborador_id": link.colaborador_id,
        "created_by": link.created_by,
        "expires_at": _as_utc(link.expires_at),
        "is_active": link.is_active,
        "access_count": link.access_count,
        "last_accessed_at": link.last_accessed_at,
        "created_at": link.created_at,
        "url": format_shared_link_url(link.token),
        "days_until_expiration": days_until_expiration(link.expires_at),
    }


def create_shared_link(
    colaborador_id: int, expires_in_days: int, created_by: str | None = None
) -> dict | None:
    """Issue a new share-link; returns None when the collaborator does not exist.

    Raises:
        SharedLinkError: If the expiration is outside 1-365 days.
    """
    if not MIN_EXPIRATION_DAYS <= expires_in_days <= MAX_EXPIRATION_DAYS:
        raise SharedLinkError("Período de expiração deve ser entre 1 e 365 dias")

    with get_session() as session:
        if session.get(Colaborador, colaborador_id) is None:
            return None

        link = SharedLink(
            token=generate_shared_token(),
            colaborador_id=colaborador_id,
            created_by=created_by,
            expires_at=datetime.now(UTC) + timedelta(days=expires_in_days),
            is_active=True,
        )
        session.add(link)
        session.flush()
        logger.info("Share-link %d issued for collaborator %d", link.id, colaborador_id)
        return _shared_link_to_dict(link)


def list_shared_links(colaborador_id: int) -> list[dict] | None:
    with get_session() as session:
        if session.get(Colaborador, colaborador_id) is None:
            return None
        links = (
            session.query(SharedLink)
            .filter(SharedLink.colaborador_id == colaborador_id)
            .order_by(SharedLink.created_at.desc(), SharedLink.id.desc())
            .all()
        )
        return [_shared_link_to_dict(link) for link in links]


def deactivate_shared_link(link_id: int) -> bool:
    with get_session() as session:
        link = session.get(SharedLink, link_id)
        if link is None:
            return False
        link.is_active = False
    return True


def _get_valid_link(session: Session, token: str) -> SharedLink:
    link = session.query(SharedLink).filter(SharedLink.token == token).first()
    if link is None:
        raise SharedLinkNotFoundError("Link não encontrado ou inválido")
    if not is_shared_link_valid(link.is_active, link.expires_at):
        raise SharedLinkExpiredError("Link expirado ou inativo")
    return link


def resolve_shared_link(token: str) -> dict:
    """Return the collaborator and document list a token grants access to.

    Each successful resolution bumps the link's access counter.

    Raises:
        SharedLinkNotFoundError: If the token is unknown.
        SharedLinkExpiredError: If the link is inactive or expired.
    """
    with get_session() as session:
        link = _get_valid_link(session, token)
        colaborador = link.colaborador
        documentos = (
            session.query(Documento)
            .filter(Documento.colaborador_id == colaborador.id)
            .order_by(Documento.created_at.desc(), Documento.id.desc())
            .all()
        )

        link.access_count += 1
        link.last_accessed_at = datetime.now(UTC)

        return {
            "colaborador": {
                "id": colaborador.id,
                "nome": colaborador.nome,
                "matricula": colaborador.matricula,
                "cargo": colaborador.cargo,
                "departamento": colaborador.departamento,
            },
            "documentos": [
                {
                    "id": d.id,
                    "nome_original": d.nome_original,
                    "tipo": d.tipo,
                    "tamanho": d.tamanho,
                    "categoria": d.categoria,
                    "created_at": d.created_at,
                }
                for d in documentos
            ],
            "expires_at": _as_utc(link.expires_at),
            "days_until_expiration": days_until_expiration(link.expires_at),
        }


def get_shared_document(
    token: str, documento_id: int, storage: StorageClient
) -> tuple[dict, bytes]:
    """Fetch one document through a share-link.

    Raises:
        SharedLinkNotFoundError: If the token is unknown or the document belongs
            to another collaborator.
        SharedLinkExpiredError: If the link is inactive or expired.
        StorageError: If the storage API cannot serve the file.
    """
    with get_session() as session:
        link = _get_valid_link(session, token)
        documento = session.get(Documento, documento_id)
        if documento is None or documento.colaborador_id != link.colaborador_id:
            raise SharedLinkNotFoundError("Documento não encontrado")
        info = {
            "id": documento.id,
            "nome_original": documento.nome_original,
            "tipo": documento.tipo,
            "storage_folder": documento.storage_folder,
            "storage_filename": documento.storage_filename,
        }

    content = storage.download_file(info["storage_folder"], info["storage_filename"])
    return info, content
