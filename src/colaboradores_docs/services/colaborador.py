"""Collaborator service for managing registered employees.

This service provides CRUD operations for Colaborador data. Creating a
collaborator also creates its folder on the storage API; deleting one removes
its stored files first, best effort.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TypedDict

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import STATUS_CHOICES, Colaborador
from colaboradores_docs.services.storage_client import StorageClient

logger = logging.getLogger(__name__)

__all__ = [
    "ColaboradorData",
    "ColaboradorError",
    "DuplicateColaboradorError",
    "list_colaboradores",
    "get_colaborador",
    "create_colaborador",
    "update_colaborador",
    "delete_colaborador",
]

_REQUIRED_FIELDS = (
    "nome",
    "matricula",
    "cargo",
    "departamento",
    "status",
    "email",
    "data_admissao",
)

_COLABORADOR_FIELDS = (*_REQUIRED_FIELDS, "telefone")


class ColaboradorError(Exception):
    """Raised when collaborator data is rejected."""


class DuplicateColaboradorError(ColaboradorError):
    """Raised when a matrícula or e-mail is already registered."""


class ColaboradorData(TypedDict, total=False):
    """TypedDict for collaborator data."""

    nome: str
    matricula: str
    cargo: str
    departamento: str
    status: str
    email: str
    telefone: str | None
    data_admissao: datetime


def _colaborador_to_dict(colaborador: Colaborador) -> dict:
    return {
        "id": colaborador.id,
        "nome": colaborador.nome,
        "matricula": colaborador.matricula,
        "cargo": colaborador.cargo,
        "departamento": colaborador.departamento,
        "status": colaborador.status,
        "email": colaborador.email,
        "telefone": colaborador.telefone,
        "data_admissao": colaborador.data_admissao,
        "storage_folder": colaborador.storage_folder,
        "created_at": colaborador.created_at,
        "updated_at": colaborador.updated_at,
    }


def _check_unique(
    session: Session, data: ColaboradorData, exclude_id: int | None = None
) -> None:
    checks = (
        ("matricula", Colaborador.matricula, "Matrícula já cadastrada"),
        ("email", Colaborador.email, "Email já cadastrado"),
    )
    for key, column, message in checks:
        value = data.get(key)
        if value is None:
            continue
        query = session.query(Colaborador.id).filter(column == value)
        if exclude_id is not None:
            query = query.filter(Colaborador.id != exclude_id)
        if query.first() is not None:
            raise DuplicateColaboradorError(message)


def _validate_status(data: ColaboradorData) -> None:
    status = data.get("status")
    if status is not None and status not in STATUS_CHOICES:
        raise ColaboradorError(f"Status inválido: {status}")


def list_colaboradores(search: str | None = None) -> list[dict]:
    """Return collaborators ordered by name, optionally filtered by name or matrícula."""
    with get_session() as session:
        query = session.query(Colaborador)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Colaborador.nome).like(pattern),
                    func.lower(Colaborador.matricula).like(pattern),
                )
            )
        return [_colaborador_to_dict(c) for c in query.order_by(Colaborador.nome.asc()).all()]


def get_colaborador(colaborador_id: int) -> dict | None:
    with get_session() as session:
        colaborador = session.get(Colaborador, colaborador_id)
        return _colaborador_to_dict(colaborador) if colaborador is not None else None


def create_colaborador(data: ColaboradorData, storage: StorageClient | None = None) -> dict:
    """Create a collaborator and, when a storage client is given, its folder.

    A failed folder creation is logged and leaves ``storage_folder`` empty; the
    collaborator is still created.

    Raises:
        ColaboradorError: If required fields are missing or invalid.
        DuplicateColaboradorError: If the matrícula or e-mail already exists.
    """
    missing = [key for key in _REQUIRED_FIELDS if not data.get(key)]
    if missing:
        raise ColaboradorError(f"Campos obrigatórios: {', '.join(missing)}")
    _validate_status(data)

    with get_session() as session:
        _check_unique(session, data)
        colaborador = Colaborador(**{key: data.get(key) for key in _COLABORADOR_FIELDS})
        session.add(colaborador)
        session.flush()

        if storage is not None:
            result = storage.create_colaborador_folder(colaborador.id, colaborador.matricula)
            if result.success:
                colaborador.storage_folder = result.folder_name
            else:
                logger.warning(
                    "Collaborator %d created without storage folder: %s",
                    colaborador.id,
                    result.error,
                )

        session.flush()
        session.refresh(colaborador)
        return _colaborador_to_dict(colaborador)


def update_colaborador(colaborador_id: int, data: ColaboradorData) -> dict | None:
    """Apply a partial update; returns None when the collaborator does not exist.

    Raises:
        ColaboradorError: If the status is invalid or a required field is set to null.
        DuplicateColaboradorError: If the new matrícula or e-mail is taken.
    """
    nulls = [key for key in _REQUIRED_FIELDS if key in data and data[key] is None]
    if nulls:
        raise ColaboradorError(f"Campos obrigatórios não podem ser nulos: {', '.join(nulls)}")
    _validate_status(data)

    with get_session() as session:
        colaborador = session.get(Colaborador, colaborador_id)
        if colaborador is None:
            return None

        _check_unique(session, data, exclude_id=colaborador_id)
        for key in _COLABORADOR_FIELDS:
            if key in data:
                setattr(colaborador, key, data[key])

        session.flush()
        session.refresh(colaborador)
        return _colaborador_to_dict(colaborador)


def delete_colaborador(colaborador_id: int, storage: StorageClient | None = None) -> bool:
    """Delete a collaborator, its documents and its share links.

    Returns:
        True if the collaborator existed and was deleted.
    """
    with get_session() as session:
        colaborador = session.get(Colaborador, colaborador_id)
        if colaborador is None:
            return False

        if storage is not None:
            for documento in colaborador.documentos:
                result = storage.delete_file(documento.storage_folder, documento.storage_filename)
                if not result.success:
                    logger.warning(
                        "Could not remove %s/%s from storage: %s",
                        documento.storage_folder,
                        documento.storage_filename,
                        result.error,
                    )

        session.delete(colaborador)
    return True
