"""Database access used by the bulk ZIP import.

Each write runs in its own session and is committed immediately, so a failure
later in the same import never rolls back rows that were already written.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import Colaborador, Documento


class ColaboradorRepository:
    """SQLAlchemy implementation of the import pipeline's database boundary."""

    def find_greatest_matricula(self) -> str | None:
        """Return the lexicographically greatest matrícula, or None when empty."""
        with get_session() as session:
            return session.scalars(
                select(Colaborador.matricula).order_by(Colaborador.matricula.desc()).limit(1)
            ).first()

    def insert_colaborador(self, fields: Mapping[str, Any]) -> int:
        with get_session() as session:
            colaborador = Colaborador(**fields)
            session.add(colaborador)
            session.flush()
            return colaborador.id

    def set_storage_folder(self, colaborador_id: int, folder_name: str) -> None:
        with get_session() as session:
            colaborador = session.get(Colaborador, colaborador_id)
            if colaborador is not None:
                colaborador.storage_folder = folder_name

    def insert_documento(self, fields: Mapping[str, Any]) -> int:
        with get_session() as session:
            documento = Documento(**fields)
            session.add(documento)
            session.flush()
            return documento.id
