"""ORM model for document metadata stored against a collaborator."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from colaboradores_docs.data.db import Base

if TYPE_CHECKING:
    from colaboradores_docs.data.models.colaborador import Colaborador


class Documento(Base):
    """Metadata for a file held by the remote storage API.

    The bytes themselves live remotely under ``storage_folder/storage_filename``.
    """

    __tablename__ = "documentos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    colaborador_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colaboradores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    nome_original: Mapped[str] = mapped_column(String(255), nullable=False)
    tipo: Mapped[str] = mapped_column(String(32), nullable=False, default="pdf")
    tamanho: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    categoria: Mapped[str | None] = mapped_column(String(64), nullable=True)
    storage_folder: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    colaborador: Mapped[Colaborador] = relationship("Colaborador", back_populates="documentos")
