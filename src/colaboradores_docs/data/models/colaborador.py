"""ORM model representing a registered collaborator (employee)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from colaboradores_docs.data.db import Base

if TYPE_CHECKING:
    from colaboradores_docs.data.models.documento import Documento
    from colaboradores_docs.data.models.shared_link import SharedLink

STATUS_CHOICES = ("Ativo", "Inativo", "Férias", "Licença Médica")


class Colaborador(Base):
    """Persisted collaborator record.

    Attributes:
        id: Auto-incrementing primary key.
        nome: Display name.
        matricula: Zero-padded sequential identifier (e.g. ``00042``).
        cargo: Job title.
        departamento: Department name.
        status: One of ``STATUS_CHOICES``.
        email: Unique contact e-mail.
        telefone: Optional phone number.
        data_admissao: Admission timestamp.
        storage_folder: Remote storage folder holding the collaborator's files.
    """

    __tablename__ = "colaboradores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    matricula: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    cargo: Mapped[str] = mapped_column(String(128), nullable=False)
    departamento: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Ativo")
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    telefone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    data_admissao: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    storage_folder: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    documentos: Mapped[list[Documento]] = relationship(
        "Documento", back_populates="colaborador", cascade="all, delete-orphan"
    )
    shared_links: Mapped[list[SharedLink]] = relationship(
        "SharedLink", back_populates="colaborador", cascade="all, delete-orphan"
    )
