"""ORM model for expiring public share-links to a collaborator's documents."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from colaboradores_docs.data.db import Base

if TYPE_CHECKING:
    from colaboradores_docs.data.models.colaborador import Colaborador


class SharedLink(Base):
    """A read-only access token scoped to one collaborator."""

    __tablename__ = "shared_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    colaborador_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("colaboradores.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    access_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_accessed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    colaborador: Mapped[Colaborador] = relationship("Colaborador", back_populates="shared_links")
