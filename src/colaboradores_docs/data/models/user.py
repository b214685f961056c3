"""User account model for staff authentication.

Passwords are stored as salted PBKDF2 hashes, never in plaintext.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from colaboradores_docs.data.db import Base

PERMISSION_CHOICES = ("Admin", "Editor", "Visualizador")


class User(Base):
    """Application user account.

    Attributes:
        id: Auto-incrementing primary key.
        username: Unique handle used for login.
        nome: Display name.
        password_hash: Salted hash of the user's password.
        permissao: Permission level, one of ``PERMISSION_CHOICES``.
        created_at: UTC timestamp when the account was created.
    """

    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    nome: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    permissao: Mapped[str] = mapped_column(String(32), nullable=False, default="Visualizador")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
