"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- Colaborador: Registered employees
- Documento: Metadata for files kept in remote storage
- SharedLink: Expiring public access tokens for a collaborator's documents
- User: Staff accounts and their permission level

All models inherit from the shared Base declarative class defined in data.db.
"""

from colaboradores_docs.data.db import Base
from colaboradores_docs.data.models.colaborador import STATUS_CHOICES, Colaborador
from colaboradores_docs.data.models.documento import Documento
from colaboradores_docs.data.models.shared_link import SharedLink
from colaboradores_docs.data.models.user import PERMISSION_CHOICES, User

__all__ = [
    "Base",
    "Colaborador",
    "Documento",
    "PERMISSION_CHOICES",
    "STATUS_CHOICES",
    "SharedLink",
    "User",
]
