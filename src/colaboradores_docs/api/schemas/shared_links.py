"""Pydantic schemas for share-link API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SharedLinkCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    expires_in_days: int = Field(description="Days until the link expires (1-365)")


class SharedLinkResponse(BaseModel):
    """A share-link as seen by staff."""

    id: int
    token: str
    colaborador_id: int
    created_by: str | None
    expires_at: datetime
    is_active: bool
    access_count: int
    last_accessed_at: datetime | None
    created_at: datetime
    url: str
    days_until_expiration: int


class SharedColaborador(BaseModel):
    id: int
    nome: str
    matricula: str
    cargo: str
    departamento: str


class SharedDocumento(BaseModel):
    id: int
    nome_original: str
    tipo: str
    tamanho: int
    categoria: str | None
    created_at: datetime


class SharedAccessResponse(BaseModel):
    """What a public share-link exposes: read-only collaborator and document list."""

    colaborador: SharedColaborador
    documentos: list[SharedDocumento]
    expires_at: datetime
    days_until_expiration: int
