"""Pydantic schemas for collaborator API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

StatusLiteral = Literal["Ativo", "Inativo", "Férias", "Licença Médica"]
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ColaboradorResponse(BaseModel):
    """Public-facing collaborator record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    nome: str
    matricula: str
    cargo: str
    departamento: str
    status: str
    email: str
    telefone: str | None
    data_admissao: datetime
    storage_folder: str | None
    created_at: datetime
    updated_at: datetime


class ColaboradorCreateRequest(BaseModel):
    """Fields required to register a collaborator."""

    model_config = ConfigDict(extra="forbid")

    nome: str = Field(min_length=1)
    matricula: str = Field(min_length=1)
    cargo: str = Field(min_length=1)
    departamento: str = Field(min_length=1)
    status: StatusLiteral
    email: str = Field(pattern=EMAIL_PATTERN)
    telefone: str | None = None
    data_admissao: datetime


class ColaboradorUpdateRequest(BaseModel):
    """Fields allowed to be updated for a collaborator."""

    model_config = ConfigDict(extra="forbid")

    nome: str | None = Field(default=None, min_length=1)
    matricula: str | None = Field(default=None, min_length=1)
    cargo: str | None = Field(default=None, min_length=1)
    departamento: str | None = Field(default=None, min_length=1)
    status: StatusLiteral | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    telefone: str | None = None
    data_admissao: datetime | None = None


class ImportSummaryResponse(BaseModel):
    """Counts and error lines of a bulk import run."""

    colaboradoresCriados: int  # noqa: N815
    documentosImportados: int  # noqa: N815
    erros: list[str]


class ImportResponse(BaseModel):
    """Response body of the bulk ZIP import endpoint."""

    success: bool
    error: str | None = None
    summary: ImportSummaryResponse | None = None


class DashboardResponse(BaseModel):
    total_colaboradores: int
    colaboradores_ativos: int
    total_documentos: int
    links_ativos: int
