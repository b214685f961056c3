"""Pydantic schemas for document API responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class DocumentoResponse(BaseModel):
    """Document metadata as stored in the database."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    colaborador_id: int
    nome: str
    nome_original: str
    tipo: str
    tamanho: int
    categoria: str | None
    storage_folder: str
    storage_filename: str
    url: str
    created_at: datetime
    updated_at: datetime
