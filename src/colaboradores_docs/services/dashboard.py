"""Aggregate counts shown on the admin dashboard."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import func, select

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import Colaborador, Documento, SharedLink


def get_dashboard_stats() -> dict[str, int]:
    now = datetime.now(UTC)
    with get_session() as session:
        return {
            "total_colaboradores": session.scalar(select(func.count(Colaborador.id))) or 0,
            "colaboradores_ativos": session.scalar(
                select(func.count(Colaborador.id)).where(Colaborador.status == "Ativo")
            )
            or 0,
            "total_documentos": session.scalar(select(func.count(Documento.id))) or 0,
            "links_ativos": session.scalar(
                select(func.count(SharedLink.id)).where(
                    SharedLink.is_active.is_(True), SharedLink.expires_at > now
                )
            )
            or 0,
        }
