"""Dashboard routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from colaboradores_docs.api.dependencies import require_reader
from colaboradores_docs.api.schemas.colaboradores import DashboardResponse
from colaboradores_docs.services.dashboard import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse, summary="Dashboard counters")
def get_dashboard(_: Annotated[str, Depends(require_reader)]) -> DashboardResponse:
    return DashboardResponse(**get_dashboard_stats())
