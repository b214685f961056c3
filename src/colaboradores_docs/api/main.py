"""FastAPI application entry point for the collaborator document API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from colaboradores_docs.api.routes import (
    colaboradores,
    dashboard,
    documentos,
    health,
    shared_links,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup and clean up on shutdown."""
    from colaboradores_docs.data.db import init_db

    init_db()
    yield


app = FastAPI(
    title="Colaboradores Docs API",
    description="Manage collaborators, their documents and expiring share-links",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(colaboradores.router, prefix="/api")
app.include_router(documentos.router, prefix="/api")
app.include_router(shared_links.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")


def main(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Start the HTTP server."""
    import uvicorn

    uvicorn.run(
        "colaboradores_docs.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
