"""Route handlers for the API."""

from colaboradores_docs.api.routes import (
    colaboradores,
    dashboard,
    documentos,
    health,
    shared_links,
)

__all__ = [
    "colaboradores",
    "dashboard",
    "documentos",
    "health",
    "shared_links",
]
