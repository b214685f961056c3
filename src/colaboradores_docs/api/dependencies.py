"""Shared dependencies for API routes."""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from colaboradores_docs.services.auth import get_user_permission
from colaboradores_docs.services.storage_client import StorageClient


def get_current_username(
    x_username: Annotated[
        str | None,
        Header(
            description=(
                "Current username. In production, this should be extracted "
                "from authenticated session/JWT token."
            )
        ),
    ] = None,
) -> str:
    """Get the current username from request context.

    Args:
        x_username: Username from X-Username header.

    Returns:
        str: Authenticated username.

    Raises:
        HTTPException: If authentication is missing (401).
    """
    if not x_username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Não autorizado",
        )
    return x_username


def require_permission(*allowed: str) -> Callable[[str], str]:
    """Build a dependency that admits only users holding one of *allowed*.

    With no arguments any registered user is admitted.
    """

    def _dependency(username: Annotated[str, Depends(get_current_username)]) -> str:
        permissao = get_user_permission(username)
        if permissao is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Não autorizado",
            )
        if allowed and permissao not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permissão insuficiente. Requer: {', '.join(allowed)}.",
            )
        return username

    return _dependency


require_reader = require_permission()
require_editor = require_permission("Admin", "Editor")
require_admin = require_permission("Admin")


def get_storage_client() -> StorageClient:
    """Return a storage client configured from the environment."""
    return StorageClient()
