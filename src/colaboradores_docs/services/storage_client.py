"""HTTP client for the remote file-storage API.

The storage API keeps each collaborator's files in a folder named
``<matricula>_<colaborador_id>``. Configuration comes from the environment:

- ``STORAGE_API_URL``: base URL (default ``https://api.poupadin.space``)
- ``STORAGE_API_TOKEN``: bearer token sent on every request
- ``STORAGE_API_CA_BUNDLE``: CA bundle used to verify the storage host
- ``STORAGE_API_TIMEOUT``: per-request timeout in seconds (default 30)

Certificate verification is always on. Hosts signed by an internal CA are
supported by pointing ``STORAGE_API_CA_BUNDLE`` at that CA.
"""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Any

import requests

from colaboradores_docs.models.zip_import import StorageError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.poupadin.space"
DEFAULT_TIMEOUT = 30.0


@dataclass(slots=True)
class StorageResult:
    """Outcome of a storage operation that reports failures instead of raising."""

    success: bool
    folder_name: str | None = None
    stored_file_name: str | None = None
    file_url: str | None = None
    message: str | None = None
    error: str | None = None


def get_storage_base_url() -> str:
    """Return the configured storage base URL without a trailing slash."""
    return (os.getenv("STORAGE_API_URL") or DEFAULT_BASE_URL).rstrip("/")


def _get_timeout() -> float:
    raw = os.getenv("STORAGE_API_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid STORAGE_API_TIMEOUT: %r", raw)
        return DEFAULT_TIMEOUT


def colaborador_folder_name(colaborador_id: int, matricula: str) -> str:
    return f"{matricula}_{colaborador_id}"


def unique_file_name(file_name: str) -> str:
    """Return a timestamp-prefixed name safe for the storage API's URL paths."""
    timestamp = int(time.time() * 1000)
    safe_name = re.sub(r"[^a-zA-Z0-9.-]", "_", file_name)
    return f"{timestamp}-{safe_name}"


def _json_body(response: requests.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


class StorageClient:
    """Thin wrapper over the storage API's folder and file endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        ca_bundle: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or get_storage_base_url()).rstrip("/")
        self.token = token if token is not None else os.getenv("STORAGE_API_TOKEN")
        self.timeout = timeout or _get_timeout()
        self.session = session or requests.Session()

        ca_bundle = ca_bundle or os.getenv("STORAGE_API_CA_BUNDLE")
        if ca_bundle:
            self.session.verify = ca_bundle

        if self.token:
            self.session.headers["Authorization"] = f"Bearer {self.token}"
        else:
            logger.warning("STORAGE_API_TOKEN is not configured")

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        return self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)

    def get_file_view_url(self, folder_name: str, file_name: str) -> str:
        return f"{self.base_url}/files/{folder_name}/{file_name}"

    def create_folder(self, folder_name: str) -> StorageResult:
        """Create *folder_name* on the storage API."""
        logger.info("Creating storage folder %s", folder_name)
        try:
            response = self._request("POST", "/folder", json={"name": folder_name})
            payload = _json_body(response)
            if not response.ok:
                raise StorageError(payload.get("message") or "Erro ao criar pasta")
        except (requests.RequestException, StorageError) as exc:
            logger.error("Failed to create storage folder %s: %s", folder_name, exc)
            return StorageResult(success=False, error=str(exc))

        return StorageResult(
            success=True, folder_name=folder_name, message=payload.get("message")
        )

    def create_colaborador_folder(self, colaborador_id: int, matricula: str) -> StorageResult:
        return self.create_folder(colaborador_folder_name(colaborador_id, matricula))

    def upload_file(
        self,
        buffer: bytes,
        file_name: str,
        folder_name: str,
        mime_type: str = "application/octet-stream",
    ) -> StorageResult:
        """Upload *buffer* as *file_name* into *folder_name*.

        Returns:
            StorageResult whose ``stored_file_name`` is the name the API saved
            the file under and ``file_url`` its view URL.
        """
        logger.info("Uploading %s to storage folder %s", file_name, folder_name)
        try:
            response = self._request(
                "POST",
                f"/upload/{folder_name}",
                files={"files": (file_name, buffer, mime_type)},
            )
            payload = _json_body(response)
            if not response.ok:
                raise StorageError(payload.get("message") or "Erro no upload do arquivo")
            stored_files = payload.get("files") or []
            if not stored_files:
                raise StorageError("Resposta da API de armazenamento sem arquivos.")
        except (requests.RequestException, StorageError) as exc:
            logger.error("Failed to upload %s to %s: %s", file_name, folder_name, exc)
            return StorageResult(success=False, error=str(exc))

        stored_name = str(stored_files[0])
        return StorageResult(
            success=True,
            folder_name=folder_name,
            stored_file_name=stored_name,
            file_url=self.get_file_view_url(folder_name, stored_name),
            message=payload.get("message"),
        )

    def upload_buffer(
        self, buffer: bytes, file_name: str, folder_name: str, mime_type: str
    ) -> StorageResult:
        """Upload *buffer* under a unique, sanitized variant of *file_name*."""
        return self.upload_file(buffer, unique_file_name(file_name), folder_name, mime_type)

    def download_file(self, folder_name: str, file_name: str) -> bytes:
        """Return the bytes of a stored file.

        Raises:
            StorageError: If the file is missing or the API call fails.
        """
        try:
            response = self._request("GET", f"/files/{folder_name}/{file_name}")
        except requests.RequestException as exc:
            raise StorageError(f"Falha no download: {exc}") from exc

        if response.status_code == 404:
            raise StorageError("Arquivo não encontrado")
        if not response.ok:
            raise StorageError(f"Falha no download: erro HTTP {response.status_code}")

        logger.info("Downloaded %s/%s (%d bytes)", folder_name, file_name, len(response.content))
        return response.content

    def delete_file(self, folder_name: str, file_name: str) -> StorageResult:
        """Delete a stored file; a file that is already gone counts as deleted."""
        try:
            response = self._request("DELETE", f"/files/{folder_name}/{file_name}")
            if response.status_code == 404:
                logger.warning("File %s/%s already absent from storage", folder_name, file_name)
                return StorageResult(
                    success=True, message="Arquivo não encontrado (já removido)"
                )
            payload = _json_body(response)
            if not response.ok:
                raise StorageError(payload.get("message") or "Erro ao remover arquivo")
        except (requests.RequestException, StorageError) as exc:
            logger.error("Failed to delete %s/%s: %s", folder_name, file_name, exc)
            return StorageResult(success=False, error=str(exc))

        return StorageResult(success=True, message=payload.get("message"))
