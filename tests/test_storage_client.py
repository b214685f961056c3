"""Tests for the storage API client (no network: requests are recorded)."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import pytest
import requests

from colaboradores_docs.models.zip_import import StorageError
from colaboradores_docs.services.storage_client import (
    DEFAULT_BASE_URL,
    StorageClient,
    colaborador_folder_name,
    get_storage_base_url,
    unique_file_name,
)


def _response(
    status_code: int, body: Any = None, content: bytes | None = None
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if content is not None:
        response._content = content
    else:
        response._content = json.dumps(body if body is not None else {}).encode("utf-8")
    return response


class RecordingSession(requests.Session):
    """Session that returns queued responses instead of hitting the network."""

    def __init__(self, *responses: requests.Response | Exception) -> None:
        super().__init__()
        self.queue = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(  # type: ignore[override]
        self, method: str, url: str, **kwargs: Any
    ) -> requests.Response:
        self.calls.append((method, url, kwargs))
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _client(*responses: requests.Response | Exception, **kwargs: Any) -> StorageClient:
    return StorageClient(
        "https://storage.test/", "secret-token", session=RecordingSession(*responses), **kwargs
    )


class TestConfiguration:
    def test_base_url_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STORAGE_API_URL", raising=False)
        assert get_storage_base_url() == DEFAULT_BASE_URL

    def test_base_url_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_API_URL", "https://files.internal/")
        assert get_storage_base_url() == "https://files.internal"

    def test_bearer_token_header(self) -> None:
        client = _client()
        assert client.session.headers["Authorization"] == "Bearer secret-token"
        assert client.base_url == "https://storage.test"

    def test_missing_token_is_logged(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.delenv("STORAGE_API_TOKEN", raising=False)
        with caplog.at_level(logging.WARNING):
            client = StorageClient("https://storage.test", session=RecordingSession())

        assert "Authorization" not in client.session.headers
        assert "STORAGE_API_TOKEN" in caplog.text

    def test_verification_stays_on_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STORAGE_API_CA_BUNDLE", raising=False)
        assert _client().session.verify is True

    def test_ca_bundle_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_API_CA_BUNDLE", "/etc/ssl/internal-ca.pem")
        assert _client().session.verify == "/etc/ssl/internal-ca.pem"

    def test_timeout_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_API_TIMEOUT", "5")
        client = _client(_response(200, {"message": "ok"}))

        client.create_folder("00001_1")

        assert client.session.calls[0][2]["timeout"] == 5.0


class TestNames:
    def test_folder_name(self) -> None:
        assert colaborador_folder_name(7, "00042") == "00042_7"

    def test_unique_file_name_is_sanitized(self) -> None:
        name = unique_file_name("Exame Médico (2024).pdf")
        assert re.fullmatch(r"\d{13}-Exame_M_dico__2024_\.pdf", name)


class TestCreateFolder:
    def test_success(self) -> None:
        client = _client(_response(201, {"message": "Pasta criada"}))

        result = client.create_folder("00001_1")

        assert result.success is True
        assert result.folder_name == "00001_1"
        method, url, kwargs = client.session.calls[0]
        assert (method, url) == ("POST", "https://storage.test/folder")
        assert kwargs["json"] == {"name": "00001_1"}

    def test_http_error_message_is_reported(self) -> None:
        client = _client(_response(409, {"message": "Pasta já existe"}))

        result = client.create_folder("00001_1")

        assert result.success is False
        assert result.error == "Pasta já existe"

    def test_connection_error_is_reported(self) -> None:
        client = _client(requests.ConnectionError("refused"))

        result = client.create_folder("00001_1")

        assert result.success is False
        assert "refused" in (result.error or "")


class TestUpload:
    def test_upload_file_returns_stored_name(self) -> None:
        client = _client(_response(200, {"message": "ok", "files": ["99-a.pdf"]}))

        result = client.upload_file(b"%PDF", "a.pdf", "00001_1", "application/pdf")

        assert result.success is True
        assert result.stored_file_name == "99-a.pdf"
        assert result.file_url == "https://storage.test/files/00001_1/99-a.pdf"
        method, url, kwargs = client.session.calls[0]
        assert (method, url) == ("POST", "https://storage.test/upload/00001_1")
        assert kwargs["files"] == {"files": ("a.pdf", b"%PDF", "application/pdf")}

    def test_upload_buffer_prefixes_name(self) -> None:
        client = _client(_response(200, {"files": ["stored.pdf"]}))

        client.upload_buffer(b"%PDF", "contrato final.pdf", "00001_1", "application/pdf")

        sent_name = client.session.calls[0][2]["files"]["files"][0]
        assert re.fullmatch(r"\d{13}-contrato_final\.pdf", sent_name)

    def test_response_without_files_is_failure(self) -> None:
        client = _client(_response(200, {"message": "ok"}))

        result = client.upload_file(b"%PDF", "a.pdf", "00001_1")

        assert result.success is False

    def test_non_json_error_body(self) -> None:
        client = _client(_response(500, content=b"<html>oops</html>"))

        result = client.upload_file(b"%PDF", "a.pdf", "00001_1")

        assert result.success is False
        assert result.error == "Erro no upload do arquivo"


class TestDownloadAndDelete:
    def test_download_returns_bytes(self) -> None:
        client = _client(_response(200, content=b"%PDF-bytes"))

        assert client.download_file("00001_1", "a.pdf") == b"%PDF-bytes"
        assert client.session.calls[0][:2] == ("GET", "https://storage.test/files/00001_1/a.pdf")

    def test_download_missing_file(self) -> None:
        client = _client(_response(404))

        with pytest.raises(StorageError, match="Arquivo não encontrado"):
            client.download_file("00001_1", "a.pdf")

    def test_download_network_failure(self) -> None:
        client = _client(requests.Timeout("slow"))

        with pytest.raises(StorageError, match="Falha no download"):
            client.download_file("00001_1", "a.pdf")

    def test_delete_success(self) -> None:
        client = _client(_response(200, {"message": "removido"}))

        result = client.delete_file("00001_1", "a.pdf")

        assert result.success is True
        assert client.session.calls[0][:2] == (
            "DELETE",
            "https://storage.test/files/00001_1/a.pdf",
        )

    def test_delete_already_missing_counts_as_success(self) -> None:
        client = _client(_response(404))

        assert client.delete_file("00001_1", "a.pdf").success is True

    def test_delete_server_error(self) -> None:
        client = _client(_response(500, {"message": "falhou"}))

        result = client.delete_file("00001_1", "a.pdf")

        assert result.success is False
        assert result.error == "falhou"
