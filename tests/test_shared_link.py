"""Tests for share-link token issuance and resolution."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import pytest
from zip_factory import FakeStorage

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import SharedLink
from colaboradores_docs.models.zip_import import StorageError
from colaboradores_docs.services.colaborador import create_colaborador
from colaboradores_docs.services.documento import upload_documento
from colaboradores_docs.services.shared_link import (
    SharedLinkError,
    SharedLinkExpiredError,
    SharedLinkNotFoundError,
    create_shared_link,
    days_until_expiration,
    deactivate_shared_link,
    format_shared_link_url,
    generate_shared_token,
    get_shared_document,
    is_shared_link_valid,
    list_shared_links,
    resolve_shared_link,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _colaborador(matricula: str = "00001") -> dict:
    return create_colaborador(
        {
            "nome": "Ana Souza",
            "matricula": matricula,
            "cargo": "Analista",
            "departamento": "RH",
            "status": "Ativo",
            "email": f"ana.{matricula}@empresa.com",
            "data_admissao": NOW,
        }
    )


class TestHelpers:
    def test_token_is_32_hex_chars_and_unique(self) -> None:
        tokens = {generate_shared_token() for _ in range(50)}
        assert len(tokens) == 50
        assert all(re.fullmatch(r"[0-9a-f]{32}", token) for token in tokens)

    def test_validity(self) -> None:
        assert is_shared_link_valid(True, NOW + timedelta(seconds=1), now=NOW)
        assert not is_shared_link_valid(True, NOW, now=NOW)
        assert not is_shared_link_valid(False, NOW + timedelta(days=1), now=NOW)

    def test_naive_expiration_is_treated_as_utc(self) -> None:
        naive = (NOW + timedelta(hours=1)).replace(tzinfo=None)
        assert is_shared_link_valid(True, naive, now=NOW)

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(days=7), 7),
            (timedelta(days=6, hours=1), 7),
            (timedelta(minutes=1), 1),
            (timedelta(0), 0),
            (timedelta(days=-3), 0),
        ],
    )
    def test_days_until_expiration(self, delta: timedelta, expected: int) -> None:
        assert days_until_expiration(NOW + delta, now=NOW) == expected

    def test_url_format(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert format_shared_link_url("abc", "https://docs.test/") == "https://docs.test/shared/abc"
        monkeypatch.setenv("SHARED_LINK_BASE_URL", "https://rh.empresa.com")
        assert format_shared_link_url("abc") == "https://rh.empresa.com/shared/abc"


@pytest.mark.usefixtures("api_db")
class TestSharedLinkLifecycle:
    @pytest.mark.parametrize("days", [0, 366, -1])
    def test_expiration_bounds(self, days: int) -> None:
        colaborador = _colaborador()
        with pytest.raises(SharedLinkError, match="entre 1 e 365"):
            create_shared_link(colaborador["id"], days)

    def test_unknown_collaborator(self) -> None:
        assert create_shared_link(999, 7) is None
        assert list_shared_links(999) is None

    def test_create_and_list(self) -> None:
        colaborador = _colaborador()

        link = create_shared_link(colaborador["id"], 7, created_by="editor")

        assert link is not None
        assert link["is_active"] is True
        assert link["access_count"] == 0
        assert link["created_by"] == "editor"
        assert link["days_until_expiration"] == 7
        assert link["url"].endswith(f"/shared/{link['token']}")
        assert [item["id"] for item in list_shared_links(colaborador["id"]) or []] == [link["id"]]

    def test_resolve_counts_accesses(self, fake_storage: FakeStorage) -> None:
        colaborador = _colaborador()
        upload_documento(
            colaborador["id"], "contrato.pdf", b"%PDF", "application/pdf", fake_storage
        )
        link = create_shared_link(colaborador["id"], 30)
        assert link is not None

        first = resolve_shared_link(link["token"])
        resolve_shared_link(link["token"])

        assert first["colaborador"]["nome"] == "Ana Souza"
        assert "email" not in first["colaborador"]
        assert [d["nome_original"] for d in first["documentos"]] == ["contrato.pdf"]
        with get_session() as session:
            stored = session.get(SharedLink, link["id"])
            assert stored is not None
            assert stored.access_count == 2
            assert stored.last_accessed_at is not None

    def test_unknown_token(self) -> None:
        with pytest.raises(SharedLinkNotFoundError):
            resolve_shared_link("0" * 32)

    def test_deactivated_link_is_rejected(self) -> None:
        colaborador = _colaborador()
        link = create_shared_link(colaborador["id"], 7)
        assert link is not None

        assert deactivate_shared_link(link["id"]) is True
        with pytest.raises(SharedLinkExpiredError):
            resolve_shared_link(link["token"])

    def test_deactivate_unknown_link(self) -> None:
        assert deactivate_shared_link(999) is False

    def test_expired_link_is_rejected(self) -> None:
        colaborador = _colaborador()
        link = create_shared_link(colaborador["id"], 1)
        assert link is not None
        with get_session() as session:
            stored = session.get(SharedLink, link["id"])
            assert stored is not None
            stored.expires_at = datetime.now(UTC) - timedelta(minutes=1)

        with pytest.raises(SharedLinkExpiredError):
            resolve_shared_link(link["token"])

    def test_shared_document_download(self, fake_storage: FakeStorage) -> None:
        colaborador = _colaborador()
        documento = upload_documento(
            colaborador["id"], "rg.pdf", b"%PDF-rg", "application/pdf", fake_storage
        )
        link = create_shared_link(colaborador["id"], 7)
        assert documento is not None and link is not None

        info, content = get_shared_document(link["token"], documento["id"], fake_storage)

        assert content == b"%PDF-rg"
        assert info["nome_original"] == "rg.pdf"

    def test_document_of_another_collaborator_is_hidden(self, fake_storage: FakeStorage) -> None:
        owner = _colaborador("00001")
        other = _colaborador("00002")
        documento = upload_documento(
            other["id"], "rg.pdf", b"%PDF", "application/pdf", fake_storage
        )
        link = create_shared_link(owner["id"], 7)
        assert documento is not None and link is not None

        with pytest.raises(SharedLinkNotFoundError):
            get_shared_document(link["token"], documento["id"], fake_storage)

    def test_storage_failure_propagates(self, fake_storage: FakeStorage) -> None:
        colaborador = _colaborador()
        documento = upload_documento(
            colaborador["id"], "rg.pdf", b"%PDF", "application/pdf", fake_storage
        )
        link = create_shared_link(colaborador["id"], 7)
        assert documento is not None and link is not None
        fake_storage.files.clear()

        with pytest.raises(StorageError):
            get_shared_document(link["token"], documento["id"], fake_storage)
