"""Tests for the raw ZIP reader used by the bulk import."""

from __future__ import annotations

import logging
import random
import struct
import zlib
from zipfile import ZIP_DEFLATED

import pytest

from colaboradores_docs.models.zip_import import ArchiveFormatError
from colaboradores_docs.services.zip_reader import ArchiveLimits, read_zip_entries
from zip_factory import PDF_BYTES, build_stored_zip, build_zip

CENTRAL_MARKER = b"PK\x01\x02"


def _central_offset(data: bytes, index: int = 0) -> int:
    offset = -1
    for _ in range(index + 1):
        offset = data.index(CENTRAL_MARKER, offset + 1)
    return offset


def _patch(data: bytes, offset: int, fmt: str, value: int) -> bytes:
    patched = bytearray(data)
    struct.pack_into(fmt, patched, offset, value)
    return bytes(patched)


class TestReadEntries:
    """Decoding well-formed archives."""

    def test_stored_entries_are_byte_identical(self) -> None:
        data = build_stored_zip([("Ana/contrato.pdf", PDF_BYTES), ("Ana/notes.txt", b"hello")])

        entries = read_zip_entries(data)

        assert [e.path for e in entries] == ["Ana/contrato.pdf", "Ana/notes.txt"]
        assert entries[0].content == PDF_BYTES
        assert entries[1].content == b"hello"
        assert not any(e.is_directory for e in entries)

    def test_deflated_entries_inflate_to_declared_size(self) -> None:
        payload = PDF_BYTES * 200
        data = build_zip([("Bruno/holerite.pdf", payload)], ZIP_DEFLATED)
        declared = struct.unpack_from("<I", data, _central_offset(data) + 24)[0]

        entries = read_zip_entries(data)

        assert entries[0].content == payload
        assert len(entries[0].content) == declared

    def test_directory_entries_have_empty_content(self) -> None:
        data = build_zip([("Carla/", b""), ("Carla/rg.pdf", PDF_BYTES)])

        entries = read_zip_entries(data)

        assert entries[0].path == "Carla/"
        assert entries[0].is_directory is True
        assert entries[0].content == b""
        assert entries[1].is_directory is False

    def test_utf8_names_are_decoded(self) -> None:
        data = build_zip([("João Conceição/exame médico.pdf", PDF_BYTES)])

        entries = read_zip_entries(data)

        assert entries[0].path == "João Conceição/exame médico.pdf"

    def test_archive_comment_is_skipped(self) -> None:
        data = build_zip([("Ana/a.pdf", PDF_BYTES)])
        # Append a comment and fix the comment length field of the EOCD record.
        comment = b"exported by scanner PK\x05\x06 lookalike"
        eocd = data.rindex(b"PK\x05\x06")
        data = _patch(data, eocd + 20, "<H", len(comment)) + comment

        entries = read_zip_entries(data)

        assert [e.path for e in entries] == ["Ana/a.pdf"]

    def test_empty_archive_has_no_entries(self) -> None:
        data = build_zip([])

        assert read_zip_entries(data) == []

    def test_entries_follow_central_directory_order(self) -> None:
        names = ["Zeca/b.pdf", "Ana/a.pdf", "Maria/c.pdf"]
        data = build_zip([(name, PDF_BYTES) for name in names])

        assert [e.path for e in read_zip_entries(data)] == names

    def test_size_mismatch_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        data = build_stored_zip([("Ana/a.pdf", PDF_BYTES)])
        data = _patch(data, _central_offset(data) + 24, "<I", len(PDF_BYTES) + 1)

        with caplog.at_level(logging.WARNING):
            entries = read_zip_entries(data)

        assert entries[0].content == PDF_BYTES
        assert "declares" in caplog.text


class TestMalformedArchives:
    """Structural errors abort decoding with ArchiveFormatError."""

    @pytest.mark.parametrize("data", [b"", b"PK\x03\x04", b"not a zip at all, just text bytes"])
    def test_missing_end_of_central_directory(self, data: bytes) -> None:
        with pytest.raises(ArchiveFormatError, match="diretório central não encontrado"):
            read_zip_entries(data)

    def test_truncated_archive_loses_end_record(self) -> None:
        data = build_zip([("Ana/a.pdf", PDF_BYTES)])

        with pytest.raises(ArchiveFormatError):
            read_zip_entries(data[: len(data) - 10])

    def test_bad_central_directory_signature(self) -> None:
        data = build_zip([("Ana/a.pdf", PDF_BYTES)])
        data = _patch(data, _central_offset(data), "<I", 0x12345678)

        with pytest.raises(ArchiveFormatError, match="diretório central incorreta"):
            read_zip_entries(data)

    def test_bad_local_header_signature(self) -> None:
        data = build_zip([("Ana/a.pdf", PDF_BYTES)])
        data = _patch(data, 0, "<I", 0x12345678)

        with pytest.raises(ArchiveFormatError, match="arquivo local incorreta"):
            read_zip_entries(data)

    def test_unsupported_compression_method(self) -> None:
        data = build_stored_zip([("Ana/a.pdf", PDF_BYTES)])
        data = _patch(data, _central_offset(data) + 10, "<H", 12)

        with pytest.raises(ArchiveFormatError, match="Método de compressão não suportado: 12"):
            read_zip_entries(data)

    def test_payload_past_end_of_buffer(self) -> None:
        data = build_stored_zip([("Ana/a.pdf", PDF_BYTES)])
        data = _patch(data, _central_offset(data) + 20, "<I", 10_000_000)

        with pytest.raises(ArchiveFormatError, match="truncado"):
            read_zip_entries(data)

    def test_corrupt_deflate_stream(self) -> None:
        data = build_zip([("Ana/a.pdf", PDF_BYTES * 50)], ZIP_DEFLATED)
        name_len = struct.unpack_from("<H", data, 26)[0]
        start = 30 + name_len
        corrupted = bytearray(data)
        corrupted[start] = 0xFF
        corrupted[start + 1] = 0xFF

        with pytest.raises(ArchiveFormatError):
            read_zip_entries(bytes(corrupted))

    def test_deflate_stream_cut_short(self) -> None:
        payload = random.Random(7).randbytes(4000)
        data = build_zip([("Ana/a.pdf", payload)], ZIP_DEFLATED)
        compressed_size = struct.unpack_from("<I", data, _central_offset(data) + 20)[0]
        data = _patch(data, _central_offset(data) + 20, "<I", compressed_size // 2)

        with pytest.raises(ArchiveFormatError, match="falha ao descompactar"):
            read_zip_entries(data)


class TestArchiveLimits:
    """Configurable caps on entry count and decompressed size."""

    def test_entry_count_cap(self) -> None:
        data = build_zip([("Ana/a.pdf", PDF_BYTES), ("Ana/b.pdf", PDF_BYTES)])

        with pytest.raises(ArchiveFormatError, match="entradas"):
            read_zip_entries(data, ArchiveLimits(max_entries=1))

    def test_declared_entry_size_cap(self) -> None:
        data = build_zip([("Ana/a.pdf", b"x" * 100)])

        with pytest.raises(ArchiveFormatError, match="excede o tamanho máximo"):
            read_zip_entries(data, ArchiveLimits(max_entry_bytes=50))

    def test_understated_size_cannot_bypass_entry_cap(self) -> None:
        data = build_zip([("Ana/a.pdf", b"x" * 10_000)], ZIP_DEFLATED)
        data = _patch(data, _central_offset(data) + 24, "<I", 10)

        with pytest.raises(ArchiveFormatError, match="excede o tamanho máximo"):
            read_zip_entries(data, ArchiveLimits(max_entry_bytes=1_000))

    def test_total_size_cap(self) -> None:
        data = build_zip([("Ana/a.pdf", b"x" * 60), ("Bruno/b.pdf", b"y" * 60)])

        with pytest.raises(ArchiveFormatError, match="Conteúdo descompactado"):
            read_zip_entries(data, ArchiveLimits(max_total_bytes=100))

    def test_limits_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IMPORT_MAX_ENTRIES", "7")
        monkeypatch.setenv("IMPORT_MAX_ENTRY_BYTES", "not-a-number")
        monkeypatch.setenv("IMPORT_MAX_TOTAL_BYTES", "-5")

        limits = ArchiveLimits.from_env()

        assert limits.max_entries == 7
        assert limits.max_entry_bytes == ArchiveLimits().max_entry_bytes
        assert limits.max_total_bytes == ArchiveLimits().max_total_bytes


def test_raw_deflate_without_zlib_wrapper() -> None:
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -zlib.MAX_WBITS)
    raw = compressor.compress(PDF_BYTES) + compressor.flush()
    data = build_zip([("Ana/a.pdf", PDF_BYTES)], ZIP_DEFLATED)

    assert raw in data
    assert read_zip_entries(data)[0].content == PDF_BYTES
