"""ZIP archive reader used by the bulk collaborator import.

The archive is decoded straight from the uploaded bytes: the End-Of-Central-
Directory record is located by a backward scan, the central directory is walked
record by record, and each file's payload is sliced out behind its local header
and either copied (stored) or raw-inflated (deflate).
"""

from __future__ import annotations

import logging
import os
import struct
import zlib
from dataclasses import dataclass

from colaboradores_docs.models.zip_import import ArchiveEntry, ArchiveFormatError

logger = logging.getLogger(__name__)

__all__ = ["ArchiveLimits", "read_zip_entries"]

EOCD_SIGNATURE = 0x06054B50
CENTRAL_DIRECTORY_SIGNATURE = 0x02014B50
LOCAL_HEADER_SIGNATURE = 0x04034B50

EOCD_SIZE = 22
CENTRAL_HEADER_SIZE = 46
LOCAL_HEADER_SIZE = 30

METHOD_STORED = 0
METHOD_DEFLATE = 8

_MIB = 1024 * 1024
_EOCD_MARKER = struct.pack("<I", EOCD_SIGNATURE)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer value for %s: %r", name, raw)
        return default
    return value if value > 0 else default


@dataclass(frozen=True, slots=True)
class ArchiveLimits:
    """Upper bounds enforced while reading an uploaded archive.

    Attributes:
        max_archive_bytes: Size cap for the raw ZIP upload.
        max_entries: Maximum number of central-directory records.
        max_entry_bytes: Maximum uncompressed size of a single entry.
        max_total_bytes: Maximum uncompressed size of all entries together.
    """

    max_archive_bytes: int = 200 * _MIB
    max_entries: int = 5000
    max_entry_bytes: int = 50 * _MIB
    max_total_bytes: int = 500 * _MIB

    @classmethod
    def from_env(cls) -> ArchiveLimits:
        """Build limits from ``IMPORT_MAX_*`` environment variables."""
        defaults = cls()
        return cls(
            max_archive_bytes=_env_int("IMPORT_MAX_ARCHIVE_BYTES", defaults.max_archive_bytes),
            max_entries=_env_int("IMPORT_MAX_ENTRIES", defaults.max_entries),
            max_entry_bytes=_env_int("IMPORT_MAX_ENTRY_BYTES", defaults.max_entry_bytes),
            max_total_bytes=_env_int("IMPORT_MAX_TOTAL_BYTES", defaults.max_total_bytes),
        )


def _read_u16(data: bytes, offset: int) -> int:
    try:
        return struct.unpack_from("<H", data, offset)[0]
    except struct.error as exc:
        raise ArchiveFormatError("Arquivo ZIP inválido: registro truncado.") from exc


def _read_u32(data: bytes, offset: int) -> int:
    try:
        return struct.unpack_from("<I", data, offset)[0]
    except struct.error as exc:
        raise ArchiveFormatError("Arquivo ZIP inválido: registro truncado.") from exc


def _find_end_of_central_directory(data: bytes) -> int:
    """Return the offset of the EOCD record.

    The record can be followed by a comment of arbitrary length, so the
    signature is searched backwards from the last offset where a full record fits.
    """
    last_start = len(data) - EOCD_SIZE
    if last_start >= 0:
        offset = data.rfind(_EOCD_MARKER, 0, last_start + len(_EOCD_MARKER))
        if offset != -1:
            return offset
    raise ArchiveFormatError("Arquivo ZIP inválido: diretório central não encontrado.")


def _inflate_raw(payload: bytes, max_bytes: int, path: str) -> bytes:
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        content = decompressor.decompress(payload, max_bytes + 1)
        if len(content) <= max_bytes:
            content += decompressor.flush()
    except zlib.error as exc:
        raise ArchiveFormatError(
            f"Arquivo ZIP inválido: falha ao descompactar '{path}'."
        ) from exc
    if len(content) > max_bytes:
        raise ArchiveFormatError(f"Arquivo '{path}' excede o tamanho máximo permitido.")
    if not decompressor.eof:
        # Stream ended before its final block.
        raise ArchiveFormatError(f"Arquivo ZIP inválido: falha ao descompactar '{path}'.")
    return content


def _decompress(method: int, payload: bytes, max_bytes: int, path: str) -> bytes:
    if method == METHOD_STORED:
        return bytes(payload)
    if method == METHOD_DEFLATE:
        return _inflate_raw(payload, max_bytes, path)
    raise ArchiveFormatError(f"Método de compressão não suportado: {method}")


def _read_file_payload(data: bytes, local_offset: int, compressed_size: int) -> bytes:
    if _read_u32(data, local_offset) != LOCAL_HEADER_SIGNATURE:
        raise ArchiveFormatError("Arquivo ZIP inválido: assinatura do arquivo local incorreta.")

    local_name_length = _read_u16(data, local_offset + 26)
    local_extra_length = _read_u16(data, local_offset + 28)
    data_start = local_offset + LOCAL_HEADER_SIZE + local_name_length + local_extra_length
    payload = data[data_start : data_start + compressed_size]
    if len(payload) != compressed_size:
        raise ArchiveFormatError("Arquivo ZIP inválido: conteúdo truncado.")
    return payload


def read_zip_entries(data: bytes, limits: ArchiveLimits | None = None) -> list[ArchiveEntry]:
    """Decode a complete ZIP archive into its entries.

    Args:
        data: Raw bytes of the whole archive.
        limits: Size and count caps; defaults to ``ArchiveLimits.from_env()``.

    Returns:
        Entries in central-directory order. Directory entries carry empty content.

    Raises:
        ArchiveFormatError: On missing/incorrect signatures, truncated records,
            unsupported compression methods or exceeded limits.
    """
    limits = limits or ArchiveLimits.from_env()

    eocd_offset = _find_end_of_central_directory(data)
    total_entries = _read_u16(data, eocd_offset + 10)
    offset = _read_u32(data, eocd_offset + 16)

    if total_entries > limits.max_entries:
        raise ArchiveFormatError(
            f"Arquivo ZIP possui {total_entries} entradas; o máximo permitido é "
            f"{limits.max_entries}."
        )

    entries: list[ArchiveEntry] = []
    total_bytes = 0

    for _ in range(total_entries):
        if _read_u32(data, offset) != CENTRAL_DIRECTORY_SIGNATURE:
            raise ArchiveFormatError(
                "Arquivo ZIP inválido: assinatura do diretório central incorreta."
            )

        method = _read_u16(data, offset + 10)
        compressed_size = _read_u32(data, offset + 20)
        uncompressed_size = _read_u32(data, offset + 24)
        name_length = _read_u16(data, offset + 28)
        extra_length = _read_u16(data, offset + 30)
        comment_length = _read_u16(data, offset + 32)
        local_offset = _read_u32(data, offset + 42)

        name_start = offset + CENTRAL_HEADER_SIZE
        name_bytes = data[name_start : name_start + name_length]
        if len(name_bytes) != name_length:
            raise ArchiveFormatError("Arquivo ZIP inválido: registro truncado.")
        path = name_bytes.decode("utf-8", errors="replace")

        if path.endswith("/"):
            entries.append(ArchiveEntry(path=path, content=b"", is_directory=True))
        else:
            if uncompressed_size > limits.max_entry_bytes:
                raise ArchiveFormatError(
                    f"Arquivo '{path}' excede o tamanho máximo permitido."
                )
            payload = _read_file_payload(data, local_offset, compressed_size)
            content = _decompress(method, payload, limits.max_entry_bytes, path)

            if uncompressed_size != 0 and len(content) != uncompressed_size:
                logger.warning(
                    "Size of %r is %d bytes, central directory declares %d",
                    path,
                    len(content),
                    uncompressed_size,
                )

            total_bytes += len(content)
            if total_bytes > limits.max_total_bytes:
                raise ArchiveFormatError(
                    "Conteúdo descompactado do arquivo ZIP excede o tamanho máximo permitido."
                )
            entries.append(ArchiveEntry(path=path, content=content, is_directory=False))

        offset = name_start + name_length + extra_length + comment_length

    return entries
