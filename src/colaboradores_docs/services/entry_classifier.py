"""Group decoded archive entries into per-collaborator PDF lists."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable

from colaboradores_docs.models.zip_import import ArchiveEntry, ClassifiedEntries, CollaboratorFile

__all__ = ["classify_entries", "infer_root_folder"]

MACOS_METADATA_DIR = "__MACOSX"
SUPPORTED_EXTENSION = ".pdf"


def _is_candidate(entry: ArchiveEntry) -> bool:
    if entry.is_directory:
        return False
    if not entry.path:
        return False
    return not entry.path.startswith(f"{MACOS_METADATA_DIR}/")


def _segments(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def infer_root_folder(segments_list: list[list[str]]) -> str | None:
    """Return the single top-level folder shared by every entry, if any.

    A shared first segment only counts as a root when at least one entry is
    nested beneath it; an archive of loose files has no root to strip.
    """
    first_segments = {parts[0] for parts in segments_list if parts}
    if len(first_segments) == 1 and any(len(parts) > 1 for parts in segments_list):
        return next(iter(first_segments))
    return None


def _collaborator_name(parts: list[str], root_folder: str | None) -> str | None:
    if root_folder and parts[0] == root_folder:
        if len(parts) < 2:
            return None
        name = parts[1]
    else:
        name = parts[0]

    if not name or name == MACOS_METADATA_DIR:
        return None
    return name


def classify_entries(entries: Iterable[ArchiveEntry]) -> ClassifiedEntries:
    """Group PDF entries by the collaborator folder they live under.

    Directories, empty paths and ``__MACOSX/`` metadata are dropped silently.
    Every non-PDF file yields one error line, and a collaborator whose files were
    all rejected yields one more, since that folder never becomes a group.

    Args:
        entries: Entries in archive order, as produced by ``read_zip_entries``.

    Returns:
        ClassifiedEntries with groups keyed by collaborator name and the
        rejection messages in encounter order.
    """
    candidates = [entry for entry in entries if _is_candidate(entry)]
    segments_list = [_segments(entry.path) for entry in candidates]
    root_folder = infer_root_folder(segments_list)

    result = ClassifiedEntries()
    seen_names: list[str] = []

    for entry, parts in zip(candidates, segments_list, strict=True):
        if not parts:
            continue

        name = _collaborator_name(parts, root_folder)
        if name is None:
            continue
        if name not in seen_names:
            seen_names.append(name)

        file_name = posixpath.basename(entry.path)
        if not file_name.lower().endswith(SUPPORTED_EXTENSION):
            result.errors.append(
                f"Arquivo ignorado ({file_name}) - apenas PDFs são suportados."
            )
            continue

        result.groups.setdefault(name, []).append(
            CollaboratorFile(file_name=file_name, buffer=entry.content)
        )

    for name in seen_names:
        if name not in result.groups:
            result.errors.append(f'Nenhum documento PDF encontrado para o colaborador "{name}".')

    return result
