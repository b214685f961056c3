"""Display and formatting utilities"""

from __future__ import annotations

from colaboradores_docs.models.zip_import import ArchiveEntry, ImportOutcome


def format_bytes(size: float) -> str:
    """Format bytes into human-readable string.

    Args:
        size: Size in bytes.

    Returns:
        Formatted string (e.g., "1.5 KB", "2.3 MB").
    """
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def print_entries(entries: list[ArchiveEntry]) -> None:
    """Print archive entries as an indented listing."""
    for entry in entries:
        depth = entry.path.rstrip("/").count("/")
        prefix = "  " * depth
        name = entry.path.rstrip("/").rsplit("/", 1)[-1]
        if entry.is_directory:
            print(f"{prefix}📁 {name}/")
        else:
            print(f"{prefix}📄 {name} ({format_bytes(len(entry.content))})")


def display_import_result(outcome: ImportOutcome) -> None:
    """Display the import summary with formatted output.

    Args:
        outcome: Result of the import run.
    """
    summary = outcome.summary
    if outcome.success:
        print("\n✅ Import finished:")
    else:
        print(f"\n❌ Import failed: {outcome.error}")
    print(f"   • Collaborators created: {summary.created_count}")
    print(f"   • Documents imported: {summary.imported_document_count}")

    if summary.errors:
        print(f"\n⚠️  {len(summary.errors)} issue(s):")
        print("-" * 60)
        for line in summary.errors:
            print(f"- {line}")
