"""Utility functions and helpers"""

from colaboradores_docs.utils.display import display_import_result, format_bytes, print_entries

__all__ = [
    "display_import_result",
    "format_bytes",
    "print_entries",
]
