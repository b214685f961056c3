"""Command-line interface: bulk import, archive inspection, user creation, server."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from colaboradores_docs.data.crud.colaborador_repo import ColaboradorRepository
from colaboradores_docs.data.db import init_db
from colaboradores_docs.data.models import PERMISSION_CHOICES
from colaboradores_docs.models import ArchiveFormatError, ImportValidationError
from colaboradores_docs.services import (
    StorageClient,
    import_colaboradores_zip,
    read_zip_entries,
    validate_import_upload,
)
from colaboradores_docs.services.auth import create_user
from colaboradores_docs.utils import display_import_result, print_entries


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="colaboradores-docs",
        description="Manage collaborators and their documents.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser(
        "import", help="Import collaborators from a ZIP of per-collaborator PDF folders"
    )
    import_parser.add_argument("zip_path", type=Path)

    inspect_parser = subparsers.add_parser("inspect", help="List the entries of a ZIP archive")
    inspect_parser.add_argument("zip_path", type=Path)

    user_parser = subparsers.add_parser("create-user", help="Create a staff account")
    user_parser.add_argument("username")
    user_parser.add_argument("--nome", default=None)
    user_parser.add_argument("--permissao", choices=PERMISSION_CHOICES, default="Visualizador")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    return parser


def _read_archive(zip_path: Path) -> bytes:
    if not zip_path.is_file():
        raise ImportValidationError(f"Arquivo não encontrado: {zip_path}")
    data = zip_path.read_bytes()
    validate_import_upload(zip_path.name, len(data))
    return data


def _run_import(zip_path: Path) -> int:
    print(f"\n📦 Importing: {zip_path.name}")
    print("-" * 60)

    try:
        data = _read_archive(zip_path)
        init_db()
        outcome = import_colaboradores_zip(data, ColaboradorRepository(), StorageClient())
    except (ImportValidationError, ArchiveFormatError) as exc:
        print(f"\n❌ Error: {exc}")
        return 1

    display_import_result(outcome)
    return 0 if outcome.success else 1


def _run_inspect(zip_path: Path) -> int:
    try:
        entries = read_zip_entries(_read_archive(zip_path))
    except (ImportValidationError, ArchiveFormatError) as exc:
        print(f"\n❌ Error: {exc}")
        return 1

    print(f"\n📦 {zip_path.name}: {len(entries)} entries")
    print_entries(entries)
    return 0


def _run_create_user(username: str, nome: str | None, permissao: str) -> int:
    password = getpass.getpass("Password: ")
    init_db()
    created, error = create_user(username, password, permissao=permissao, nome=nome)
    if not created:
        print(f"❌ {error}")
        return 1
    print(f"✅ User {username} created ({permissao}).")
    return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "import":
        return _run_import(args.zip_path)
    if args.command == "inspect":
        return _run_inspect(args.zip_path)
    if args.command == "create-user":
        return _run_create_user(args.username, args.nome, args.permissao)

    from colaboradores_docs.api.main import main as serve

    serve(host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the CLI application."""
    try:
        return run_cli(argv)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user. Exiting.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
