"""Staff accounts and their permission levels.

Accounts live in the ``usuarios`` table. Passwords are kept as
``<salt_hex>:<pbkdf2_sha256_hex>`` strings.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from colaboradores_docs.data.db import get_session
from colaboradores_docs.data.models import PERMISSION_CHOICES, User

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000
SALT_BYTES = 16

INVALID_CREDENTIALS = "Usuário ou senha inválidos."


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{salt.hex()}:{_derive(password, salt).hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Check *password* against a ``salt:hash`` string; malformed hashes never match."""
    salt_hex, _, hash_hex = stored_hash.partition(":")
    try:
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    if not salt or not expected:
        return False
    return hmac.compare_digest(_derive(password, salt), expected)


def _find_user(session: Session, username: str) -> User | None:
    return session.scalars(select(User).where(User.username == username)).first()


def create_user(
    username: str,
    password: str,
    permissao: str = "Visualizador",
    nome: str | None = None,
) -> tuple[bool, str | None]:
    """Register a staff account.

    Returns:
        ``(True, None)`` on success, otherwise ``(False, message)``.
    """
    username = username.strip()
    if not username:
        return False, "Nome de usuário é obrigatório."
    if not password:
        return False, "Senha é obrigatória."
    if permissao not in PERMISSION_CHOICES:
        return False, f"Permissão inválida: {permissao}."

    try:
        with get_session() as session:
            if _find_user(session, username) is not None:
                return False, "Nome de usuário já cadastrado."
            session.add(
                User(
                    username=username,
                    nome=nome,
                    password_hash=hash_password(password),
                    permissao=permissao,
                )
            )
    except SQLAlchemyError:
        logger.exception("Could not create user %s", username)
        return False, "Não foi possível criar o usuário."

    logger.info("User %s created with permission %s", username, permissao)
    return True, None


def authenticate_user(username: str, password: str) -> tuple[bool, str | None]:
    """Check a username/password pair.

    Returns:
        ``(True, None)`` when the credentials match, otherwise ``(False, message)``.
    """
    username = username.strip()
    if not username or not password:
        return False, "Usuário e senha são obrigatórios."

    with get_session() as session:
        user = _find_user(session, username)
        if user is None or not verify_password(password, user.password_hash):
            return False, INVALID_CREDENTIALS
    return True, None


def get_user_permission(username: str) -> str | None:
    """Return the permission level of *username*, or None for unknown users."""
    with get_session() as session:
        user = _find_user(session, username.strip())
        return user.permissao if user is not None else None
