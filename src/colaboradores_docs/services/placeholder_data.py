"""Placeholder contact data for collaborators created from a ZIP import.

The archive only carries a folder name per collaborator, so e-mail, phone and
admission date are filled with plausible stand-ins an operator can edit later.
"""

from __future__ import annotations

import random
import re
import unicodedata
from datetime import UTC, datetime, timedelta

PLACEHOLDER_EMAIL_DOMAIN = "example.com"
AREA_CODES = ("11", "21", "31", "41", "51", "61")
MATRICULA_WIDTH = 5
ADMISSION_WINDOW = timedelta(days=365 * 5)

_rng = random.SystemRandom()


def slugify(value: str) -> str:
    """Return an ASCII, dot-separated slug of *value* (accents stripped)."""
    normalized = unicodedata.normalize("NFD", value)
    ascii_only = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    slug = re.sub(r"[^a-z0-9]+", ".", ascii_only.lower())
    slug = re.sub(r"\.\.+", ".", slug)
    return slug.strip(".")


def generate_placeholder_email(name: str) -> str:
    slug = slugify(name) or "colaborador"
    suffix = _rng.randint(1000, 9999)
    return f"{slug}.{suffix}@{PLACEHOLDER_EMAIL_DOMAIN}"


def generate_placeholder_phone() -> str:
    """Return a mobile number formatted as ``(DD) 9XXXX-XXXX``."""
    area_code = _rng.choice(AREA_CODES)
    subscriber = str(_rng.randint(10_000_000, 99_999_999))
    return f"({area_code}) 9{subscriber[:4]}-{subscriber[4:]}"


def generate_placeholder_admission_date(now: datetime | None = None) -> datetime:
    """Return a uniformly random timestamp within the last five years."""
    now = now or datetime.now(UTC)
    offset_seconds = _rng.uniform(0, ADMISSION_WINDOW.total_seconds())
    return now - timedelta(seconds=offset_seconds)


def extract_numeric(value: str | None) -> int:
    """Return the integer formed by the digits of *value*, or 0 when there are none."""
    if not value:
        return 0
    digits = re.sub(r"\D", "", value)
    return int(digits) if digits else 0


def format_matricula(number: int) -> str:
    return str(number).zfill(MATRICULA_WIDTH)
