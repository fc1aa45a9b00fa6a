from __future__ import annotations

import hashlib
import re
import secrets
from datetime import datetime

from src.core.timeutils import utcnow

API_KEY_PREFIX = "ak_"
LICENSE_KEY_PREFIX = "lk_"
USER_TOKEN_PREFIX = "ut_"
HUB_SERIAL_PREFIX = "AO"
KEY_ENTROPY_BYTES = 32

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_hex(KEY_ENTROPY_BYTES)}"


def generate_license_key() -> str:
    return f"{LICENSE_KEY_PREFIX}{secrets.token_hex(KEY_ENTROPY_BYTES)}"


def generate_user_token() -> str:
    return f"{USER_TOKEN_PREFIX}{secrets.token_hex(KEY_ENTROPY_BYTES)}"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_hub_serial(tenant_slug: str, sequence: int, now: datetime | None = None) -> str:
    timestamp_ms = int((now or utcnow()).timestamp() * 1000)
    return f"{HUB_SERIAL_PREFIX}-{tenant_slug.upper()}-{sequence:03d}-{to_base36(timestamp_ms)}"


def hash_secret(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def slugify(name: str) -> str:
    return _SLUG_INVALID.sub("-", name.strip().lower()).strip("-")
