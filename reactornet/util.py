"""Helpers for cookies, URLs, file names, SQL escaping and random codes."""

from __future__ import annotations

import hashlib
import re
import secrets
import string
import time
from typing import Any

_REGEX_SPECIAL = set(".+*?^$()[]{}|\\")
_HEX_PREFIX = re.compile(r"\s*([0-9a-fA-F]+)")

_LOWER_ALNUM = string.ascii_lowercase + string.digits
_UPPER_ALNUM = string.digits + string.ascii_uppercase

_FILE_TYPES = {
    "image": ("jpg", "jpeg", "png", "gif"),
    "video": ("mp4", "avi", "mov", "wmv"),
    "pdf": ("pdf",),
    "word": ("doc", "docx"),
    "excel": ("xls", "xlsx"),
    "powerpoint": ("ppt", "pptx"),
    "text": ("txt", "csv"),
}
_EXTENSION_TYPES = {ext: kind for kind, exts in _FILE_TYPES.items() for ext in exts}


def parse_cookie(cookie_header: str, key: str) -> str:
    """Return the value of ``key`` in a Cookie header, or ""."""
    match = re.search(key + "=([^;]+)", cookie_header)
    return match.group(1) if match else ""


def escape_regex(text: str) -> str:
    """Backslash-escape regular-expression metacharacters in ``text``."""
    return "".join("\\" + c if c in _REGEX_SPECIAL else c for c in text)


def _hex_value(digits: str) -> int:
    match = _HEX_PREFIX.match(digits)
    return int(match.group(1), 16) if match else 0


def url_decode(encoded: str) -> str:
    """Decode '+' as space and ``%xx`` escapes; a '%' too close to the end is dropped."""
    out = bytearray()
    length = len(encoded)
    i = 0
    while i < length:
        ch = encoded[i]
        if ch != "%":
            out += b" " if ch == "+" else ch.encode()
        elif i + 2 < length:
            out.append(_hex_value(encoded[i + 1:i + 3]) & 0xFF)
            i += 2
        i += 1
    return out.decode("utf-8", "replace")


def generate_unique_file_name(prefix: str) -> str:
    """Return ``<prefix>_<milliseconds>_<four random digits>``."""
    millis = time.time_ns() // 1_000_000
    return f"{prefix}_{millis}_{1000 + secrets.randbelow(9000)}"


def get_file_type(file_name: str) -> str:
    """Classify a file by its extension; "unknown" when it has none."""
    base, dot, extension = file_name.rpartition(".")
    if not dot or not extension:
        return "unknown"
    return _EXTENSION_TYPES.get(extension.lower(), "other")


def escape_string(text: str, connection: Any) -> str:
    """Escape ``text`` for SQL with ``connection``; unchanged when there is none.

    ``connection`` may be a database connection with ``escape_string`` or a
    wrapper exposing one as ``raw``.
    """
    target = getattr(connection, "raw", connection)
    if target is None:
        return text
    return target.escape_string(text)


def string_digest(text: str) -> str:
    """Return a short, non-cryptographic hexadecimal digest of ``text``."""
    value = int.from_bytes(hashlib.blake2b(text.encode(), digest_size=8).digest(), "big")
    return format(value, "x")


def _random_code(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_session_id() -> str:
    """Return 32 random lower-case letters and digits."""
    return _random_code(_LOWER_ALNUM, 32)


def generate_share_code() -> str:
    """Return 32 random lower-case letters and digits."""
    return _random_code(_LOWER_ALNUM, 32)


def generate_extract_code() -> str:
    """Return 6 random digits and upper-case letters."""
    return _random_code(_UPPER_ALNUM, 6)