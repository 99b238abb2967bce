"""Storage key naming for entity slots and logo slots."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

METADATA_SUFFIX = ".json"
_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,16}$")
_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$")


def extension_of(original_name: str | None) -> str:
    """Return the extension of a caller-supplied filename, or ``""``.

    Only a short alphanumeric suffix is kept. ``.json`` is reserved for
    metadata documents and never becomes part of a slot key.
    """
    if not original_name:
        return ""
    # browsers on Windows may send the full client path
    suffix = PurePosixPath(original_name.replace("\\", "/")).suffix
    if not _SAFE_SUFFIX.match(suffix) or suffix.lower() == METADATA_SUFFIX:
        return ""
    return suffix


def slot_stem(entity_id: str, position: int) -> str:
    return f"{entity_id}-{position}"


def slot_name_for(entity_id: str, position: int, extension: str) -> str:
    """``{entityId}-{position}{extension}``; equal slots share a key."""
    return f"{slot_stem(entity_id, position)}{extension}"


def logo_stem(company_id: str) -> str:
    return f"logo-{company_id}"


def logo_name_for(company_id: str, extension: str) -> str:
    """``logo-{companyId}{extension}``."""
    return f"{logo_stem(company_id)}{extension}"


def aggregate_name_for(entity_id: str) -> str:
    return f"{entity_id}{METADATA_SUFFIX}"


def logo_metadata_name_for(company_id: str) -> str:
    return f"{logo_stem(company_id)}{METADATA_SUFFIX}"


def is_safe_id(value: str | None) -> bool:
    """Entity and company ids: ASCII letters, digits, ``_`` and ``-``; no dots."""
    return bool(value) and _SAFE_ID.fullmatch(value) is not None


def matches_stem(key: str, stem: str) -> bool:
    """True when ``key`` is ``stem`` itself or ``stem`` plus one safe extension.

    ``E1-1`` matches ``E1-1.png`` but not ``E1-10.png``, and ``logo-acme``
    does not match ``logo-acme.co.png``.
    """
    if not key.startswith(stem):
        return False
    rest = key[len(stem):]
    return rest == "" or _SAFE_SUFFIX.fullmatch(rest) is not None


def is_metadata_key(key: str) -> bool:
    return key.lower().endswith(METADATA_SUFFIX)
