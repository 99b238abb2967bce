"""Helpers for building retrieval URLs."""

from __future__ import annotations

from urllib.parse import quote

MEDIA_PREFIX = "/media"


def build_file_url(stored_name: str, prefix: str = MEDIA_PREFIX) -> str:
    return f"{prefix.rstrip('/')}/file/{quote(stored_name)}"


def build_logo_url(company_id: str, prefix: str = MEDIA_PREFIX) -> str:
    return f"{prefix.rstrip('/')}/company-logo/file/{quote(company_id)}"
