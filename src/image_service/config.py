"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import init_db

ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/quicktime",  # .mov
    "video/x-msvideo",  # .avi
    "video/x-ms-wmv",  # .wmv
    "video/webm",
)


@dataclass(slots=True)
class UploadLimits:
    allowed_content_types: Sequence[str]
    max_file_size_bytes: int
    chunk_size_bytes: int


@dataclass(slots=True)
class MediaPaths:
    uploads: Path
    logos: Path


@dataclass(slots=True)
class CachePolicy:
    ttl_seconds: float
    check_period_seconds: float


@dataclass(slots=True)
class AppConfig:
    media_paths: MediaPaths
    upload_limits: UploadLimits
    cache_policy: CachePolicy
    auth_service_url: str
    auth_timeout_seconds: float
    service_name: str
    database_url: str | None
    session_factory: sessionmaker[Session] | None
    prune_metadata_on_delete: bool = False
    ownership_read_through: bool = False
    port: int = 3006


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _ensure_media_paths(paths: MediaPaths) -> None:
    paths.uploads.mkdir(parents=True, exist_ok=True)
    paths.logos.mkdir(parents=True, exist_ok=True)


def _build_session_factory(database_url: str | None) -> sessionmaker[Session] | None:
    if not database_url:
        return None
    engine: Engine = create_engine(database_url, future=True)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)
    init_db(engine)
    return session_factory


def load_config() -> AppConfig:
    """Load configuration from environment (and a local ``.env`` when present)."""
    load_dotenv()

    uploads = Path(os.getenv("UPLOAD_ROOT", "uploads"))
    media_paths = MediaPaths(
        uploads=uploads,
        logos=Path(os.getenv("LOGO_ROOT", str(uploads / "logos"))),
    )
    _ensure_media_paths(media_paths)

    upload_limits = UploadLimits(
        allowed_content_types=ALLOWED_MIME_TYPES,
        max_file_size_bytes=int(os.getenv("MAX_FILE_SIZE", 10 * 1024 * 1024)),
        chunk_size_bytes=int(os.getenv("UPLOAD_CHUNK_SIZE_BYTES", 1 * 1024 * 1024)),
    )
    cache_policy = CachePolicy(
        ttl_seconds=float(os.getenv("CACHE_TTL_SECONDS", 7200)),
        check_period_seconds=float(os.getenv("CACHE_CHECK_PERIOD_SECONDS", 600)),
    )

    database_url = os.getenv("DATABASE_URL", "sqlite:///image_service.db") or None

    return AppConfig(
        media_paths=media_paths,
        upload_limits=upload_limits,
        cache_policy=cache_policy,
        auth_service_url=os.getenv("AUTH_SERVICE_URL", "http://localhost:3003"),
        auth_timeout_seconds=float(os.getenv("AUTH_TIMEOUT_SECONDS", 5)),
        service_name=os.getenv("SERVICE_NAME", "image-service"),
        database_url=database_url,
        session_factory=_build_session_factory(database_url),
        prune_metadata_on_delete=_env_flag("PRUNE_METADATA_ON_DELETE"),
        ownership_read_through=_env_flag("OWNERSHIP_READ_THROUGH"),
        port=int(os.getenv("PORT", 3006)),
    )
