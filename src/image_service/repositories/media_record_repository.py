"""Persistence layer for media_files shadow records."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..db.db_models import MediaFileModel
from ..exceptions import handle_sqlalchemy_errors
from ..media.media_models import AssetDescriptor


@dataclass(slots=True)
class MediaRecord:
    id: str
    entity_id: str
    entity_type: str
    company_id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    position: int
    created_at: datetime
    updated_at: datetime


class MediaRecordRepository:
    """Write-through relational copy of stored assets; never read on the request path."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def create(self, descriptor: AssetDescriptor) -> MediaRecord:
        """Insert a record for ``descriptor``, replacing any row for the same slot."""
        now = datetime.utcnow()
        with handle_sqlalchemy_errors(entity="media_files"), self._session_factory() as session:
            session.execute(
                delete(MediaFileModel).where(
                    MediaFileModel.entity_id == descriptor.entity_id,
                    MediaFileModel.position == descriptor.position,
                )
            )
            model = MediaFileModel(
                id=descriptor.id,
                entity_id=descriptor.entity_id,
                entity_type=descriptor.entity_type,
                company_id=descriptor.company_id,
                filename=descriptor.stored_name,
                original_name=descriptor.original_name,
                mime_type=descriptor.mime_type,
                size=descriptor.size_bytes,
                position=descriptor.position,
                created_at=descriptor.created_at.replace(tzinfo=None),
                updated_at=now,
            )
            session.add(model)
            session.commit()
            return self._to_domain(model)

    def find_by_id(self, record_id: str) -> MediaRecord | None:
        with self._session_factory() as session:
            model = session.get(MediaFileModel, record_id)
            return self._to_domain(model) if model is not None else None

    def find_by_entity(self, entity_id: str, company_id: str) -> list[MediaRecord]:
        with self._session_factory() as session:
            rows = (
                session.query(MediaFileModel)
                .filter(
                    MediaFileModel.entity_id == entity_id,
                    MediaFileModel.company_id == company_id,
                )
                .order_by(MediaFileModel.position)
                .all()
            )
            return [self._to_domain(row) for row in rows]

    def remove(self, record_id: str) -> None:
        with handle_sqlalchemy_errors(entity="media_files"), self._session_factory() as session:
            session.execute(delete(MediaFileModel).where(MediaFileModel.id == record_id))
            session.commit()

    def remove_slot(self, entity_id: str, position: int) -> int:
        with handle_sqlalchemy_errors(entity="media_files"), self._session_factory() as session:
            result = session.execute(
                delete(MediaFileModel).where(
                    MediaFileModel.entity_id == entity_id,
                    MediaFileModel.position == position,
                )
            )
            session.commit()
            return int(result.rowcount or 0)

    @staticmethod
    def _to_domain(model: MediaFileModel) -> MediaRecord:
        return MediaRecord(
            id=model.id,
            entity_id=model.entity_id,
            entity_type=model.entity_type,
            company_id=model.company_id,
            filename=model.filename,
            original_name=model.original_name,
            mime_type=model.mime_type,
            size=model.size,
            position=model.position,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
