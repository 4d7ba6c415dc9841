# services/event.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ServiceError, from_pydantic
from app.crud.event import crud_event
from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate
from app.services.media import MediaStorage

logger = logging.getLogger(__name__)


class EventService:
    """Service layer for journal events and their media."""

    def __init__(self):
        self.crud = crud_event

    def _get_event(self, db: Session, journal_id: int, event_id: int) -> Event:
        event = self.crud.get(db, journal_id=journal_id, event_id=event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def list_events(
        self, db: Session, journal_id: int, favorites_only: bool = False
    ) -> List[Event]:
        return self.crud.get_multi_for_journal(
            db, journal_id=journal_id, favorites_only=favorites_only
        )

    def get_event(self, db: Session, journal_id: int, event_id: int) -> Event:
        return self._get_event(db, journal_id, event_id)

    # =====================================================================
    # WRITE OPERATIONS
    # =====================================================================

    def create_event(
        self,
        db: Session,
        journal_id: int,
        author_id: int,
        fields: Dict[str, Any],
        media_file: Optional[UploadFile],
        media: MediaStorage,
    ) -> Event:
        """
        Create an event, storing the attached media first.

        Fields are validated before anything touches the disk. If the row
        cannot be written the stored file is removed again.

        Args:
            db: Database session
            journal_id: Journal the event belongs to
            author_id: Session user, recorded as the author
            fields: Raw form fields (kind, description, date)
            media_file: Optional uploaded file
            media: Media storage

        Raises:
            ValidationError: If a field or the media type is invalid
            PayloadTooLargeError: If the media exceeds the size limit
            ServiceError: If the store fails
        """
        try:
            event_data = EventCreate.model_validate(fields)
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        media_path = None
        if media_file is not None and media_file.filename:
            media_path = media.save(journal_id, media_file)

        try:
            event = self.crud.create(
                db,
                journal_id=journal_id,
                author_id=author_id,
                obj_in=event_data,
                media_path=media_path,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            media.remove(media_path)
            logger.error(f"Error creating event in journal {journal_id}: {exc}")
            raise ServiceError("Failed to create event") from exc

        logger.info(f"User {author_id} created event {event.id} in journal {journal_id}")
        return event

    def update_event(
        self, db: Session, journal_id: int, event_id: int, update_data: EventUpdate
    ) -> Event:
        event = self._get_event(db, journal_id, event_id)
        try:
            return self.crud.update(db, db_obj=event, obj_in=update_data)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error updating event {event_id}: {exc}")
            raise ServiceError("Failed to update event") from exc

    def toggle_favorite(self, db: Session, journal_id: int, event_id: int) -> Event:
        event = self._get_event(db, journal_id, event_id)
        try:
            return self.crud.toggle_favorite(db, db_obj=event)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error toggling favorite on event {event_id}: {exc}")
            raise ServiceError("Failed to update event") from exc

    def delete_event(
        self, db: Session, journal_id: int, event_id: int, media: MediaStorage
    ) -> None:
        """Delete the row, then the media file; a leftover file does not fail the request."""
        event = self._get_event(db, journal_id, event_id)
        media_path = event.media_path
        try:
            self.crud.delete(db, db_obj=event)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error deleting event {event_id}: {exc}")
            raise ServiceError("Failed to delete event") from exc

        media.remove(media_path)


event_service = EventService()
