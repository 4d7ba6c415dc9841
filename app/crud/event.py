# crud/event.py
from typing import Optional, List
from sqlalchemy import desc
from sqlalchemy.orm import Session, joinedload

from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate


class EventCRUD:
    """CRUD operations for Event model."""

    def create(
        self,
        db: Session,
        *,
        journal_id: int,
        author_id: int,
        obj_in: EventCreate,
        media_path: Optional[str] = None,
    ) -> Event:
        db_obj = Event(
            journal_id=journal_id,
            author_id=author_id,
            kind=obj_in.kind,
            description=obj_in.description,
            date=obj_in.date,
            media_path=media_path,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get(self, db: Session, *, journal_id: int, event_id: int) -> Optional[Event]:
        return (
            db.query(Event)
            .options(joinedload(Event.author))
            .filter(Event.id == event_id, Event.journal_id == journal_id)
            .first()
        )

    def get_multi_for_journal(
        self, db: Session, *, journal_id: int, favorites_only: bool = False
    ) -> List[Event]:
        query = (
            db.query(Event)
            .options(joinedload(Event.author))
            .filter(Event.journal_id == journal_id)
        )
        if favorites_only:
            query = query.filter(Event.is_favorite.is_(True))
        return query.order_by(desc(Event.date), desc(Event.id)).all()

    def update(self, db: Session, *, db_obj: Event, obj_in: EventUpdate) -> Event:
        update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def toggle_favorite(self, db: Session, *, db_obj: Event) -> Event:
        db_obj.is_favorite = not db_obj.is_favorite
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Event) -> Event:
        db.delete(db_obj)
        db.commit()
        return db_obj

    def count(self, db: Session) -> int:
        return db.query(Event).count()


crud_event = EventCRUD()
