# schemas/event.py
import datetime as dt
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from app.models.event import EventKind


class EventBase(BaseModel):
    kind: EventKind
    description: Optional[str] = Field(None, max_length=500)
    date: dt.date


class EventCreate(EventBase):
    pass


class EventUpdate(EventBase):
    pass


class EventOut(EventBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    journal_id: int
    media_path: Optional[str] = None
    is_favorite: bool = False
    author_id: Optional[int] = None
    author_name: Optional[str] = None  # None once the author account is gone
    created_at: Optional[dt.datetime] = None


class EventListResponse(BaseModel):
    events: List[EventOut]
