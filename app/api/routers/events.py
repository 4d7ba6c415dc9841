# app/api/routers/events.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.access import ANY_ROLE, WRITE_ROLES
from app.core.config import get_db
from app.core.security import JournalContext, require_journal_role
from app.schemas.event import EventListResponse, EventOut, EventUpdate
from app.schemas.user_auth import SuccessResponse
from app.services.event import event_service
from app.services.media import MediaStorage, get_media_storage

router = APIRouter(prefix="/api/eventos", tags=["Events"])


# =====================================================================
# READ - any role on the journal
# =====================================================================


@router.get("/{journal_id}", response_model=EventListResponse, summary="List journal events")
def list_events(
    favorites_only: bool = Query(False, description="Only events marked as favorite"),
    ctx: JournalContext = Depends(require_journal_role(ANY_ROLE)),
    db: Session = Depends(get_db),
):
    """Events of the journal, newest date first."""
    events = event_service.list_events(db, ctx.journal_id, favorites_only=favorites_only)
    return EventListResponse(events=[EventOut.model_validate(event) for event in events])


@router.get("/{journal_id}/{event_id}", response_model=EventOut, summary="Get event")
def get_event(
    event_id: int,
    ctx: JournalContext = Depends(require_journal_role(ANY_ROLE)),
    db: Session = Depends(get_db),
):
    return event_service.get_event(db, ctx.journal_id, event_id)


# =====================================================================
# WRITE - owner or editor
# =====================================================================


@router.post(
    "/{journal_id}",
    response_model=EventOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
)
def create_event(
    kind: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    ctx: JournalContext = Depends(require_journal_role(WRITE_ROLES)),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """
    Create an event (multipart form).

    - **kind**: text, photo or milestone
    - **description**: Up to 500 characters
    - **date**: ISO date (YYYY-MM-DD)
    - **media**: Optional image or video, up to 25MB
    """
    fields = {"kind": kind, "description": description, "date": date}
    return event_service.create_event(
        db,
        ctx.journal_id,
        ctx.session.user_id,
        {key: value for key, value in fields.items() if value is not None},
        media,
        storage,
    )


@router.put("/{journal_id}/{event_id}", response_model=EventOut, summary="Update event")
def update_event(
    event_id: int,
    update_data: EventUpdate,
    ctx: JournalContext = Depends(require_journal_role(WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    return event_service.update_event(db, ctx.journal_id, event_id, update_data)


@router.patch(
    "/{journal_id}/{event_id}/favorito",
    response_model=EventOut,
    summary="Toggle favorite",
)
def toggle_favorite(
    event_id: int,
    ctx: JournalContext = Depends(require_journal_role(WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    return event_service.toggle_favorite(db, ctx.journal_id, event_id)


@router.delete("/{journal_id}/{event_id}", response_model=SuccessResponse, summary="Delete event")
def delete_event(
    event_id: int,
    ctx: JournalContext = Depends(require_journal_role(WRITE_ROLES)),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """Delete an event and its media file."""
    event_service.delete_event(db, ctx.journal_id, event_id, storage)
    return SuccessResponse(message="Event deleted")
