# models/event.py

import enum
from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Boolean, ForeignKey, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.config import Base


class EventKind(str, enum.Enum):
    text = "text"
    photo = "photo"
    milestone = "milestone"


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    journal_id = Column(Integer, ForeignKey("journals.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(SqlEnum(EventKind), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    media_path = Column(String(500), nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    journal = relationship("Journal", back_populates="events")
    author = relationship("User", back_populates="events")

    @property
    def author_name(self):
        return self.author.name if self.author else None
