# models/journal.py

import enum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.config import Base


class JournalRole(str, enum.Enum):
    owner = "owner"
    editor = "editor"
    viewer = "viewer"


class Journal(Base):
    __tablename__ = "journals"

    id = Column(Integer, primary_key=True, index=True)
    subject_name = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    grants = relationship("JournalAccess", back_populates="journal", cascade="all, delete-orphan", passive_deletes=True)
    events = relationship("Event", back_populates="journal", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Journal {self.id} {self.subject_name}>"


class JournalAccess(Base):
    __tablename__ = "journal_access"
    __table_args__ = (
        UniqueConstraint("journal_id", "user_id", name="uq_journal_access_journal_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    journal_id = Column(Integer, ForeignKey("journals.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SqlEnum(JournalRole), nullable=False, default=JournalRole.viewer)
    theme_config = Column(Text, nullable=True)  # opaque serialized blob owned by the frontend
    last_accessed_at = Column(DateTime, default=utcnow)

    journal = relationship("Journal", back_populates="grants")
    user = relationship("User", back_populates="journal_access")
