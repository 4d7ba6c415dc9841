# models/user.py

import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum as SqlEnum
from sqlalchemy.orm import relationship
from app.core.clock import utcnow
from app.core.config import Base


class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    # ---- Base fields ----
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SqlEnum(UserRole), nullable=False, default=UserRole.user)
    created_at = Column(DateTime, default=utcnow)

    # ---- Relationships ----
    # Deletes are left to the database: grants and sessions cascade, authored events keep a NULL author.
    journal_access = relationship("JournalAccess", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    events = relationship("Event", back_populates="author", passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"
