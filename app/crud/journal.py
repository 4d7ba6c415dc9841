# crud/journal.py
from typing import Optional, List, Tuple
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.models.journal import Journal, JournalAccess, JournalRole
from app.models.user import User


class JournalCRUD:
    """CRUD operations for Journal model."""

    def create(self, db: Session, *, subject_name: str, commit: bool = True) -> Journal:
        db_obj = Journal(subject_name=subject_name)
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def get(self, db: Session, id: int) -> Optional[Journal]:
        return db.query(Journal).filter(Journal.id == id).first()

    def get_for_user(self, db: Session, *, user_id: int) -> List[Tuple[Journal, JournalAccess]]:
        """Journals the user holds a grant on, most recently accessed first."""
        return (
            db.query(Journal, JournalAccess)
            .join(JournalAccess, JournalAccess.journal_id == Journal.id)
            .filter(JournalAccess.user_id == user_id)
            .order_by(desc(JournalAccess.last_accessed_at), desc(JournalAccess.id))
            .all()
        )

    def get_most_recent_id(self, db: Session, *, user_id: int) -> Optional[int]:
        row = (
            db.query(JournalAccess.journal_id)
            .filter(JournalAccess.user_id == user_id)
            .order_by(desc(JournalAccess.last_accessed_at), desc(JournalAccess.id))
            .first()
        )
        return row[0] if row else None

    def rename(self, db: Session, *, db_obj: Journal, subject_name: str) -> Journal:
        db_obj.subject_name = subject_name
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Journal, commit: bool = True) -> Journal:
        db.delete(db_obj)
        if commit:
            db.commit()
        else:
            db.flush()
        return db_obj

    def count(self, db: Session) -> int:
        return db.query(Journal).count()


class JournalAccessCRUD:
    """CRUD operations for JournalAccess (per-user, per-journal grants)."""

    def create(
        self,
        db: Session,
        *,
        journal_id: int,
        user_id: int,
        role: JournalRole,
        commit: bool = True,
    ) -> JournalAccess:
        db_obj = JournalAccess(journal_id=journal_id, user_id=user_id, role=role, last_accessed_at=utcnow())
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def get(self, db: Session, *, journal_id: int, user_id: int) -> Optional[JournalAccess]:
        return (
            db.query(JournalAccess)
            .filter(JournalAccess.journal_id == journal_id, JournalAccess.user_id == user_id)
            .first()
        )

    def get_role(self, db: Session, *, journal_id: int, user_id: int) -> Optional[JournalRole]:
        row = (
            db.query(JournalAccess.role)
            .filter(JournalAccess.journal_id == journal_id, JournalAccess.user_id == user_id)
            .first()
        )
        return row[0] if row else None

    def get_for_journal(self, db: Session, *, journal_id: int) -> List[Tuple[JournalAccess, User]]:
        return (
            db.query(JournalAccess, User)
            .join(User, User.id == JournalAccess.user_id)
            .filter(JournalAccess.journal_id == journal_id)
            .order_by(JournalAccess.id)
            .all()
        )

    def get_for_user(self, db: Session, *, user_id: int) -> List[JournalAccess]:
        return db.query(JournalAccess).filter(JournalAccess.user_id == user_id).all()

    def count_owners(self, db: Session, *, journal_id: int) -> int:
        return (
            db.query(JournalAccess)
            .filter(JournalAccess.journal_id == journal_id, JournalAccess.role == JournalRole.owner)
            .count()
        )

    def get_successor(self, db: Session, *, journal_id: int, exclude_user_id: int) -> Optional[JournalAccess]:
        """Oldest editor grant, else oldest viewer grant, other than the excluded user's."""
        candidates = (
            db.query(JournalAccess)
            .filter(JournalAccess.journal_id == journal_id, JournalAccess.user_id != exclude_user_id)
            .order_by(JournalAccess.id)
            .all()
        )
        for role in (JournalRole.editor, JournalRole.viewer):
            for grant in candidates:
                if grant.role == role:
                    return grant
        return None

    def touch(self, db: Session, *, db_obj: JournalAccess) -> JournalAccess:
        """Mark the grant as the user's most recently accessed journal."""
        db_obj.last_accessed_at = utcnow()
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_theme(self, db: Session, *, db_obj: JournalAccess, theme_config: str) -> JournalAccess:
        db_obj.theme_config = theme_config
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_role(
        self, db: Session, *, db_obj: JournalAccess, role: JournalRole, commit: bool = True
    ) -> JournalAccess:
        db_obj.role = role
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def delete(self, db: Session, *, db_obj: JournalAccess) -> JournalAccess:
        db.delete(db_obj)
        db.commit()
        return db_obj


crud_journal = JournalCRUD()
crud_journal_access = JournalAccessCRUD()
