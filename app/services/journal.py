# services/journal.py
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.access import ANY_ROLE, Deny, DenyReason, check_access
from app.core.config import transaction
from app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from app.crud.journal import crud_journal, crud_journal_access
from app.crud.user_auth import crud_user
from app.models.journal import Journal, JournalAccess, JournalRole
from app.schemas.journal import (
    AccessGrantOut,
    AccessGrantRequest,
    JournalCreate,
    JournalListResponse,
    JournalOut,
    JournalUpdate,
)
from app.schemas.session import SessionData
from app.services.media import MediaStorage
from app.services.session import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_THEME_CONFIG = "{}"


def _journal_out(journal: Journal, grant: JournalAccess) -> JournalOut:
    return JournalOut(
        id=journal.id,
        subject_name=journal.subject_name,
        created_at=journal.created_at,
        role=grant.role,
        last_accessed_at=grant.last_accessed_at,
    )


class JournalService:
    """Service layer for journals, per-user theme config and access grants."""

    def __init__(self):
        self.crud = crud_journal
        self.access_crud = crud_journal_access

    # =====================================================================
    # HELPERS
    # =====================================================================

    def _get_journal(self, db: Session, journal_id: int) -> Journal:
        journal = self.crud.get(db, id=journal_id)
        if not journal:
            raise NotFoundError("Journal not found")
        return journal

    def _get_grant(self, db: Session, journal_id: int, user_id: int) -> JournalAccess:
        grant = self.access_crud.get(db, journal_id=journal_id, user_id=user_id)
        if not grant:
            raise NotFoundError("Access grant not found")
        return grant

    def _ensure_not_last_owner(self, db: Session, grant: JournalAccess) -> None:
        if (
            grant.role == JournalRole.owner
            and self.access_crud.count_owners(db, journal_id=grant.journal_id) <= 1
        ):
            raise ConflictError("A journal must keep at least one owner")

    # =====================================================================
    # JOURNALS
    # =====================================================================

    def list_journals(self, db: Session, session: SessionData) -> JournalListResponse:
        """Journals the session user can access, most recently accessed first."""
        rows = self.crud.get_for_user(db, user_id=session.user_id)
        return JournalListResponse(
            journals=[_journal_out(journal, grant) for journal, grant in rows],
            active_journal_id=session.active_journal_id,
        )

    def create_journal(
        self, db: Session, journal_data: JournalCreate, session: SessionData
    ) -> JournalOut:
        """
        Create a journal with the session user as its owner.

        The journal row and the owner grant are committed together or not at all.

        Raises:
            ServiceError: If the store fails
        """
        try:
            with transaction(db):
                journal = self.crud.create(db, subject_name=journal_data.subject_name, commit=False)
                grant = self.access_crud.create(
                    db,
                    journal_id=journal.id,
                    user_id=session.user_id,
                    role=JournalRole.owner,
                    commit=False,
                )
        except SQLAlchemyError as exc:
            logger.error(f"Error creating journal for user {session.user_id}: {exc}")
            raise ServiceError("Failed to create journal") from exc

        db.refresh(journal)
        db.refresh(grant)
        logger.info(f"User {session.user_id} created journal {journal.id}")
        return _journal_out(journal, grant)

    def set_active_journal(
        self,
        db: Session,
        journal_id: int,
        session: SessionData,
        session_manager: SessionManager,
    ) -> SessionData:
        """
        Switch the session's active journal.

        Any role on the journal is enough. The grant's last access time is
        bumped so the journal sorts first on the next login.

        Raises:
            ForbiddenError: If the user has no grant on the journal
        """
        decision = check_access(
            session,
            journal_id,
            ANY_ROLE,
            lambda jid, uid: self.access_crud.get_role(db, journal_id=jid, user_id=uid),
        )
        if isinstance(decision, Deny):
            if decision.reason == DenyReason.unauthenticated:
                raise UnauthorizedError("Not authenticated")
            raise ForbiddenError("Access denied to this journal")

        grant = self.access_crud.get(db, journal_id=journal_id, user_id=session.user_id)
        self.access_crud.touch(db, db_obj=grant)
        return session_manager.set_active_journal(session, journal_id)

    def get_journal(self, db: Session, journal_id: int, user_id: int) -> JournalOut:
        journal = self._get_journal(db, journal_id)
        grant = self._get_grant(db, journal_id, user_id)
        return _journal_out(journal, grant)

    def rename_journal(
        self, db: Session, journal_id: int, journal_data: JournalUpdate, user_id: int
    ) -> JournalOut:
        journal = self._get_journal(db, journal_id)
        try:
            journal = self.crud.rename(db, db_obj=journal, subject_name=journal_data.subject_name)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error renaming journal {journal_id}: {exc}")
            raise ServiceError("Failed to rename journal") from exc
        return _journal_out(journal, self._get_grant(db, journal_id, user_id))

    def delete_journal(self, db: Session, journal_id: int, media: MediaStorage) -> None:
        """
        Delete a journal. Events and grants go with it; the media directory is
        removed afterwards, best-effort.
        """
        journal = self._get_journal(db, journal_id)
        try:
            self.crud.delete(db, db_obj=journal)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error deleting journal {journal_id}: {exc}")
            raise ServiceError("Failed to delete journal") from exc

        media.remove_journal_dir(journal_id)
        logger.info(f"Deleted journal {journal_id}")

    # =====================================================================
    # THEME CONFIG
    # =====================================================================

    def get_theme_config(self, db: Session, journal_id: int, user_id: int) -> str:
        grant = self._get_grant(db, journal_id, user_id)
        return grant.theme_config or DEFAULT_THEME_CONFIG

    def save_theme_config(self, db: Session, journal_id: int, user_id: int, config: str) -> str:
        grant = self._get_grant(db, journal_id, user_id)
        try:
            grant = self.access_crud.update_theme(db, db_obj=grant, theme_config=config)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error saving theme for journal {journal_id}, user {user_id}: {exc}")
            raise ServiceError("Failed to save theme config") from exc
        return grant.theme_config

    # =====================================================================
    # ACCESS GRANTS
    # =====================================================================

    def list_grants(self, db: Session, journal_id: int) -> List[AccessGrantOut]:
        return [
            AccessGrantOut(
                user_id=user.id,
                name=user.name,
                email=user.email,
                role=grant.role,
                last_accessed_at=grant.last_accessed_at,
            )
            for grant, user in self.access_crud.get_for_journal(db, journal_id=journal_id)
        ]

    def grant_access(
        self, db: Session, journal_id: int, grant_data: AccessGrantRequest
    ) -> AccessGrantOut:
        """
        Give an existing user a role on the journal, or change the role they have.

        Raises:
            NotFoundError: If no user has the email
            ConflictError: If the change would leave the journal without an owner
        """
        self._get_journal(db, journal_id)
        user = crud_user.get_by_email(db, email=grant_data.email)
        if not user:
            raise NotFoundError("User not found")

        grant: Optional[JournalAccess] = self.access_crud.get(
            db, journal_id=journal_id, user_id=user.id
        )
        try:
            if grant is None:
                grant = self.access_crud.create(
                    db, journal_id=journal_id, user_id=user.id, role=grant_data.role
                )
            elif grant.role != grant_data.role:
                self._ensure_not_last_owner(db, grant)
                grant = self.access_crud.update_role(db, db_obj=grant, role=grant_data.role)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error granting access on journal {journal_id}: {exc}")
            raise ServiceError("Failed to grant access") from exc

        logger.info(f"User {user.id} now has role {grant.role.value} on journal {journal_id}")
        return AccessGrantOut(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=grant.role,
            last_accessed_at=grant.last_accessed_at,
        )

    def revoke_access(self, db: Session, journal_id: int, user_id: int) -> None:
        """
        Raises:
            NotFoundError: If the user holds no grant on the journal
            ConflictError: If the grant is the journal's last owner
        """
        grant = self._get_grant(db, journal_id, user_id)
        self._ensure_not_last_owner(db, grant)
        try:
            self.access_crud.delete(db, db_obj=grant)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error revoking access on journal {journal_id}: {exc}")
            raise ServiceError("Failed to revoke access") from exc
        logger.info(f"Revoked access of user {user_id} on journal {journal_id}")


journal_service = JournalService()
