# services/user_auth.py
import logging
from typing import List, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import transaction
from app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RegistrationDisabledError,
    ServiceError,
    UnauthorizedError,
    from_pydantic,
)
from app.crud.journal import crud_journal, crud_journal_access
from app.crud.site_config import crud_site_config
from app.crud.user_auth import crud_user
from app.models.journal import Journal, JournalRole
from app.models.user import User, UserRole
from app.schemas.session import SessionData
from app.schemas.user_auth import LoginRequest, RegisterRequest
from app.services.media import MediaStorage
from app.services.session import SessionManager

logger = logging.getLogger(__name__)

SUBJECT_NAME_MAX = 50


# =====================================================================
# SERVICE CLASS
# =====================================================================


class UserAuthService:
    """Service layer for registration, login and admin user management."""

    def __init__(self):
        self.crud = crud_user

    # =====================================================================
    # USER REGISTRATION
    # =====================================================================

    def register_user(
        self, db: Session, body: bytes
    ) -> Tuple[User, Journal]:
        """
        Public registration.

        The registration toggle is checked before the body is even
        decoded. The user, their default journal and the owner grant are
        written in one transaction. The very first account becomes admin so
        the admin panel can be reached on a fresh install.

        Args:
            db: Database session
            body: Undecoded JSON request body

        Returns:
            Tuple of (created user, default journal)

        Raises:
            RegistrationDisabledError: If registrations are switched off
            ValidationError: If the payload is invalid
            ConflictError: If the email is already registered
        """
        site_config = crud_site_config.get_or_create(db)
        if not site_config.allow_new_registrations:
            raise RegistrationDisabledError()

        try:
            data = RegisterRequest.model_validate_json(body)
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        if self.crud.get_by_email(db, email=data.email):
            raise ConflictError("Email already registered")

        role = UserRole.admin if self.crud.count(db) == 0 else UserRole.user
        subject_name = (data.subject_name or f"{data.name}'s journal")[:SUBJECT_NAME_MAX]

        try:
            with transaction(db):
                user = self.crud.create(
                    db,
                    name=data.name,
                    email=data.email,
                    password=data.password,
                    role=role,
                    commit=False,
                )
                journal = crud_journal.create(db, subject_name=subject_name, commit=False)
                crud_journal_access.create(
                    db,
                    journal_id=journal.id,
                    user_id=user.id,
                    role=JournalRole.owner,
                    commit=False,
                )
        except IntegrityError as exc:
            raise ConflictError("Email already registered") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Registration error: {exc}")
            raise ServiceError("Failed to register user") from exc

        db.refresh(user)
        db.refresh(journal)
        logger.info(f"Registered user {user.id} ({user.role.value}) with journal {journal.id}")
        return user, journal

    # =====================================================================
    # AUTHENTICATION & LOGIN
    # =====================================================================

    def authenticate_user(self, db: Session, login_data: LoginRequest) -> User:
        """
        Authenticate user with email and password.

        Raises:
            UnauthorizedError: If credentials are invalid
        """
        user = self.crud.get_by_email(db, email=login_data.email)
        if not user or not self.crud.verify_password(login_data.password, user.password_hash):
            logger.info(f"Failed login for {login_data.email}")
            raise UnauthorizedError("Invalid email or password")
        return user

    # =====================================================================
    # ADMIN: USER MANAGEMENT
    # =====================================================================

    def get_users(self, db: Session) -> List[User]:
        return self.crud.get_multi(db, limit=1000)

    def update_role(
        self,
        db: Session,
        user_id: int,
        role: UserRole,
        requesting_session: SessionData,
        session_manager: SessionManager,
    ) -> User:
        """
        Change a user's site role.

        When the role actually changes the user's existing sessions are
        dropped so the new role applies on their next login.

        Raises:
            NotFoundError: If user not found
            ForbiddenError: If an admin tries to demote themself
        """
        user = self.crud.get(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")

        if user.id == requesting_session.user_id and role != UserRole.admin:
            raise ForbiddenError("You cannot remove your own admin role")

        if user.role == role:
            return user

        try:
            user = self.crud.update_role(db, db_obj=user, role=role)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error updating role for user {user_id}: {exc}")
            raise ServiceError("Failed to update user role") from exc

        session_manager.destroy_user_sessions(user.id)
        return user

    def delete_user(
        self,
        db: Session,
        user_id: int,
        requesting_session: SessionData,
        media: MediaStorage,
    ) -> None:
        """
        Delete a user account (admin only).

        Journals must never be left without an owner: where the user is the
        sole owner, the oldest editor (else viewer) grant is promoted; a
        journal nobody else can access is deleted together with its media.
        Events the user wrote stay, with no author.

        Raises:
            NotFoundError: If user not found
            ForbiddenError: If an admin tries to delete themself
        """
        user = self.crud.get(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")

        if user.id == requesting_session.user_id:
            raise ForbiddenError("You cannot delete your own account")

        removed_journal_ids = []
        try:
            with transaction(db):
                for grant in crud_journal_access.get_for_user(db, user_id=user.id):
                    if grant.role != JournalRole.owner:
                        continue
                    if crud_journal_access.count_owners(db, journal_id=grant.journal_id) > 1:
                        continue

                    successor = crud_journal_access.get_successor(
                        db, journal_id=grant.journal_id, exclude_user_id=user.id
                    )
                    if successor is not None:
                        crud_journal_access.update_role(
                            db, db_obj=successor, role=JournalRole.owner, commit=False
                        )
                        logger.info(
                            f"Promoted user {successor.user_id} to owner of journal {grant.journal_id}"
                        )
                    else:
                        journal = crud_journal.get(db, id=grant.journal_id)
                        crud_journal.delete(db, db_obj=journal, commit=False)
                        removed_journal_ids.append(grant.journal_id)

                self.crud.delete(db, db_obj=user, commit=False)
        except SQLAlchemyError as exc:
            logger.error(f"Error deleting user {user_id}: {exc}")
            raise ServiceError("Failed to delete user") from exc

        for journal_id in removed_journal_ids:
            media.remove_journal_dir(journal_id)
        logger.info(f"Deleted user {user_id}; removed journals {removed_journal_ids}")


# =====================================================================
# SINGLETON INSTANCE
# =====================================================================

user_auth_service = UserAuthService()
