# crud/user_auth.py
from typing import Optional, List
from sqlalchemy.orm import Session
from passlib.context import CryptContext

from app.core.config import settings
from app.models.user import User, UserRole

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


class UserCRUD:
    """CRUD operations for User model."""

    # =====================================================================
    # HELPER METHODS
    # =====================================================================

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return pwd_context.verify(plain_password, hashed_password)

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.user,
        commit: bool = True,
    ) -> User:
        """
        Create a new user.

        Args:
            db: Database session
            name: Display name
            email: Normalized email address
            password: Plain password (hashed here)
            role: Site-wide role
            commit: Commit immediately, or only flush when part of a larger unit

        Returns:
            Created User instance
        """
        db_obj = User(
            name=name,
            email=email,
            password_hash=self.hash_password(password),
            role=role,
        )
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def update_role(self, db: Session, *, db_obj: User, role: UserRole) -> User:
        """Update user role (admin only)."""
        db_obj.role = role
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, id: int) -> Optional[User]:
        return db.query(User).filter(User.id == id).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[User]:
        return db.query(User).order_by(User.id).offset(skip).limit(limit).all()

    def count(self, db: Session) -> int:
        return db.query(User).count()

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def delete(self, db: Session, *, db_obj: User, commit: bool = True) -> User:
        """Hard delete; grants and sessions cascade, authored events lose their author."""
        db.delete(db_obj)
        if commit:
            db.commit()
        else:
            db.flush()
        return db_obj


# Create singleton instance
crud_user = UserCRUD()
