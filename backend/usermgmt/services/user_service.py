import logging
from typing import Any, Dict, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from usermgmt.core.exceptions import AlreadyExists, Forbidden, InternalFailure, NotFound, Unauthorized
from usermgmt.core.security import calculate_age, get_password_hash, verify_password
from usermgmt.models.user import User

logger = logging.getLogger(__name__)

# Fields a client may change through update(); anything else in the patch is ignored
UPDATABLE_FIELDS = ("first_name", "last_name", "date_of_birth", "email")


class UserService:
    """CRUD operations on users, keyed by email"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def prepare_for_save(user: User, hash_password: bool = False) -> User:
        """
        Derive computed columns before a write.

        Age is recomputed on every save. The password is hashed only when
        hash_password is set (the initial create), so an already hashed
        value is never hashed twice.
        """
        user.age = calculate_age(user.date_of_birth)
        if hash_password:
            user.password = get_password_hash(user.password)
        return user

    @staticmethod
    def _email_matches(email: str):
        # Addresses are compared case-insensitively; pydantic only lowercases the domain
        return func.lower(User.email) == email.strip().lower()

    def _find(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(self._email_matches(email)).first()

    def _commit(self, user: User, action: str) -> User:
        try:
            self.db.commit()
        except IntegrityError:
            # Two writers passed the existence check; the unique index decides
            self.db.rollback()
            logger.warning(f"Duplicate email rejected by the store on {action}: {user.email}")
            raise AlreadyExists()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error on {action} for {user.email}: {str(e)}")
            raise InternalFailure(f"Failed to {action} user")
        self.db.refresh(user)
        return user

    def create(self, user: User, hash_password: bool = True) -> User:
        """Persist a new user; raises AlreadyExists when the email is taken"""
        if self._find(user.email) is not None:
            logger.warning(f"User already exists: {user.email}")
            raise AlreadyExists()

        self.prepare_for_save(user, hash_password=hash_password)
        self.db.add(user)
        self._commit(user, "create")
        logger.info(f"Created user {user.id} ({user.email})")
        return user

    def get_by_email(self, email: str) -> User:
        user = self._find(email)
        if user is None:
            raise NotFound()
        return user

    def get_verified(self, email: str) -> User:
        """Load a user that must exist and have confirmed their email"""
        user = self._find(email)
        if user is None or not user.verified:
            raise Forbidden()
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Check login credentials.

        Raises Unauthorized for an unknown email or a wrong password. A stored
        value that is not a bcrypt hash raises ValueError from passlib.
        """
        user = self._find(email)
        if user is None:
            raise Unauthorized("Unauthorized: Invalid email")
        if not verify_password(password, user.password):
            raise Unauthorized("Unauthorized: Invalid password")
        return user

    def update(self, email: str, changes: Dict[str, Any]) -> User:
        """
        Apply a partial patch to the user identified by email.

        Only non-empty values of UPDATABLE_FIELDS overwrite stored ones.
        """
        user = self.get_by_email(email)

        new_email = changes.get("email")
        if new_email:
            holder = self._find(new_email)
            if holder is not None and holder.id != user.id:
                logger.warning(f"Cannot change {user.email} to taken email {new_email}")
                raise AlreadyExists()

        for field in UPDATABLE_FIELDS:
            value = changes.get(field)
            if value not in (None, ""):
                setattr(user, field, value)

        self.prepare_for_save(user, hash_password=False)
        self._commit(user, "update")
        logger.info(f"Updated user {user.id} ({user.email})")
        return user

    def delete(self, email: str) -> int:
        """Delete by email; deleting a missing user is not an error"""
        try:
            deleted = (
                self.db.query(User)
                .filter(self._email_matches(email))
                .delete(synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error deleting {email}: {str(e)}")
            raise InternalFailure("Failed to delete user")
        logger.info(f"Deleted {deleted} user row(s) for {email}")
        return deleted

    def save(self, user: User) -> User:
        """Persist changes made to a loaded user without touching the password"""
        self.prepare_for_save(user, hash_password=False)
        return self._commit(user, "save")
