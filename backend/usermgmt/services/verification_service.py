import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session
from usermgmt.core.config import settings
from usermgmt.core.exceptions import InvalidToken, TokenExpired
from usermgmt.models.user import User
from usermgmt.services.user_service import UserService

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class VerificationService:
    """
    Email verification token lifecycle.

    A token is issued once at creation and stays valid for
    VERIFICATION_TOKEN_TTL_MINUTES. Expiry is computed at check time, nothing
    is stored for it. Validating does not consume the token; only
    mark_verified changes state.
    """

    def __init__(self, db: Session, ttl: Optional[timedelta] = None):
        self.db = db
        self.users = UserService(db)
        self.ttl = ttl or timedelta(minutes=settings.VERIFICATION_TOKEN_TTL_MINUTES)

    @staticmethod
    def issue_token(user: User, now: Optional[datetime] = None) -> str:
        """Attach a fresh random token to a user that is about to be created"""
        user.verification_token = str(uuid.uuid4())
        user.token_generated_at = now or datetime.now(timezone.utc)
        user.verified = False
        return user.verification_token

    def is_expired(self, user: User, now: Optional[datetime] = None) -> bool:
        if user.token_generated_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        return _as_utc(now) - _as_utc(user.token_generated_at) > self.ttl

    def validate_token(self, token: str, now: Optional[datetime] = None) -> str:
        """Return the email owning token; raises InvalidToken or TokenExpired"""
        user = self.db.query(User).filter(User.verification_token == token).first()
        if user is None:
            logger.warning("Verification attempted with unknown token")
            raise InvalidToken()

        if self.is_expired(user, now):
            logger.warning(f"Expired verification token for {user.email}")
            raise TokenExpired()

        return user.email

    def mark_verified(self, email: str) -> User:
        """Flip verified on; calling it again is a no-op"""
        user = self.users.get_by_email(email)
        if user.verified:
            return user
        user.verified = True
        self.users.save(user)
        logger.info(f"User {email} verified")
        return user
