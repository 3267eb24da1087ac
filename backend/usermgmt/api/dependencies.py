import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session
from usermgmt.core.database import get_db
from usermgmt.core.exceptions import Unauthorized
from usermgmt.models.user import User
from usermgmt.services.email_service import EmailService
from usermgmt.services.user_service import UserService
from usermgmt.services.verification_service import VerificationService

logger = logging.getLogger(__name__)

# HTTP Basic scheme - extracts email/password from the Authorization header
# auto_error=False so a missing header gets the same response as bad credentials
basic_scheme = HTTPBasic(realm="Restricted", auto_error=False)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_verification_service(db: Session = Depends(get_db)) -> VerificationService:
    return VerificationService(db)


def get_email_sender() -> EmailService:
    """Email sender dependency - tests override this with a fake"""
    return EmailService()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": 'Basic realm="Restricted"'},
    )


def get_current_user(
    credentials: HTTPBasicCredentials | None = Depends(basic_scheme),
    users: UserService = Depends(get_user_service),
) -> User:
    """
    HTTP Basic Authentication gate.

    The username is the account email. Raises 401 if the header is missing,
    the email is unknown, or the password does not match the stored hash.
    """
    if credentials is None:
        raise _unauthorized(Unauthorized.default_message)

    try:
        return users.authenticate(credentials.username, credentials.password)
    except Unauthorized as e:
        raise _unauthorized(e.message)
    except ValueError:
        # Stored value is not a bcrypt hash - a data problem, not a bad login
        logger.error(f"Malformed password hash stored for {credentials.username}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not validate credentials",
        )
