from datetime import date
from typing import Optional
from passlib.context import CryptContext
from usermgmt.core.config import settings

# CryptContext handles password hashing using bcrypt
# bcrypt salts every hash and is slow by design to resist brute force
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Returns False on mismatch. A malformed stored hash raises ValueError
    from passlib, so a corrupted row is not mistaken for a wrong password.
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
    """Whole years between date_of_birth and today"""
    today = today or date.today()
    age = today.year - date_of_birth.year
    # Birthday not reached yet this year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age
