from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean
from sqlalchemy.sql import func
from usermgmt.core.database import Base


class User(Base):
    """
    User model.

    Email is the external lookup key; id never leaves the service except in responses.
    The password column only ever holds a bcrypt hash.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    # Unique index is the authoritative duplicate-email guard
    email = Column(String(255), unique=True, index=True, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    # Derived from date_of_birth before every write
    age = Column(Integer, nullable=False, default=0)
    password = Column(String(255), nullable=False)

    verification_token = Column(String(64), index=True, nullable=True)
    verified = Column(Boolean, nullable=False, default=False)
    token_generated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
