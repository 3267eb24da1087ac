import logging
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from usermgmt.api.dependencies import get_current_user, get_email_sender, get_user_service
from usermgmt.core.exceptions import AlreadyExists, EmailDeliveryError, Forbidden, InternalFailure, NotFound
from usermgmt.models.user import User
from usermgmt.services.email_service import EmailService
from usermgmt.services.user_service import UserService
from usermgmt.services.verification_service import VerificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def _not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today():
        raise ValueError("Date of birth cannot be in the future")
    return value


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    date_of_birth: date = Field(alias="dob")
    password: str = Field(min_length=1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        # Whitespace-only names become "" and fail min_length
        return value.strip() if isinstance(value, str) else value

    @field_validator("date_of_birth")
    @classmethod
    def dob_not_in_future(cls, value):
        return _not_in_future(value)


class UserUpdate(BaseModel):
    """Partial patch - blank fields mean "leave unchanged" """
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = Field(default=None, alias="dob")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("email", "first_name", "last_name", "date_of_birth", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        return value

    @field_validator("date_of_birth")
    @classmethod
    def dob_not_in_future(cls, value):
        return _not_in_future(value)


class EmailRequest(BaseModel):
    email: Optional[str] = None


class UserResponse(BaseModel):
    """Sanitized user - never carries the password hash or verification token"""
    id: int
    first_name: str
    last_name: str
    email: str
    date_of_birth: date = Field(serialization_alias="dob")
    age: int
    verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str


def _require_email(body: EmailRequest) -> str:
    email = (body.email or "").strip()
    if not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is required"
        )
    return email


def _forbidden(e: Forbidden) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    users: UserService = Depends(get_user_service),
    email_sender: EmailService = Depends(get_email_sender),
):
    """Register a user and email them a verification link"""
    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        date_of_birth=payload.date_of_birth,
        password=payload.password,
    )
    VerificationService.issue_token(user)

    try:
        users.create(user, hash_password=True)
    except AlreadyExists as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user"
        )

    try:
        email_sender.send_verification_email(user.email, user.verification_token)
    except EmailDeliveryError:
        # The row is already committed; the client sees the failure and the user stays unverified
        logger.error(f"User {user.email} created but verification email was not sent")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification email"
        )

    return user


@router.get("/user", response_model=UserResponse)
def get_user(
    body: EmailRequest,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Fetch a verified user by email"""
    email = _require_email(body)
    try:
        return users.get_verified(email)
    except Forbidden as e:
        raise _forbidden(e)


@router.put("/user", response_model=UserResponse)
def update_user(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Update the authenticated caller's own record"""
    changes = payload.model_dump(exclude_none=True)
    try:
        users.get_verified(current_user.email)
        return users.update(current_user.email, changes)
    except Forbidden as e:
        raise _forbidden(e)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except AlreadyExists as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InternalFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update user"
        )


@router.delete("/user", response_model=MessageResponse)
def delete_user(
    body: EmailRequest,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Delete a verified user by email"""
    email = _require_email(body)
    try:
        users.get_verified(email)
        users.delete(email)
    except Forbidden as e:
        raise _forbidden(e)
    except InternalFailure:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete user"
        )
    return {"message": "User deleted successfully"}
