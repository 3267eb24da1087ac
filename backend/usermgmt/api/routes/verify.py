from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from usermgmt.api.dependencies import get_verification_service
from usermgmt.core.exceptions import InvalidToken, NotFound, TokenExpired
from usermgmt.services.verification_service import VerificationService

router = APIRouter(tags=["verification"])


class VerifyResponse(BaseModel):
    message: str
    email: str


@router.get("/verify", response_model=VerifyResponse)
def verify_email(
    token: Optional[str] = Query(default=None),
    verification: VerificationService = Depends(get_verification_service),
):
    """Confirm email ownership with the token from the verification link"""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="There seems to be some error with the Token"
        )

    try:
        email = verification.validate_token(token)
    except (InvalidToken, TokenExpired):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )

    try:
        verification.mark_verified(email)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid Email")

    return {"message": "Email verified successfully", "email": email}
