from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlmodel import Session

from ..config import SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from ..database import get_session
from ..dependencies import require_user
from ..models.user import User
from ..services.auth import (
    authenticate_user,
    create_session,
    create_user,
    delete_session,
    get_user_by_email,
    is_valid_email,
    user_to_public,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


def _session_response(db: Session, user: User) -> JSONResponse:
    session_token = create_session(db, user.id)
    response = JSONResponse(user_to_public(user))
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_token,
        httponly=True,
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        samesite="lax"
    )
    return response


@router.post("/register")
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_session)
):
    """Create an account and log it in."""
    if not data.name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")

    if not is_valid_email(data.email.strip()):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    if len(data.password) < 6:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 6 characters"
        )

    if len(data.password) > 72:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be 72 characters or less"
        )

    if get_user_by_email(db, data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    user = create_user(db, email=data.email, password=data.password, name=data.name)
    return _session_response(db, user)


@router.post("/login")
async def login(
    data: LoginRequest,
    db: Session = Depends(get_session)
):
    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    return _session_response(db, user)


@router.post("/logout")
async def logout(
    request: Request,
    db: Session = Depends(get_session)
):
    session_token: Optional[str] = request.cookies.get(SESSION_COOKIE_NAME)
    if session_token:
        delete_session(db, session_token)

    response = JSONResponse({"success": True})
    response.delete_cookie(key=SESSION_COOKIE_NAME)
    return response


@router.get("/me")
async def me(current_user: User = Depends(require_user)):
    return user_to_public(current_user)
