import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Optional
import bcrypt
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models.user import User
from ..models.session import Session as UserSession
from ..config import SESSION_EXPIRE_DAYS

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Truncates to 72 bytes for bcrypt compatibility."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def create_session(db: Session, user_id: int) -> str:
    """Create a new session for a user and return the session token."""
    session_token = secrets.token_urlsafe(32)
    expires_at = datetime.utcnow() + timedelta(days=SESSION_EXPIRE_DAYS)

    user_session = UserSession(
        user_id=user_id,
        session_token=session_token,
        expires_at=expires_at
    )
    db.add(user_session)
    db.commit()

    return session_token


def delete_session(db: Session, session_token: str) -> None:
    """Delete a session (logout)."""
    statement = select(UserSession).where(UserSession.session_token == session_token)
    user_session = db.exec(statement).first()
    if user_session:
        db.delete(user_session)
        db.commit()


def purge_expired_sessions(db: Session) -> int:
    """Delete every expired session row, returning how many were removed."""
    expired = db.exec(
        select(UserSession).where(UserSession.expires_at <= datetime.utcnow())
    ).all()
    for user_session in expired:
        db.delete(user_session)
    db.commit()
    return len(expired)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email (emails are stored lower-cased)."""
    statement = select(User).where(User.email == email.strip().lower())
    return db.exec(statement).first()


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    is_admin: bool = False
) -> User:
    """Create a new user."""
    user = User(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        name=name.strip(),
        is_admin=is_admin
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another registration for the same email
        db.rollback()
        logger.warning(f"User insert rejected by unique index on email {user.email}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")
    db.refresh(user)
    logger.info(f"Created user {user.id} ({user.email})")
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def user_to_public(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "isAdmin": user.is_admin,
    }
