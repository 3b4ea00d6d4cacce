from typing import List
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select, col, or_

from ..config import USER_SEARCH_LIMIT, USER_SEARCH_MIN_LENGTH
from ..database import get_session
from ..dependencies import require_user
from ..models.user import User
from ..services.dashboard import get_user_dashboard_stats

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users/search")
async def search_users(
    q: str = "",
    exclude: List[int] = Query(default=[]),
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Search users by name or email once the query is long enough."""
    search_query = q.strip()
    if len(search_query) < USER_SEARCH_MIN_LENGTH:
        return []

    # Wildcards typed by the user match literally
    escaped = search_query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    excluded_ids = set(exclude) | {current_user.id}
    statement = (
        select(User)
        .where(or_(
            col(User.name).ilike(pattern, escape="\\"),
            col(User.email).ilike(pattern, escape="\\")
        ))
        .where(col(User.id).not_in(list(excluded_ids)))
        .order_by(User.name)
        .limit(USER_SEARCH_LIMIT)
    )
    users = db.exec(statement).all()

    return [{"id": user.id, "name": user.name, "email": user.email} for user in users]


@router.get("/user/dashboard-stats")
async def dashboard_stats(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    return get_user_dashboard_stats(db, current_user.id)
