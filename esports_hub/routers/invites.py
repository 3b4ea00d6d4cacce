import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..database import get_session
from ..dependencies import require_user
from ..models.user import User
from ..models.team import Team, TeamInvite, TeamMember, MemberRole, InviteStatus
from ..services.teams import serialize_team

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invites", tags=["invites"])


def _get_own_pending_invite(db: Session, invite_id: int, user: User) -> TeamInvite:
    invite = db.get(TeamInvite, invite_id)
    if not invite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")

    if invite.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This invite is not for you")

    if invite.status != InviteStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invite is already {invite.status.lower()}"
        )
    return invite


@router.get("")
async def my_invites(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Pending invites addressed to the caller."""
    statement = (
        select(TeamInvite, Team)
        .join(Team, Team.id == TeamInvite.team_id)
        .where(
            TeamInvite.user_id == current_user.id,
            TeamInvite.status == InviteStatus.PENDING.value
        )
        .order_by(TeamInvite.created_at.desc())
    )
    return [
        {
            "id": invite.id,
            "teamId": team.id,
            "teamName": team.name,
            "teamTag": team.tag,
            "status": invite.status,
            "createdAt": invite.created_at.isoformat(),
        }
        for invite, team in db.exec(statement).all()
    ]


@router.post("/{invite_id}/accept")
async def accept_invite(
    invite_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    invite = _get_own_pending_invite(db, invite_id, current_user)
    team = db.get(Team, invite.team_id)

    invite.status = InviteStatus.ACCEPTED.value
    invite.responded_at = datetime.utcnow()
    db.add(invite)
    db.add(TeamMember(team_id=team.id, user_id=current_user.id, role=MemberRole.MEMBER.value))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already a member")

    logger.info(f"User {current_user.id} joined team {team.id} via invite {invite_id}")
    return serialize_team(db, team, current_user.id)


@router.post("/{invite_id}/decline")
async def decline_invite(
    invite_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    invite = _get_own_pending_invite(db, invite_id, current_user)

    invite.status = InviteStatus.DECLINED.value
    invite.responded_at = datetime.utcnow()
    db.add(invite)
    db.commit()

    logger.info(f"User {current_user.id} declined invite {invite_id}")
    return {"success": True}
