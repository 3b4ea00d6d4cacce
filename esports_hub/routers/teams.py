import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from ..database import get_session
from ..dependencies import require_user
from ..models.user import User
from ..models.team import Team, MemberRole
from ..services.teams import (
    add_invites,
    create_team_with_captain,
    delete_team,
    get_membership,
    get_team_or_404,
    get_user_team_ids,
    require_captain,
    serialize_team,
    update_team,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teams", tags=["teams"])


class TeamCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    tag: str
    description: str = ""
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")
    invited_users: List[int] = Field(default_factory=list, alias="invitedUsers")


class TeamUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    tag: str
    description: str = ""
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")


class InviteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: List[int] = Field(alias="userIds")


def _require_name_and_tag(name: str, tag: str) -> None:
    if not name.strip() or not tag.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Team name and tag are required"
        )


@router.post("")
async def create_team(
    data: TeamCreate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Create a team with the caller as captain."""
    _require_name_and_tag(data.name, data.tag)

    team = create_team_with_captain(
        db,
        captain=current_user,
        name=data.name,
        tag=data.tag,
        description=data.description,
        logo_url=data.logo_url,
        invited_user_ids=data.invited_users
    )
    return serialize_team(db, team, current_user.id)


@router.get("")
async def my_teams(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Teams the caller belongs to."""
    team_ids = get_user_team_ids(db, current_user.id)
    if not team_ids:
        return []

    teams = db.exec(select(Team).where(Team.id.in_(team_ids)).order_by(Team.name)).all()
    return [serialize_team(db, team, current_user.id) for team in teams]


@router.get("/all")
async def all_teams(
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    teams = db.exec(select(Team).order_by(Team.name)).all()
    return [serialize_team(db, team, current_user.id) for team in teams]


@router.get("/{team_id}")
async def team_detail(
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = get_team_or_404(db, team_id)

    if not get_membership(db, team_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this team"
        )

    return serialize_team(db, team, current_user.id, include_invites=True)


@router.put("/{team_id}")
async def edit_team(
    team_id: int,
    data: TeamUpdate,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = get_team_or_404(db, team_id)
    require_captain(db, team, current_user, action="edit")
    _require_name_and_tag(data.name, data.tag)

    team = update_team(
        db,
        team,
        name=data.name,
        tag=data.tag,
        description=data.description,
        logo_url=data.logo_url
    )
    return serialize_team(db, team, current_user.id)


@router.delete("/{team_id}")
async def remove_team(
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = get_team_or_404(db, team_id)
    require_captain(db, team, current_user, action="delete")

    delete_team(db, team)
    return {"success": True}


@router.post("/{team_id}/invites")
async def invite_members(
    team_id: int,
    data: InviteRequest,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = get_team_or_404(db, team_id)
    require_captain(db, team, current_user, action="invite members to")

    invites = add_invites(db, team, current_user, data.user_ids)
    db.commit()
    logger.info(f"Captain {current_user.id} invited {len(invites)} users to team {team.id}")

    return serialize_team(db, team, current_user.id, include_invites=True)


@router.delete("/{team_id}/members/{user_id}")
async def remove_member(
    team_id: int,
    user_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    team = get_team_or_404(db, team_id)
    require_captain(db, team, current_user, action="remove members from")

    # Can't remove yourself
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Captain cannot remove themselves")

    membership = get_membership(db, team_id, user_id)
    if not membership:
        raise HTTPException(status_code=404, detail="Member not found")

    db.delete(membership)
    db.commit()
    logger.info(f"User {user_id} removed from team {team_id}")

    return serialize_team(db, team, current_user.id)


@router.post("/{team_id}/leave")
async def leave_team(
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    get_team_or_404(db, team_id)

    membership = get_membership(db, team_id, current_user.id)
    if not membership:
        raise HTTPException(status_code=404, detail="You are not a member of this team")

    # Can't leave if captain
    if membership.role == MemberRole.CAPTAIN.value:
        raise HTTPException(status_code=400, detail="Captain cannot leave the team")

    db.delete(membership)
    db.commit()
    logger.info(f"User {current_user.id} left team {team_id}")

    return {"success": True}
