import logging
from datetime import datetime
from typing import Iterable, List, Optional
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_

from ..models.user import User
from ..models.team import Team, TeamMember, TeamInvite, MemberRole, InviteStatus, normalize_key
from ..models.tournament import TournamentParticipant
from ..models.match import Match

logger = logging.getLogger(__name__)

TEAM_CONFLICT_DETAIL = "A team with this name or tag already exists"


def find_conflicting_team(
    db: Session,
    name: str,
    tag: str,
    exclude_team_id: Optional[int] = None
) -> Optional[Team]:
    """Find another team whose name or tag matches, ignoring case."""
    statement = select(Team).where(
        or_(Team.name_key == normalize_key(name), Team.tag_key == normalize_key(tag))
    )
    if exclude_team_id is not None:
        statement = statement.where(Team.id != exclude_team_id)
    return db.exec(statement).first()


def get_team_or_404(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


def get_membership(db: Session, team_id: int, user_id: int) -> Optional[TeamMember]:
    return db.exec(
        select(TeamMember).where(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_id
        )
    ).first()


def is_captain(db: Session, team_id: int, user_id: int) -> bool:
    membership = get_membership(db, team_id, user_id)
    return membership is not None and membership.role == MemberRole.CAPTAIN.value


def require_captain(db: Session, team: Team, user: User, action: str = "manage") -> None:
    """Raise 403 unless the user holds the CAPTAIN role on the team."""
    if not is_captain(db, team.id, user.id):
        logger.warning(f"User {user.id} tried to {action} team {team.id} without being captain")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the team captain can {action} this team"
        )


def get_user_team_ids(db: Session, user_id: int) -> List[int]:
    memberships = db.exec(
        select(TeamMember).where(TeamMember.user_id == user_id)
    ).all()
    return [membership.team_id for membership in memberships]


def get_team_members(db: Session, team_id: int) -> List[dict]:
    statement = (
        select(TeamMember, User)
        .join(User, User.id == TeamMember.user_id)
        .where(TeamMember.team_id == team_id)
        .order_by(TeamMember.joined_at, TeamMember.id)
    )
    return [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": member.role,
        }
        for member, user in db.exec(statement).all()
    ]


def get_pending_invites(db: Session, team_id: int) -> List[dict]:
    invites = db.exec(
        select(TeamInvite).where(
            TeamInvite.team_id == team_id,
            TeamInvite.status == InviteStatus.PENDING.value
        ).order_by(TeamInvite.created_at)
    ).all()
    return [
        {"id": invite.id, "email": invite.email, "createdAt": invite.created_at.isoformat()}
        for invite in invites
    ]


def serialize_team(
    db: Session,
    team: Team,
    current_user_id: int,
    include_invites: bool = False
) -> dict:
    members = get_team_members(db, team.id)
    data = {
        "id": team.id,
        "name": team.name,
        "tag": team.tag,
        "description": team.description,
        "logo_url": team.logo_url,
        "captain_id": team.captain_id,
        "created_at": team.created_at.isoformat(),
        "updated_at": team.updated_at.isoformat(),
        "members": members,
        "isOwner": any(
            m["id"] == current_user_id and m["role"] == MemberRole.CAPTAIN.value
            for m in members
        ),
    }
    if include_invites:
        data["pendingInvites"] = get_pending_invites(db, team.id)
    return data


def _commit_team_write(db: Session) -> None:
    """Commit, turning a unique-index violation on name/tag into a 400."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Team write rejected by unique index on name/tag")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TEAM_CONFLICT_DETAIL)


def add_invites(
    db: Session,
    team: Team,
    inviter: User,
    user_ids: Iterable[int]
) -> List[TeamInvite]:
    """Stage PENDING invites for users not yet members or invited. Caller commits."""
    existing_member_ids = {m["id"] for m in get_team_members(db, team.id)}
    already_invited = {
        invite.user_id
        for invite in db.exec(
            select(TeamInvite).where(
                TeamInvite.team_id == team.id,
                TeamInvite.status == InviteStatus.PENDING.value
            )
        ).all()
    }

    invites = []
    seen = set()
    for user_id in user_ids:
        if user_id in seen or user_id == inviter.id:
            continue
        seen.add(user_id)
        if user_id in existing_member_ids or user_id in already_invited:
            continue
        user = db.get(User, user_id)
        if not user:
            continue
        invite = TeamInvite(
            team_id=team.id,
            user_id=user.id,
            email=user.email,
            invited_by_id=inviter.id
        )
        db.add(invite)
        invites.append(invite)
    return invites


def create_team_with_captain(
    db: Session,
    captain: User,
    name: str,
    tag: str,
    description: str = "",
    logo_url: Optional[str] = None,
    invited_user_ids: Iterable[int] = ()
) -> Team:
    """Create a team, its CAPTAIN membership and invites in a single commit."""
    if find_conflicting_team(db, name, tag):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TEAM_CONFLICT_DETAIL)

    team = Team(
        name=name.strip(),
        tag=tag.strip(),
        name_key=normalize_key(name),
        tag_key=normalize_key(tag),
        description=description or "",
        logo_url=logo_url or None,
        captain_id=captain.id
    )
    db.add(team)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TEAM_CONFLICT_DETAIL)

    db.add(TeamMember(team_id=team.id, user_id=captain.id, role=MemberRole.CAPTAIN.value))
    invites = add_invites(db, team, captain, invited_user_ids)
    _commit_team_write(db)
    db.refresh(team)

    logger.info(f"Team {team.id} ({team.tag}) created by user {captain.id} with {len(invites)} invites")
    return team


def update_team(
    db: Session,
    team: Team,
    name: str,
    tag: str,
    description: str = "",
    logo_url: Optional[str] = None
) -> Team:
    if find_conflicting_team(db, name, tag, exclude_team_id=team.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TEAM_CONFLICT_DETAIL)

    team.name = name.strip()
    team.tag = tag.strip()
    team.name_key = normalize_key(name)
    team.tag_key = normalize_key(tag)
    team.description = description or ""
    team.logo_url = logo_url or None
    team.updated_at = datetime.utcnow()

    db.add(team)
    _commit_team_write(db)
    db.refresh(team)

    logger.info(f"Team {team.id} updated")
    return team


def delete_team(db: Session, team: Team) -> None:
    """Delete a team together with its members, invites and registrations."""
    for model in (TeamMember, TeamInvite, TournamentParticipant):
        rows = db.exec(select(model).where(model.team_id == team.id)).all()
        for row in rows:
            db.delete(row)

    # Keep scheduled matches, the slot just becomes TBD
    matches = db.exec(
        select(Match).where(or_(Match.team1_id == team.id, Match.team2_id == team.id))
    ).all()
    for match in matches:
        if match.team1_id == team.id:
            match.team1_id = None
        if match.team2_id == team.id:
            match.team2_id = None
        db.add(match)

    team_id = team.id
    db.delete(team)
    db.commit()
    logger.info(f"Team {team_id} deleted")
