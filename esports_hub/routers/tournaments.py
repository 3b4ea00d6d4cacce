from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from ..database import get_session
from ..dependencies import require_user
from ..models.user import User
from ..models.tournament import Tournament, TournamentStatus
from ..models.match import Match
from ..services.teams import get_team_or_404, require_captain
from ..services.tournaments import (
    get_tournament_or_404,
    register_team,
    serialize_match,
    serialize_tournament,
    withdraw_team,
)

router = APIRouter(prefix="/api/tournaments", tags=["tournaments"])


class RegistrationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_id: int = Field(alias="teamId")


@router.get("")
async def list_tournaments(
    status_filter: Optional[TournamentStatus] = Query(default=None, alias="status"),
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    query = select(Tournament).order_by(Tournament.start_date)
    if status_filter:
        query = query.where(Tournament.status == status_filter.value)

    tournaments = db.exec(query).all()
    return [serialize_tournament(db, tournament) for tournament in tournaments]


@router.get("/{tournament_id}")
async def tournament_detail(
    tournament_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    tournament = get_tournament_or_404(db, tournament_id)
    matches = db.exec(
        select(Match).where(Match.tournament_id == tournament_id).order_by(Match.scheduled_at)
    ).all()

    data = serialize_tournament(db, tournament)
    data["matches"] = [serialize_match(db, match) for match in matches]
    return data


@router.post("/{tournament_id}/register")
async def register_for_tournament(
    tournament_id: int,
    data: RegistrationRequest,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    """Register one of the caller's teams (captain only)."""
    tournament = get_tournament_or_404(db, tournament_id)
    team = get_team_or_404(db, data.team_id)
    require_captain(db, team, current_user, action="register")

    register_team(db, tournament, team)
    return serialize_tournament(db, tournament)


@router.delete("/{tournament_id}/register/{team_id}")
async def withdraw_from_tournament(
    tournament_id: int,
    team_id: int,
    current_user: User = Depends(require_user),
    db: Session = Depends(get_session)
):
    tournament = get_tournament_or_404(db, tournament_id)
    team = get_team_or_404(db, team_id)
    require_captain(db, team, current_user, action="withdraw")

    withdraw_team(db, tournament, team)
    return serialize_tournament(db, tournament)
