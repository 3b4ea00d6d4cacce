import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from ..database import get_session
from ..dependencies import require_admin
from ..models.user import User
from ..models.tournament import Tournament, TournamentStatus, TournamentType
from ..models.match import Match
from ..models.contact import Contact, ContactStatus
from ..services.dashboard import get_admin_dashboard_stats
from ..services.tournaments import (
    count_participants,
    delete_tournament,
    get_participant_team_ids,
    get_tournament_or_404,
    parse_datetime,
    serialize_match,
    serialize_tournament,
    validate_schedule,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


class TournamentPayload(BaseModel):
    """Tournament form as submitted by the admin create/edit pages."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: TournamentType = TournamentType.ELIMINATION
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    registration_deadline: str = Field(alias="registrationDeadline")
    description: Optional[str] = ""
    max_participants: int = Field(default=8, alias="maxParticipants")
    rules: Optional[str] = ""
    prizes: Optional[str] = ""


class TournamentUpdate(TournamentPayload):
    status: TournamentStatus = TournamentStatus.UPCOMING


class MatchCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    round: str = "Round 1"
    team1_id: Optional[int] = Field(default=None, alias="team1Id")
    team2_id: Optional[int] = Field(default=None, alias="team2Id")
    scheduled_at: str = Field(alias="scheduledAt")


class ContactStatusUpdate(BaseModel):
    status: Optional[str] = None


def _tournament_fields(data: TournamentPayload) -> dict:
    """Validate the form and return the column values it sets."""
    if not data.name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tournament name is required")

    if data.max_participants < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="maxParticipants must be at least 2"
        )

    start_date = parse_datetime(data.start_date, "startDate")
    end_date = parse_datetime(data.end_date, "endDate")
    registration_deadline = parse_datetime(data.registration_deadline, "registrationDeadline")
    validate_schedule(start_date, end_date, registration_deadline)

    return {
        "name": data.name.strip(),
        "type": data.type.value,
        "start_date": start_date,
        "end_date": end_date,
        "registration_deadline": registration_deadline,
        "max_participants": data.max_participants,
        "description": data.description or "",
        "rules": data.rules or "",
        "prizes": data.prizes or "",
    }


@router.get("/dashboard-stats")
async def admin_dashboard_stats(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    return get_admin_dashboard_stats(db)


# Tournaments Management
@router.get("/tournaments")
async def admin_tournaments(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    tournaments = db.exec(select(Tournament).order_by(Tournament.start_date.desc())).all()
    return [serialize_tournament(db, tournament) for tournament in tournaments]


@router.post("/tournaments")
async def create_tournament(
    data: TournamentPayload,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    tournament = Tournament(status=TournamentStatus.UPCOMING.value, **_tournament_fields(data))

    db.add(tournament)
    db.commit()
    db.refresh(tournament)

    logger.info(f"Tournament {tournament.id} ({tournament.name}) created by admin {current_user.id}")
    return serialize_tournament(db, tournament)


@router.get("/tournaments/{tournament_id}")
async def admin_tournament_detail(
    tournament_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    tournament = get_tournament_or_404(db, tournament_id)
    return serialize_tournament(db, tournament)


@router.put("/tournaments/{tournament_id}")
async def update_tournament(
    tournament_id: int,
    data: TournamentUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    tournament = get_tournament_or_404(db, tournament_id)

    registered = count_participants(db, tournament_id)
    if data.max_participants < registered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"maxParticipants cannot be lower than the {registered} registered teams"
        )

    for field, value in _tournament_fields(data).items():
        setattr(tournament, field, value)
    tournament.status = data.status.value
    tournament.updated_at = datetime.utcnow()

    db.add(tournament)
    db.commit()
    db.refresh(tournament)

    logger.info(f"Tournament {tournament.id} updated by admin {current_user.id}")
    return serialize_tournament(db, tournament)


@router.delete("/tournaments/{tournament_id}")
async def remove_tournament(
    tournament_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    tournament = get_tournament_or_404(db, tournament_id)
    delete_tournament(db, tournament)
    return {"success": True}


# Matches Management
@router.get("/tournaments/{tournament_id}/matches")
async def admin_matches(
    tournament_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    get_tournament_or_404(db, tournament_id)
    matches = db.exec(
        select(Match).where(Match.tournament_id == tournament_id).order_by(Match.scheduled_at)
    ).all()
    return [serialize_match(db, match) for match in matches]


@router.post("/tournaments/{tournament_id}/matches")
async def create_match(
    tournament_id: int,
    data: MatchCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    tournament = get_tournament_or_404(db, tournament_id)

    if data.team1_id is not None and data.team1_id == data.team2_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A team cannot play itself")

    participant_ids = set(get_participant_team_ids(db, tournament.id))
    for team_id in (data.team1_id, data.team2_id):
        if team_id is not None and team_id not in participant_ids:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Team {team_id} is not registered in this tournament"
            )

    match = Match(
        tournament_id=tournament.id,
        round=data.round.strip() or "Round 1",
        team1_id=data.team1_id,
        team2_id=data.team2_id,
        scheduled_at=parse_datetime(data.scheduled_at, "scheduledAt")
    )
    db.add(match)
    db.commit()
    db.refresh(match)

    logger.info(f"Match {match.id} scheduled in tournament {tournament.id}")
    return serialize_match(db, match)


# Contacts Management
def _get_contact_or_404(db: Session, contact_id: int) -> Contact:
    contact = db.get(Contact, contact_id)
    if not contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return contact


@router.get("/contacts")
async def admin_contacts(
    status_filter: Optional[ContactStatus] = Query(default=None, alias="status"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    query = select(Contact).order_by(Contact.created_at.desc(), Contact.id.desc())
    if status_filter:
        query = query.where(Contact.status == status_filter.value)
    return db.exec(query).all()


@router.get("/contacts/{contact_id}")
async def admin_contact_detail(
    contact_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    return _get_contact_or_404(db, contact_id)


@router.patch("/contacts/{contact_id}")
async def update_contact_status(
    contact_id: int,
    data: ContactStatusUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    if not data.status:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    allowed = {contact_status.value for contact_status in ContactStatus}
    if data.status not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Status must be one of: {', '.join(sorted(allowed))}"
        )

    contact = _get_contact_or_404(db, contact_id)
    contact.status = data.status
    contact.updated_at = datetime.utcnow()
    db.add(contact)
    db.commit()
    db.refresh(contact)

    logger.info(f"Contact {contact.id} marked {contact.status}")
    return contact


@router.delete("/contacts/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(
    contact_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_session)
):
    contact = _get_contact_or_404(db, contact_id)
    db.delete(contact)
    db.commit()

    logger.info(f"Contact {contact_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
