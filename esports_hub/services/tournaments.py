import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func

from ..models.team import Team
from ..models.tournament import Tournament, TournamentParticipant, TournamentStatus
from ..models.match import Match

logger = logging.getLogger(__name__)


def parse_datetime(value: str, field_name: str) -> datetime:
    """Convert free-text ISO 8601 input to a naive UTC timestamp.

    Accepts what HTML ``datetime-local`` inputs send (``2025-06-01T18:30``),
    full ISO strings, and a trailing ``Z``.
    """
    text = (value or "").strip()
    if not text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field_name} is required"
        )
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field_name} is not a valid date"
        )
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if not value:
        return None
    return value.isoformat()


def validate_schedule(
    start_date: datetime,
    end_date: datetime,
    registration_deadline: datetime
) -> None:
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate must be before endDate"
        )
    if registration_deadline > start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="registrationDeadline must be before startDate"
        )


def get_tournament_or_404(db: Session, tournament_id: int) -> Tournament:
    tournament = db.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
    return tournament


def count_participants(db: Session, tournament_id: int) -> int:
    return db.exec(
        select(func.count(TournamentParticipant.id))
        .where(TournamentParticipant.tournament_id == tournament_id)
    ).first() or 0


def get_participant_team_ids(db: Session, tournament_id: int) -> List[int]:
    participants = db.exec(
        select(TournamentParticipant).where(TournamentParticipant.tournament_id == tournament_id)
    ).all()
    return [participant.team_id for participant in participants]


def serialize_tournament(db: Session, tournament: Tournament) -> dict:
    return {
        "id": tournament.id,
        "name": tournament.name,
        "type": tournament.type,
        "startDate": format_datetime(tournament.start_date),
        "endDate": format_datetime(tournament.end_date),
        "registrationDeadline": format_datetime(tournament.registration_deadline),
        "maxParticipants": tournament.max_participants,
        "description": tournament.description,
        "rules": tournament.rules,
        "prizes": tournament.prizes,
        "status": tournament.status,
        "participantCount": count_participants(db, tournament.id),
        "createdAt": format_datetime(tournament.created_at),
        "updatedAt": format_datetime(tournament.updated_at),
    }


def serialize_match(db: Session, match: Match) -> dict:
    team1 = db.get(Team, match.team1_id) if match.team1_id else None
    team2 = db.get(Team, match.team2_id) if match.team2_id else None
    return {
        "id": match.id,
        "tournamentId": match.tournament_id,
        "round": match.round,
        "team1Id": match.team1_id,
        "team1Name": team1.name if team1 else "TBD",
        "team2Id": match.team2_id,
        "team2Name": team2.name if team2 else "TBD",
        "scheduledAt": format_datetime(match.scheduled_at),
        "status": match.status,
        "team1Score": match.team1_score,
        "team2Score": match.team2_score,
    }


def register_team(db: Session, tournament: Tournament, team: Team) -> TournamentParticipant:
    """Register a team, enforcing status, deadline and capacity."""
    if tournament.status != TournamentStatus.UPCOMING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Registration is only open for upcoming tournaments"
        )

    if datetime.utcnow() > tournament.registration_deadline:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Registration deadline has passed"
        )

    existing = db.exec(
        select(TournamentParticipant).where(
            TournamentParticipant.tournament_id == tournament.id,
            TournamentParticipant.team_id == team.id
        )
    ).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Team is already registered")

    if count_participants(db, tournament.id) >= tournament.max_participants:
        logger.warning(f"Tournament {tournament.id} is full, rejected team {team.id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tournament is full")

    participant = TournamentParticipant(tournament_id=tournament.id, team_id=team.id)
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Team is already registered")
    db.refresh(participant)

    logger.info(f"Team {team.id} registered for tournament {tournament.id}")
    return participant


def withdraw_team(db: Session, tournament: Tournament, team: Team) -> None:
    if tournament.status != TournamentStatus.UPCOMING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Teams can only withdraw before the tournament starts"
        )

    participant = db.exec(
        select(TournamentParticipant).where(
            TournamentParticipant.tournament_id == tournament.id,
            TournamentParticipant.team_id == team.id
        )
    ).first()
    if not participant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team is not registered")

    db.delete(participant)
    db.commit()
    logger.info(f"Team {team.id} withdrew from tournament {tournament.id}")


def delete_tournament(db: Session, tournament: Tournament) -> None:
    """Delete a tournament with its registrations and matches."""
    for model in (TournamentParticipant, Match):
        rows = db.exec(select(model).where(model.tournament_id == tournament.id)).all()
        for row in rows:
            db.delete(row)

    tournament_id = tournament.id
    db.delete(tournament)
    db.commit()
    logger.info(f"Tournament {tournament_id} deleted")
