from datetime import datetime
from sqlmodel import Session, select, func, or_

from ..config import DASHBOARD_LIST_LIMIT
from ..models.user import User
from ..models.team import Team
from ..models.tournament import Tournament, TournamentParticipant, TournamentStatus
from ..models.match import Match
from ..models.contact import Contact, ContactStatus
from .teams import get_user_team_ids


def get_user_dashboard_stats(db: Session, user_id: int) -> dict:
    """Aggregate a user's teams, tournaments and upcoming matches."""
    team_ids = get_user_team_ids(db, user_id)
    if not team_ids:
        return {
            "totalTournaments": 0,
            "totalTeams": 0,
            "upcomingMatches": [],
            "recentTournaments": [],
        }

    tournament_ids = set(db.exec(
        select(TournamentParticipant.tournament_id)
        .where(TournamentParticipant.team_id.in_(team_ids))
    ).all())

    recent_tournaments = []
    upcoming_matches = []
    if tournament_ids:
        tournaments = db.exec(
            select(Tournament)
            .where(Tournament.id.in_(list(tournament_ids)))
            .order_by(Tournament.start_date.desc())
            .limit(DASHBOARD_LIST_LIMIT)
        ).all()
        recent_tournaments = [
            {
                "id": tournament.id,
                "name": tournament.name,
                "start_date": tournament.start_date.isoformat(),
                "status": tournament.status,
            }
            for tournament in tournaments
        ]

        matches = db.exec(
            select(Match, Tournament)
            .join(Tournament, Tournament.id == Match.tournament_id)
            .where(
                Match.tournament_id.in_(list(tournament_ids)),
                Match.scheduled_at > datetime.utcnow(),
                or_(Match.team1_id.in_(team_ids), Match.team2_id.in_(team_ids))
            )
            .order_by(Match.scheduled_at)
            .limit(DASHBOARD_LIST_LIMIT)
        ).all()

        for match, tournament in matches:
            opponent_id = match.team2_id if match.team1_id in team_ids else match.team1_id
            opponent = db.get(Team, opponent_id) if opponent_id else None
            upcoming_matches.append({
                "id": match.id,
                "tournament_name": tournament.name,
                "opponent": opponent.name if opponent else "TBD",
                "date": match.scheduled_at.isoformat(),
            })

    return {
        "totalTournaments": len(tournament_ids),
        "totalTeams": len(team_ids),
        "upcomingMatches": upcoming_matches,
        "recentTournaments": recent_tournaments,
    }


def get_admin_dashboard_stats(db: Session) -> dict:
    def count(statement) -> int:
        return db.exec(statement).first() or 0

    return {
        "totalUsers": count(select(func.count(User.id))),
        "activeTournaments": count(
            select(func.count(Tournament.id)).where(Tournament.status == TournamentStatus.ONGOING.value)
        ),
        "upcomingTournaments": count(
            select(func.count(Tournament.id)).where(Tournament.status == TournamentStatus.UPCOMING.value)
        ),
        "totalTeams": count(select(func.count(Team.id))),
        "newContacts": count(
            select(func.count(Contact.id)).where(Contact.status == ContactStatus.NEW.value)
        ),
    }
