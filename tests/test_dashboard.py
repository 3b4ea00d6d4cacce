from datetime import datetime, timedelta

from esports_hub.models import Team, TeamMember, Tournament, TournamentParticipant, Match, Contact
from tests.conftest import create_user


def add_team(session, captain, name, tag):
    team = Team(name=name, tag=tag, name_key=name.lower(), tag_key=tag.lower(), captain_id=captain.id)
    session.add(team)
    session.commit()
    session.refresh(team)
    session.add(TeamMember(team_id=team.id, user_id=captain.id, role="CAPTAIN"))
    session.commit()
    return team


def add_tournament(session, name, starts_in_days, status="upcoming"):
    start = datetime.utcnow() + timedelta(days=starts_in_days)
    tournament = Tournament(
        name=name,
        start_date=start,
        end_date=start + timedelta(days=2),
        registration_deadline=start - timedelta(days=1),
        status=status,
    )
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


def test_dashboard_stats_for_new_user(user_client):
    response = user_client.get("/api/user/dashboard-stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalTournaments": 0,
        "totalTeams": 0,
        "upcomingMatches": [],
        "recentTournaments": [],
    }


def test_dashboard_stats_with_team_but_no_tournaments(user_client, session, user):
    add_team(session, user, "Alpha", "ALP")

    data = user_client.get("/api/user/dashboard-stats").json()

    assert data["totalTeams"] == 1
    assert data["totalTournaments"] == 0
    assert data["upcomingMatches"] == []


def test_dashboard_aggregates_tournaments_and_matches(user_client, session, user):
    alpha = add_team(session, user, "Alpha", "ALP")
    beta = add_team(session, user, "Beta", "BET")
    rival = add_team(session, create_user(session, email="rival@example.com", name="Rival"), "Rivals", "RIV")

    spring = add_tournament(session, "Spring Cup", 10)
    summer = add_tournament(session, "Summer Cup", 60)
    other = add_tournament(session, "Other Cup", 20)
    for tournament, team in ((spring, alpha), (spring, rival), (summer, beta), (other, rival)):
        session.add(TournamentParticipant(tournament_id=tournament.id, team_id=team.id))

    now = datetime.utcnow()
    session.add(Match(tournament_id=spring.id, team1_id=rival.id, team2_id=alpha.id, scheduled_at=now + timedelta(days=10)))
    session.add(Match(tournament_id=summer.id, team1_id=beta.id, scheduled_at=now + timedelta(days=60)))
    # Past and unrelated matches are left out
    session.add(Match(tournament_id=spring.id, team1_id=alpha.id, team2_id=rival.id, scheduled_at=now - timedelta(days=1)))
    session.add(Match(tournament_id=other.id, team1_id=rival.id, scheduled_at=now + timedelta(days=20)))
    session.commit()

    data = user_client.get("/api/user/dashboard-stats").json()

    assert data["totalTeams"] == 2
    assert data["totalTournaments"] == 2
    assert [(m["tournament_name"], m["opponent"]) for m in data["upcomingMatches"]] == [
        ("Spring Cup", "Rivals"),
        ("Summer Cup", "TBD"),
    ]
    assert [t["name"] for t in data["recentTournaments"]] == ["Summer Cup", "Spring Cup"]
    assert data["recentTournaments"][0]["status"] == "upcoming"


def test_admin_dashboard_stats(admin_client, session, admin, user):
    add_team(session, user, "Alpha", "ALP")
    add_tournament(session, "Live", 0, status="ongoing")
    add_tournament(session, "Soon", 5)
    session.add(Contact(name="A", email="a@example.com", subject="Hi", message="Hello"))
    session.add(Contact(name="B", email="b@example.com", subject="Hi", message="Hello", status="resolved"))
    session.commit()

    response = admin_client.get("/api/admin/dashboard-stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalUsers": 2,
        "activeTournaments": 1,
        "upcomingTournaments": 1,
        "totalTeams": 1,
        "newContacts": 1,
    }
