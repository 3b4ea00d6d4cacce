from .user import User
from .session import Session
from .team import Team, TeamMember, TeamInvite, MemberRole, InviteStatus
from .tournament import Tournament, TournamentParticipant, TournamentType, TournamentStatus
from .match import Match
from .contact import Contact, ContactStatus

__all__ = [
    "User",
    "Session",
    "Team",
    "TeamMember",
    "TeamInvite",
    "MemberRole",
    "InviteStatus",
    "Tournament",
    "TournamentParticipant",
    "TournamentType",
    "TournamentStatus",
    "Match",
    "Contact",
    "ContactStatus",
]
