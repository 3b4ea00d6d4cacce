from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class TournamentType(str, Enum):
    ELIMINATION = "elimination"
    ROUND_ROBIN = "roundRobin"
    SWISS = "swiss"


class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Tournament(SQLModel, table=True):
    __tablename__ = "tournaments"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    type: str = Field(default=TournamentType.ELIMINATION.value)  # elimination, roundRobin, swiss
    start_date: datetime = Field(index=True)
    end_date: datetime
    registration_deadline: datetime
    max_participants: int = Field(default=8)
    description: str = Field(default="")
    rules: str = Field(default="")
    prizes: str = Field(default="")
    status: str = Field(default=TournamentStatus.UPCOMING.value, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class TournamentParticipant(SQLModel, table=True):
    __tablename__ = "tournament_participants"
    __table_args__ = (UniqueConstraint("tournament_id", "team_id", name="unique_tournament_team"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournaments.id", index=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    registered_at: datetime = Field(default_factory=datetime.utcnow)
