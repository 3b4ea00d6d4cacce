from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class Match(SQLModel, table=True):
    __tablename__ = "matches"

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournaments.id", index=True)
    round: str = Field(default="Round 1")

    # Teams (nullable until the bracket fills in)
    team1_id: Optional[int] = Field(default=None, foreign_key="teams.id")
    team2_id: Optional[int] = Field(default=None, foreign_key="teams.id")

    scheduled_at: datetime = Field(index=True)
    status: str = Field(default="scheduled")  # scheduled, completed
    team1_score: Optional[int] = Field(default=None)
    team2_score: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
