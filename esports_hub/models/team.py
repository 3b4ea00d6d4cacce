from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class MemberRole(str, Enum):
    CAPTAIN = "CAPTAIN"
    MEMBER = "MEMBER"


class InviteStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"


def normalize_key(value: str) -> str:
    """Case-insensitive comparison key for team names and tags."""
    return value.strip().lower()


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    tag: str
    description: str = Field(default="")
    logo_url: Optional[str] = Field(default=None)
    captain_id: int = Field(foreign_key="users.id", index=True)

    # Lower-cased name/tag, unique so concurrent creations cannot both commit
    name_key: str = Field(unique=True, index=True)
    tag_key: str = Field(unique=True, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="unique_team_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: str = Field(default=MemberRole.MEMBER.value)  # CAPTAIN, MEMBER
    joined_at: datetime = Field(default_factory=datetime.utcnow)


class TeamInvite(SQLModel, table=True):
    __tablename__ = "team_invites"

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    email: str
    invited_by_id: int = Field(foreign_key="users.id")
    status: str = Field(default=InviteStatus.PENDING.value, index=True)  # PENDING, ACCEPTED, DECLINED, CANCELLED
    created_at: datetime = Field(default_factory=datetime.utcnow)
    responded_at: Optional[datetime] = Field(default=None)
