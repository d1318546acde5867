from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

from tournament_scheduler.models.tournament import utcnow

if TYPE_CHECKING:
    from tournament_scheduler.models.tournament import Tournament


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in-progress"
    completed = "completed"
    walkover = "walkover"
    postponed = "postponed"


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    draw_id: str
    draw_name: str = Field(default="")
    round_name: str

    # Player assignments (nullable - draws may still have open slots)
    player1_id: Optional[int] = Field(default=None, foreign_key="player.id")
    player2_id: Optional[int] = Field(default=None, foreign_key="player.id")

    # Placement (all nullable - a match without date+time is unscheduled)
    court_id: Optional[int] = Field(default=None, foreign_key="court.id")
    scheduled_date: Optional[date] = Field(default=None)
    scheduled_time: Optional[str] = Field(default=None)  # "HH:MM"
    duration_minutes: Optional[int] = Field(default=None)  # None -> config default

    status: MatchStatus = Field(default=MatchStatus.scheduled, sa_column=Column(String, nullable=False))
    score: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="matches")
