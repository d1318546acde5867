from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tournament_scheduler.models.tournament import Tournament

DEFAULT_MATCH_DURATION_MINUTES = 90
DEFAULT_BUFFER_MINUTES = 15
DEFAULT_MINIMUM_REST_MINUTES = 90
DEFAULT_DAY_START = "08:00"
DEFAULT_DAY_END = "22:00"
DEFAULT_MAX_MATCHES_PER_PLAYER_PER_DAY = 2

# Display hint only; detection does not run in this order
DEFAULT_CONSTRAINT_PRIORITIES = [
    "court-availability",
    "player-rest",
    "player-availability",
    "indoor-priority",
    "finals-court",
]


def default_constraint_priorities() -> List[str]:
    return list(DEFAULT_CONSTRAINT_PRIORITIES)


class SchedulingConfig(SQLModel, table=True):
    __tablename__ = "schedulingconfig"

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", unique=True, index=True)
    default_match_duration: int = Field(default=DEFAULT_MATCH_DURATION_MINUTES)
    buffer_minutes: int = Field(default=DEFAULT_BUFFER_MINUTES)
    minimum_rest_minutes: int = Field(default=DEFAULT_MINIMUM_REST_MINUTES)
    day_start_time: str = Field(default=DEFAULT_DAY_START)
    day_end_time: str = Field(default=DEFAULT_DAY_END)
    max_matches_per_player_per_day: int = Field(default=DEFAULT_MAX_MATCHES_PER_PLAYER_PER_DAY)
    indoor_court_priority: bool = Field(default=False)
    constraint_priorities: List[str] = Field(
        default_factory=default_constraint_priorities, sa_column=Column(JSON, nullable=False)
    )

    # Relationship
    tournament: "Tournament" = Relationship(back_populates="config")
