from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tournament_scheduler.models.blocker import Blocker
    from tournament_scheduler.models.court import Court
    from tournament_scheduler.models.match import Match
    from tournament_scheduler.models.player import Player
    from tournament_scheduler.models.scheduling_config import SchedulingConfig


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    start_date: date
    end_date: date
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    # Relationships
    players: List["Player"] = Relationship(back_populates="tournament")
    courts: List["Court"] = Relationship(back_populates="tournament")
    matches: List["Match"] = Relationship(back_populates="tournament")
    blockers: List["Blocker"] = Relationship(back_populates="tournament")
    config: Optional["SchedulingConfig"] = Relationship(
        back_populates="tournament", sa_relationship_kwargs={"uselist": False}
    )
