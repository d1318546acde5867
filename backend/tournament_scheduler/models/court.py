from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tournament_scheduler.models.court_availability import CourtAvailability
    from tournament_scheduler.models.tournament import Tournament


class CourtSurface(str, Enum):
    hard = "hard"
    clay = "clay"
    grass = "grass"
    carpet = "carpet"


class Court(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str
    surface: CourtSurface = Field(default=CourtSurface.hard, sa_column=Column(String, nullable=False))
    indoor: bool = Field(default=False)
    lighting: bool = Field(default=False)
    is_finals_court: bool = Field(default=False)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="courts")
    availability: List["CourtAvailability"] = Relationship(back_populates="court")
