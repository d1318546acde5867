from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tournament_scheduler.models.tournament import Tournament


class DayPeriod(str, Enum):
    morning = "morning"  # up to 11:00
    daytime = "daytime"  # 11:00-17:00
    evening = "evening"  # after 17:00


class Player(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    # ISO date ("2024-08-15") -> ["morning", "evening"]
    availability: Dict[str, List[str]] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="players")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
