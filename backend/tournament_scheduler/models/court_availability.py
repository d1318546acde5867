from datetime import date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tournament_scheduler.models.court import Court


class CourtAvailability(SQLModel, table=True):
    __tablename__ = "courtavailability"
    __table_args__ = (SAUniqueConstraint("court_id", "day_date", name="uq_court_availability_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    court_id: int = Field(foreign_key="court.id", index=True)
    day_date: date
    start_time: str = Field(default="08:00")  # "HH:MM"
    end_time: str = Field(default="22:00")  # "HH:MM", exclusive
    blocked: bool = Field(default=False)
    reason: Optional[str] = Field(default=None)  # e.g. "Resurfacing"

    # Relationship
    court: "Court" = Relationship(back_populates="availability")
