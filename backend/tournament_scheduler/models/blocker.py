from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, Relationship, SQLModel

from tournament_scheduler.models.tournament import utcnow

if TYPE_CHECKING:
    from tournament_scheduler.models.tournament import Tournament


class BlockerType(str, Enum):
    rest_violation = "rest-violation"
    availability_conflict = "availability-conflict"
    schedule_conflict = "schedule-conflict"
    court_conflict = "court-conflict"
    dependency = "dependency"


class BlockerSeverity(str, Enum):
    critical = "critical"
    warning = "warning"
    info = "info"


class BlockerSource(str, Enum):
    detector = "detector"
    manual = "manual"


class Blocker(SQLModel, table=True):
    # ids are never reused once a blocker row is replaced or deleted
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    blocker_type: BlockerType = Field(sa_column=Column(String, nullable=False))
    severity: BlockerSeverity = Field(sa_column=Column(String, nullable=False))
    description: str
    affected_match_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    suggested_resolution: Optional[str] = Field(default=None)
    source: BlockerSource = Field(default=BlockerSource.detector, sa_column=Column(String, nullable=False))

    # sha1 of (type, sorted affected ids) - stable across rescans, unlike id
    fingerprint: str = Field(index=True)

    is_resolved: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    resolved_at: Optional[datetime] = Field(default=None)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="blockers")
