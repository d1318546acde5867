from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import Session, select

from tournament_scheduler.database import get_session
from tournament_scheduler.models.scheduling_config import (
    DEFAULT_BUFFER_MINUTES,
    DEFAULT_DAY_END,
    DEFAULT_DAY_START,
    DEFAULT_MATCH_DURATION_MINUTES,
    DEFAULT_MAX_MATCHES_PER_PLAYER_PER_DAY,
    DEFAULT_MINIMUM_REST_MINUTES,
    SchedulingConfig,
    default_constraint_priorities,
)
from tournament_scheduler.models.tournament import Tournament
from tournament_scheduler.services.entity_store import get_scheduling_config
from tournament_scheduler.utils.time_utils import to_minutes

router = APIRouter()


class TournamentCreate(BaseModel):
    name: str
    start_date: date
    end_date: date
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        return self


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    start_date: date
    end_date: date
    notes: Optional[str]
    created_at: datetime


class SchedulingConfigPayload(BaseModel):
    default_match_duration: int = DEFAULT_MATCH_DURATION_MINUTES
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES
    minimum_rest_minutes: int = DEFAULT_MINIMUM_REST_MINUTES
    day_start_time: str = DEFAULT_DAY_START
    day_end_time: str = DEFAULT_DAY_END
    max_matches_per_player_per_day: int = DEFAULT_MAX_MATCHES_PER_PLAYER_PER_DAY
    indoor_court_priority: bool = False
    constraint_priorities: List[str] = default_constraint_priorities()

    @field_validator("day_start_time", "day_end_time")
    @classmethod
    def validate_time(cls, v):
        to_minutes(v)  # ParseError is a ValueError -> 422
        return v

    @field_validator("default_match_duration")
    @classmethod
    def validate_duration(cls, v):
        if v <= 0:
            raise ValueError("default_match_duration must be positive")
        return v

    @field_validator("buffer_minutes", "minimum_rest_minutes", "max_matches_per_player_per_day")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_day_window(self):
        if to_minutes(self.day_end_time) <= to_minutes(self.day_start_time):
            raise ValueError("day_end_time must be after day_start_time")
        return self


class SchedulingConfigResponse(SchedulingConfigPayload):
    model_config = ConfigDict(from_attributes=True)

    tournament_id: int


def require_tournament(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(session: Session = Depends(get_session)):
    """List all tournaments"""
    return session.exec(select(Tournament).order_by(Tournament.id)).all()


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(tournament_data: TournamentCreate, session: Session = Depends(get_session)):
    """Create a tournament with a default scheduling config"""
    tournament = Tournament(**tournament_data.model_dump())
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    session.add(SchedulingConfig(tournament_id=tournament.id))
    session.commit()
    session.refresh(tournament)
    return tournament


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Get a tournament by ID"""
    return require_tournament(session, tournament_id)


@router.get("/tournaments/{tournament_id}/config", response_model=SchedulingConfigResponse)
def get_config(tournament_id: int, session: Session = Depends(get_session)):
    """Scheduling rules; defaults when no config row exists"""
    require_tournament(session, tournament_id)
    config = get_scheduling_config(session, tournament_id)
    if config is None:
        return SchedulingConfigResponse(tournament_id=tournament_id)
    return config


@router.put("/tournaments/{tournament_id}/config", response_model=SchedulingConfigResponse)
def update_config(
    tournament_id: int, payload: SchedulingConfigPayload, session: Session = Depends(get_session)
):
    """Replace the scheduling rules for a tournament"""
    require_tournament(session, tournament_id)
    config = get_scheduling_config(session, tournament_id)
    if config is None:
        config = SchedulingConfig(tournament_id=tournament_id)

    for field, value in payload.model_dump().items():
        setattr(config, field, value)

    session.add(config)
    session.commit()
    session.refresh(config)
    return config
