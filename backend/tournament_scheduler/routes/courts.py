import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import Session, select

from tournament_scheduler.database import get_session
from tournament_scheduler.models.court import Court, CourtSurface
from tournament_scheduler.models.court_availability import CourtAvailability
from tournament_scheduler.models.match import Match
from tournament_scheduler.routes.tournaments import require_tournament
from tournament_scheduler.utils.time_utils import to_minutes

logger = logging.getLogger(__name__)

router = APIRouter()


class CourtCreate(BaseModel):
    name: str
    surface: CourtSurface = CourtSurface.hard
    indoor: bool = False
    lighting: bool = False
    is_finals_court: bool = False


class CourtResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    name: str
    surface: CourtSurface
    indoor: bool
    lighting: bool
    is_finals_court: bool


class CourtAvailabilityPayload(BaseModel):
    start_time: str = "08:00"
    end_time: str = "22:00"
    blocked: bool = False
    reason: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        to_minutes(v)
        return v

    @model_validator(mode="after")
    def validate_window(self):
        if to_minutes(self.end_time) <= to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class CourtAvailabilityResponse(CourtAvailabilityPayload):
    model_config = ConfigDict(from_attributes=True)

    id: int
    court_id: int
    day_date: date


def require_court(session: Session, tournament_id: int, court_id: int) -> Court:
    court = session.get(Court, court_id)
    if not court or court.tournament_id != tournament_id:
        raise HTTPException(status_code=404, detail="Court not found")
    return court


@router.post("/tournaments/{tournament_id}/courts", response_model=CourtResponse, status_code=201)
def create_court(tournament_id: int, payload: CourtCreate, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    court = Court(tournament_id=tournament_id, **payload.model_dump())
    session.add(court)
    session.commit()
    session.refresh(court)
    return court


@router.get("/tournaments/{tournament_id}/courts", response_model=List[CourtResponse])
def list_courts(tournament_id: int, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    return session.exec(select(Court).where(Court.tournament_id == tournament_id).order_by(Court.id)).all()


@router.get(
    "/tournaments/{tournament_id}/courts/{court_id}/availability",
    response_model=List[CourtAvailabilityResponse],
)
def list_court_availability(tournament_id: int, court_id: int, session: Session = Depends(get_session)):
    require_court(session, tournament_id, court_id)
    return session.exec(
        select(CourtAvailability).where(CourtAvailability.court_id == court_id).order_by(CourtAvailability.day_date)
    ).all()


@router.put(
    "/tournaments/{tournament_id}/courts/{court_id}/availability/{day_date}",
    response_model=CourtAvailabilityResponse,
)
def set_court_availability(
    tournament_id: int,
    court_id: int,
    day_date: date,
    payload: CourtAvailabilityPayload,
    session: Session = Depends(get_session),
):
    """Create or replace the single availability window for (court, date)"""
    require_court(session, tournament_id, court_id)
    window = session.exec(
        select(CourtAvailability).where(
            CourtAvailability.court_id == court_id, CourtAvailability.day_date == day_date
        )
    ).first()
    if window is None:
        window = CourtAvailability(court_id=court_id, day_date=day_date)

    for field, value in payload.model_dump().items():
        setattr(window, field, value)

    session.add(window)
    session.commit()
    session.refresh(window)
    return window


@router.delete("/tournaments/{tournament_id}/courts/{court_id}", status_code=204)
def delete_court(tournament_id: int, court_id: int, session: Session = Depends(get_session)):
    """Delete a court together with its availability windows and the matches placed on it"""
    court = require_court(session, tournament_id, court_id)

    # Children before parent
    matches = session.exec(select(Match).where(Match.tournament_id == tournament_id, Match.court_id == court_id)).all()
    windows = session.exec(select(CourtAvailability).where(CourtAvailability.court_id == court_id)).all()
    for row in list(matches) + list(windows):
        session.delete(row)
    session.flush()

    session.delete(court)
    session.commit()
    logger.info(
        "Court %d deleted from tournament %d (%d match(es), %d availability window(s))",
        court_id,
        tournament_id,
        len(matches),
        len(windows),
    )
