"""
Drag-and-drop feedback endpoints.

Both endpoints are read-only: they load one snapshot and run the slot
validator against it.
"""
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from tournament_scheduler.database import get_session
from tournament_scheduler.routes.tournaments import require_tournament
from tournament_scheduler.services.entity_store import MatchRecord, ScheduleSnapshot, load_snapshot
from tournament_scheduler.services.slot_validator import precompute_drop_zones, validate_slot
from tournament_scheduler.utils.time_utils import ParseError, build_time_slots, to_minutes

router = APIRouter()


class SlotValidationRequest(BaseModel):
    match_id: int
    court_id: int
    scheduled_date: date
    scheduled_time: str
    exclude_match_id: Optional[int] = None

    @field_validator("scheduled_time")
    @classmethod
    def validate_time(cls, v):
        to_minutes(v)
        return v


class SlotVerdictResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None
    warnings: List[str] = []
    status: str


class DropZonesRequest(BaseModel):
    match_id: int
    scheduled_date: date
    court_ids: Optional[List[int]] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    interval_minutes: int = 30

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        if v is not None:
            to_minutes(v)
        return v

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, v):
        if v <= 0:
            raise ValueError("interval_minutes must be positive")
        return v


class DropZoneCell(SlotVerdictResponse):
    court_id: int
    time: str


class DropZonesResponse(BaseModel):
    match_id: int
    scheduled_date: date
    time_slots: List[str]
    cells: List[DropZoneCell]


def _candidate(snapshot: ScheduleSnapshot, match_id: int) -> MatchRecord:
    candidate = snapshot.match(match_id)
    if candidate is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return candidate


def _load(session: Session, tournament_id: int) -> ScheduleSnapshot:
    require_tournament(session, tournament_id)
    return load_snapshot(session, tournament_id)


@router.post("/tournaments/{tournament_id}/validate-slot", response_model=SlotVerdictResponse)
def validate_slot_endpoint(
    tournament_id: int, payload: SlotValidationRequest, session: Session = Depends(get_session)
):
    """Verdict for dropping a match on (court, date, time)"""
    snapshot = _load(session, tournament_id)
    candidate = _candidate(snapshot, payload.match_id)
    exclude = payload.exclude_match_id if payload.exclude_match_id is not None else payload.match_id
    try:
        verdict = validate_slot(
            snapshot,
            candidate,
            payload.court_id,
            payload.scheduled_date,
            payload.scheduled_time,
            exclude_match_id=exclude,
        )
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return SlotVerdictResponse(**verdict.to_dict())


@router.post("/tournaments/{tournament_id}/drop-zones", response_model=DropZonesResponse)
def drop_zones_endpoint(tournament_id: int, payload: DropZonesRequest, session: Session = Depends(get_session)):
    """Verdict for every (court, time slot) cell of one day, for live drag feedback"""
    snapshot = _load(session, tournament_id)
    candidate = _candidate(snapshot, payload.match_id)
    try:
        time_slots = build_time_slots(
            payload.start_time or snapshot.config.day_start_time,
            payload.end_time or snapshot.config.day_end_time,
            payload.interval_minutes,
        )
        zones = precompute_drop_zones(
            snapshot,
            candidate,
            payload.scheduled_date,
            court_ids=payload.court_ids,
            time_slots=time_slots,
            exclude_match_id=payload.match_id,
        )
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))

    cells: List[DropZoneCell] = []
    for (court_id, slot), verdict in zones.items():
        data: Dict[str, object] = verdict.to_dict()
        cells.append(DropZoneCell(court_id=court_id, time=slot, **data))

    return DropZonesResponse(
        match_id=payload.match_id,
        scheduled_date=payload.scheduled_date,
        time_slots=time_slots,
        cells=cells,
    )
