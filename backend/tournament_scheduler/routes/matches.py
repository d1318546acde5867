"""
Match placement and status endpoints.

Moves go through services.reschedule.move_match so every committed placement
has passed slot validation. Rest warnings do not block a move unless the
client sends allow_warnings=false.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import Session, select

from tournament_scheduler.database import get_session
from tournament_scheduler.models.blocker import Blocker
from tournament_scheduler.models.match import Match, MatchStatus
from tournament_scheduler.models.player import Player
from tournament_scheduler.routes.blockers import BlockerResponse, blocker_to_response
from tournament_scheduler.routes.tournaments import require_tournament
from tournament_scheduler.services.blocker_lifecycle import BlockerLifecycleManager
from tournament_scheduler.services.entity_store import EntityNotFoundError
from tournament_scheduler.services.reschedule import (
    RescheduleError,
    move_match,
    unschedule_match,
    update_match_status,
)
from tournament_scheduler.utils.time_utils import ParseError, minutes_to_time, to_minutes

logger = logging.getLogger(__name__)

router = APIRouter()


class MatchCreate(BaseModel):
    draw_id: str
    draw_name: str = ""
    round_name: str
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    court_id: Optional[int] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    status: MatchStatus = MatchStatus.scheduled
    notes: Optional[str] = None

    @field_validator("scheduled_time")
    @classmethod
    def normalize_time(cls, v):
        if v is None:
            return v
        return minutes_to_time(to_minutes(v))

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("duration_minutes must be positive")
        return v

    @model_validator(mode="after")
    def validate_players(self):
        if self.player1_id is not None and self.player1_id == self.player2_id:
            raise ValueError("player1_id and player2_id must differ")
        return self


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    draw_id: str
    draw_name: str
    round_name: str
    player1_id: Optional[int]
    player2_id: Optional[int]
    court_id: Optional[int]
    scheduled_date: Optional[date]
    scheduled_time: Optional[str]
    duration_minutes: Optional[int]
    status: MatchStatus
    score: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


class MatchStatusUpdate(BaseModel):
    status: MatchStatus
    score: Optional[str] = None


class MatchMoveRequest(BaseModel):
    court_id: int
    scheduled_date: date
    scheduled_time: str
    allow_warnings: bool = True
    rescan: bool = False

    @field_validator("scheduled_time")
    @classmethod
    def validate_time(cls, v):
        to_minutes(v)
        return v


class MatchMoveResponse(BaseModel):
    match: MatchResponse
    warnings: List[str]
    blockers: Optional[List[BlockerResponse]] = None


def _require_match(session: Session, tournament_id: int, match_id: int) -> Match:
    match = session.get(Match, match_id)
    if not match or match.tournament_id != tournament_id:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def _check_player(session: Session, tournament_id: int, player_id: Optional[int]) -> None:
    if player_id is None:
        return
    player = session.get(Player, player_id)
    if not player or player.tournament_id != tournament_id:
        raise HTTPException(status_code=422, detail=f"Player {player_id} not found in tournament")


@router.post("/tournaments/{tournament_id}/matches", response_model=MatchResponse, status_code=201)
def create_match(tournament_id: int, payload: MatchCreate, session: Session = Depends(get_session)):
    """Create a match as supplied (no placement validation; use /move for checked placement)"""
    require_tournament(session, tournament_id)
    _check_player(session, tournament_id, payload.player1_id)
    _check_player(session, tournament_id, payload.player2_id)

    match = Match(tournament_id=tournament_id, **payload.model_dump())
    session.add(match)
    session.commit()
    session.refresh(match)
    return match


@router.get("/tournaments/{tournament_id}/matches", response_model=List[MatchResponse])
def list_matches(
    tournament_id: int,
    day: Optional[date] = None,
    court_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """List matches, optionally filtered by day and court"""
    require_tournament(session, tournament_id)
    query = select(Match).where(Match.tournament_id == tournament_id)
    if day is not None:
        query = query.where(Match.scheduled_date == day)
    if court_id is not None:
        query = query.where(Match.court_id == court_id)
    return session.exec(query.order_by(Match.scheduled_date, Match.scheduled_time, Match.id)).all()


@router.patch("/tournaments/{tournament_id}/matches/{match_id}/status", response_model=MatchResponse)
def set_match_status(
    tournament_id: int, match_id: int, payload: MatchStatusUpdate, session: Session = Depends(get_session)
):
    _require_match(session, tournament_id, match_id)
    match = update_match_status(session, tournament_id, match_id, payload.status)
    if payload.score is not None:
        match.score = payload.score
        session.add(match)
        session.commit()
        session.refresh(match)
    return match


@router.post("/tournaments/{tournament_id}/matches/{match_id}/move", response_model=MatchMoveResponse)
def move_match_endpoint(
    tournament_id: int, match_id: int, payload: MatchMoveRequest, session: Session = Depends(get_session)
):
    """Validate then commit a new (court, date, time); 409 with the verdict when refused"""
    require_tournament(session, tournament_id)
    try:
        verdict = move_match(
            session,
            tournament_id,
            match_id,
            payload.court_id,
            payload.scheduled_date,
            payload.scheduled_time,
            allow_warnings=payload.allow_warnings,
        )
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RescheduleError as e:
        detail = {"message": str(e)}
        if e.verdict is not None:
            detail["verdict"] = e.verdict.to_dict()
        raise HTTPException(status_code=409, detail=detail)
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))

    blockers = None
    if payload.rescan:
        try:
            rescanned: List[Blocker] = BlockerLifecycleManager(session, tournament_id).rescan()
        except ParseError as e:
            raise HTTPException(status_code=422, detail=str(e))
        blockers = [blocker_to_response(b) for b in rescanned]

    match = _require_match(session, tournament_id, match_id)
    return MatchMoveResponse(
        match=MatchResponse.model_validate(match),
        warnings=list(verdict.warnings),
        blockers=blockers,
    )


@router.delete("/tournaments/{tournament_id}/matches/{match_id}/placement", response_model=MatchResponse)
def unschedule_match_endpoint(tournament_id: int, match_id: int, session: Session = Depends(get_session)):
    """Clear court/date/time; the match becomes unscheduled"""
    _require_match(session, tournament_id, match_id)
    return unschedule_match(session, tournament_id, match_id)


@router.delete("/tournaments/{tournament_id}/matches/{match_id}", status_code=204)
def delete_match(tournament_id: int, match_id: int, session: Session = Depends(get_session)):
    """Delete a match; blockers that reference it drop the id on their next read"""
    match = _require_match(session, tournament_id, match_id)
    session.delete(match)
    session.commit()
    logger.info("Match %d deleted from tournament %d", match_id, tournament_id)
