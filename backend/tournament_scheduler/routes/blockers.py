"""
Conflicts panel endpoints: list, rescan, resolve, manual add, remove.

Rescan accepts optional extension checks by name
("player-double-booking", "player-availability").
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from tournament_scheduler.database import get_session
from tournament_scheduler.models.blocker import Blocker, BlockerSeverity, BlockerSource, BlockerType
from tournament_scheduler.routes.tournaments import require_tournament
from tournament_scheduler.services.blocker_lifecycle import BlockerLifecycleManager
from tournament_scheduler.services.conflict_detector import EXTENSION_CHECKS
from tournament_scheduler.utils.time_utils import ParseError

router = APIRouter()


class BlockerResponse(BaseModel):
    id: int
    tournament_id: int
    blocker_type: BlockerType
    severity: BlockerSeverity
    description: str
    affected_match_ids: List[int]
    suggested_resolution: Optional[str] = None
    source: BlockerSource
    fingerprint: str
    is_resolved: bool
    created_at: datetime
    resolved_at: Optional[datetime] = None


class BlockerCreate(BaseModel):
    blocker_type: BlockerType
    severity: BlockerSeverity = BlockerSeverity.warning
    description: str
    affected_match_ids: List[int] = []
    suggested_resolution: Optional[str] = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if not v or not v.strip():
            raise ValueError("description is required")
        return v.strip()


class RescanRequest(BaseModel):
    checks: List[str] = []

    @field_validator("checks")
    @classmethod
    def validate_checks(cls, v):
        unknown = [name for name in v if name not in EXTENSION_CHECKS]
        if unknown:
            raise ValueError(f"Unknown checks: {', '.join(unknown)}")
        return v


class BlockerListResponse(BaseModel):
    active_count: int
    resolved_count: int
    blockers: List[BlockerResponse]


def blocker_to_response(b: Blocker) -> BlockerResponse:
    return BlockerResponse(
        id=b.id,
        tournament_id=b.tournament_id,
        blocker_type=b.blocker_type,
        severity=b.severity,
        description=b.description,
        affected_match_ids=list(b.affected_match_ids or []),
        suggested_resolution=b.suggested_resolution,
        source=b.source,
        fingerprint=b.fingerprint,
        is_resolved=b.is_resolved,
        created_at=b.created_at,
        resolved_at=b.resolved_at,
    )


def _list_response(blockers: List[Blocker]) -> BlockerListResponse:
    active = sum(1 for b in blockers if not b.is_resolved)
    return BlockerListResponse(
        active_count=active,
        resolved_count=len(blockers) - active,
        blockers=[blocker_to_response(b) for b in blockers],
    )


@router.get("/tournaments/{tournament_id}/blockers", response_model=BlockerListResponse)
def list_blockers(tournament_id: int, include_resolved: bool = True, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    manager = BlockerLifecycleManager(session, tournament_id)
    return _list_response(manager.list_blockers(include_resolved=include_resolved))


@router.post("/tournaments/{tournament_id}/blockers/rescan", response_model=BlockerListResponse)
def rescan_blockers(
    tournament_id: int, payload: Optional[RescanRequest] = None, session: Session = Depends(get_session)
):
    """Replace all unresolved blockers with a fresh detection run"""
    require_tournament(session, tournament_id)
    checks = [EXTENSION_CHECKS[name] for name in (payload.checks if payload else [])]
    manager = BlockerLifecycleManager(session, tournament_id)
    try:
        blockers = manager.rescan(extra_checks=checks)
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _list_response(blockers)


@router.post("/tournaments/{tournament_id}/blockers", response_model=BlockerResponse, status_code=201)
def add_manual_blocker(tournament_id: int, payload: BlockerCreate, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    manager = BlockerLifecycleManager(session, tournament_id)
    blocker = manager.add_manual(**payload.model_dump())
    return blocker_to_response(blocker)


@router.post("/tournaments/{tournament_id}/blockers/{blocker_id}/resolve", response_model=Optional[BlockerResponse])
def resolve_blocker(tournament_id: int, blocker_id: int, session: Session = Depends(get_session)):
    """Mark resolved; unknown ids are a no-op and return null"""
    require_tournament(session, tournament_id)
    blocker = BlockerLifecycleManager(session, tournament_id).resolve(blocker_id)
    return blocker_to_response(blocker) if blocker else None


@router.delete("/tournaments/{tournament_id}/blockers/{blocker_id}", status_code=204)
def remove_blocker(tournament_id: int, blocker_id: int, session: Session = Depends(get_session)):
    require_tournament(session, tournament_id)
    if not BlockerLifecycleManager(session, tournament_id).remove(blocker_id):
        raise HTTPException(status_code=404, detail="Blocker not found")
