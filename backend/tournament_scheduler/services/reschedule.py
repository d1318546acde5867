"""
Reschedule commit: validation and mutation for moving a match

This is the only place a match's court/date/time is changed. The move is
validated against a fresh snapshot first:

1. **Hard failures** (court missing, slot occupied, court blocked/closed)
   refuse the move with RescheduleError
2. **Rest warnings** are returned to the caller; the move still commits
   unless allow_warnings=False

The commit finishes before any rescan so detection sees a consistent state.
"""
import logging
from datetime import date
from typing import Optional

from sqlmodel import Session

from tournament_scheduler.models.match import Match, MatchStatus
from tournament_scheduler.models.tournament import utcnow
from tournament_scheduler.services.entity_store import EntityNotFoundError, load_snapshot, match_to_record
from tournament_scheduler.services.slot_validator import SlotVerdict, validate_slot
from tournament_scheduler.utils.time_utils import minutes_to_time, to_minutes

logger = logging.getLogger(__name__)


class RescheduleError(Exception):
    """Move refused; carries the validator verdict"""

    def __init__(self, message: str, verdict: Optional[SlotVerdict] = None):
        super().__init__(message)
        self.verdict = verdict


def get_tournament_match(session: Session, tournament_id: int, match_id: int) -> Match:
    match = session.get(Match, match_id)
    if not match or match.tournament_id != tournament_id:
        raise EntityNotFoundError(f"Match {match_id} not found")
    return match


def move_match(
    session: Session,
    tournament_id: int,
    match_id: int,
    court_id: int,
    target_date: date,
    target_time: str,
    allow_warnings: bool = True,
) -> SlotVerdict:
    """
    Validate and commit a match move.

    Returns:
        The verdict that allowed the move (may carry rest warnings)

    Raises:
        EntityNotFoundError if the match is not in the tournament
        RescheduleError if validation fails (or warns with allow_warnings=False)
        ParseError if target_time is malformed
    """
    match = get_tournament_match(session, tournament_id, match_id)
    snapshot = load_snapshot(session, tournament_id)

    verdict = validate_slot(
        snapshot,
        match_to_record(match),
        court_id,
        target_date,
        target_time,
        exclude_match_id=match_id,
    )
    if not verdict.valid:
        logger.info("Move of match %d refused: %s", match_id, verdict.reason)
        raise RescheduleError(verdict.reason or "Invalid slot", verdict)
    if verdict.warnings and not allow_warnings:
        logger.info("Move of match %d refused on warnings: %s", match_id, "; ".join(verdict.warnings))
        raise RescheduleError("Move has rest-period warnings", verdict)

    match.court_id = court_id
    match.scheduled_date = target_date
    match.scheduled_time = minutes_to_time(to_minutes(target_time))
    match.updated_at = utcnow()
    session.add(match)
    session.commit()
    session.refresh(match)

    logger.info(
        "Match %d moved to court %d on %s at %s (%d warning(s))",
        match_id,
        court_id,
        target_date.isoformat(),
        match.scheduled_time,
        len(verdict.warnings),
    )
    return verdict


def unschedule_match(session: Session, tournament_id: int, match_id: int) -> Match:
    """Clear a match's placement; it drops out of conflict checks."""
    match = get_tournament_match(session, tournament_id, match_id)
    match.court_id = None
    match.scheduled_date = None
    match.scheduled_time = None
    match.updated_at = utcnow()
    session.add(match)
    session.commit()
    session.refresh(match)
    logger.info("Match %d unscheduled", match_id)
    return match


def update_match_status(session: Session, tournament_id: int, match_id: int, status: MatchStatus) -> Match:
    """Set match status (scheduled, in-progress, completed, walkover, postponed)."""
    match = get_tournament_match(session, tournament_id, match_id)
    match.status = MatchStatus(status)
    match.updated_at = utcnow()
    session.add(match)
    session.commit()
    session.refresh(match)
    return match
