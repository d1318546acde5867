"""
Slot Validator - interactive legality check for a single match placement

validate_slot() answers "can this match go on court C at date D, time T?"
while a match is dragged over the schedule grid. Checks run in order and
short-circuit on the first hard failure:

1. **Court existence**: target court must exist
2. **Slot occupancy**: no other match at the same (court, date, time)
3. **Court availability**: blocked window fails; time must be in [start, end)
4. **Rest period (soft)**: per player, gap to their other matches that day

Rest-period problems are warnings only. The caller decides whether to
proceed. The gap here is symmetric (either match may come first), unlike the
batch detector's next_start - prev_end.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from tournament_scheduler.services.entity_store import MatchRecord, ScheduleSnapshot, start_minutes
from tournament_scheduler.utils.time_utils import build_time_slots, to_minutes

REASON_COURT_NOT_FOUND = "Court not found"
REASON_OUTSIDE_HOURS = "Outside court operating hours"
DEFAULT_BLOCKED_REASON = "Court maintenance"

# Drop-zone display states
STATUS_VALID = "valid"
STATUS_WARNING = "warning"
STATUS_INVALID = "invalid"


@dataclass(frozen=True)
class SlotVerdict:
    """Result of validating one (court, date, time) placement"""

    valid: bool
    reason: Optional[str] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def status(self) -> str:
        if not self.valid:
            return STATUS_INVALID
        return STATUS_WARNING if self.warnings else STATUS_VALID

    def to_dict(self) -> Dict[str, object]:
        return {
            "valid": self.valid,
            "reason": self.reason,
            "warnings": list(self.warnings),
            "status": self.status,
        }


def _invalid(reason: str) -> SlotVerdict:
    return SlotVerdict(valid=False, reason=reason)


def find_occupying_match(
    snapshot: ScheduleSnapshot,
    court_id: int,
    target_date: date,
    target_minutes: int,
    exclude_match_ids: Iterable[int] = (),
) -> Optional[MatchRecord]:
    """Match already placed at exactly this (court, date, time), if any."""
    excluded = set(exclude_match_ids)
    for m in snapshot.matches:
        if m.id in excluded or not m.is_scheduled:
            continue
        if m.court_id == court_id and m.scheduled_date == target_date and start_minutes(m) == target_minutes:
            return m
    return None


def operating_window(snapshot: ScheduleSnapshot, court_id: int, target_date: date) -> Tuple[int, int]:
    """[start, end) minutes for the court on a date; config day window when no entry exists."""
    court = snapshot.court(court_id)
    window = court.window_for(target_date) if court else None
    if window is None:
        return to_minutes(snapshot.config.day_start_time), to_minutes(snapshot.config.day_end_time)
    return to_minutes(window.start_time), to_minutes(window.end_time)


def rest_gap_minutes(candidate_start: int, candidate_end: int, other_start: int, other_end: int) -> int:
    """Symmetric gap between two spans: min(|cs - oe|, |os - ce|)."""
    return min(abs(candidate_start - other_end), abs(other_start - candidate_end))


def rest_warnings(
    snapshot: ScheduleSnapshot,
    candidate: MatchRecord,
    target_date: date,
    target_minutes: int,
    exclude_match_id: Optional[int] = None,
) -> List[str]:
    """Advisory warnings for each player with < minimum rest to another match that day."""
    minimum_rest = snapshot.config.minimum_rest_minutes
    candidate_end = target_minutes + snapshot.duration_of(candidate)
    warnings: List[str] = []

    for player_id in candidate.player_ids:
        for other in snapshot.matches:
            if other.id == candidate.id or other.id == exclude_match_id:
                continue
            if player_id not in other.player_ids:
                continue
            if other.scheduled_date != target_date or not other.scheduled_time:
                continue

            other_start = start_minutes(other)
            other_end = other_start + snapshot.duration_of(other)
            gap = rest_gap_minutes(target_minutes, candidate_end, other_start, other_end)
            if gap < minimum_rest:
                warnings.append(
                    f"{snapshot.player_name(player_id)} has only {gap} minutes rest "
                    f"(minimum {minimum_rest}) around {other.scheduled_time}"
                )
    return warnings


def validate_slot(
    snapshot: ScheduleSnapshot,
    candidate: MatchRecord,
    target_court_id: int,
    target_date: date,
    target_time: str,
    exclude_match_id: Optional[int] = None,
) -> SlotVerdict:
    """
    Validate placing `candidate` at (target_court_id, target_date, target_time).

    Args:
        snapshot: Read-only schedule state
        candidate: Match being placed (its own id never conflicts with itself)
        target_court_id: Court the match is dropped on
        target_date: Day of the placement
        target_time: "HH:MM" start time
        exclude_match_id: Extra match to ignore (the match being moved)

    Returns:
        SlotVerdict(valid, reason, warnings) - never raises for constraint
        violations; raises ParseError only for malformed time strings.
    """
    target_minutes = to_minutes(target_time)

    # 1. Court existence
    court = snapshot.court(target_court_id)
    if court is None:
        return _invalid(REASON_COURT_NOT_FOUND)

    # 2. Slot occupancy
    excluded = [candidate.id] + ([exclude_match_id] if exclude_match_id is not None else [])
    occupant = find_occupying_match(snapshot, target_court_id, target_date, target_minutes, excluded)
    if occupant is not None:
        return _invalid(f"Slot already occupied by {snapshot.match_label(occupant)}")

    # 3. Court availability window
    window = court.window_for(target_date)
    if window is not None and window.blocked:
        return _invalid(window.reason or DEFAULT_BLOCKED_REASON)
    window_start, window_end = operating_window(snapshot, target_court_id, target_date)
    if not (window_start <= target_minutes < window_end):
        return _invalid(REASON_OUTSIDE_HOURS)

    # 4. Rest period (soft)
    warnings = rest_warnings(snapshot, candidate, target_date, target_minutes, exclude_match_id)
    return SlotVerdict(valid=True, warnings=tuple(warnings))


def precompute_drop_zones(
    snapshot: ScheduleSnapshot,
    candidate: MatchRecord,
    target_date: date,
    court_ids: Optional[Iterable[int]] = None,
    time_slots: Optional[Iterable[str]] = None,
    exclude_match_id: Optional[int] = None,
) -> Dict[Tuple[int, str], SlotVerdict]:
    """
    Verdict for every (court, time slot) cell ahead of a drag operation.

    Same result as calling validate_slot once per cell. Defaults: every court
    in the snapshot, and the config day window in 30-minute steps.
    """
    if court_ids is None:
        court_ids = sorted(snapshot.courts)
    if time_slots is None:
        time_slots = build_time_slots(snapshot.config.day_start_time, snapshot.config.day_end_time, 30)

    slots = list(time_slots)
    zones: Dict[Tuple[int, str], SlotVerdict] = {}
    for court_id in court_ids:
        for slot in slots:
            zones[(court_id, slot)] = validate_slot(
                snapshot, candidate, court_id, target_date, slot, exclude_match_id=exclude_match_id
            )
    return zones
