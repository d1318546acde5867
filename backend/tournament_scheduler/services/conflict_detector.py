"""
Conflict Detector - batch scan of the current schedule for blockers

Pure deterministic function over a ScheduleSnapshot:
- Does NOT read or write blocker history
- Does NOT mutate anything
- Uses explicit sorting for deterministic output

Default checks:
- Rest violations: per player, adjacent matches in (date, time) order,
  gap = next_start - (prev_start + prev_duration)
- Court conflicts: per court, adjacent matches in (date, time) order,
  prev span extending past next start

Extension checks (opt-in via extra_checks) produce the other blocker types
with the same DetectedBlocker shape.
"""
from __future__ import annotations

import hashlib
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from tournament_scheduler.models.blocker import BlockerSeverity, BlockerType
from tournament_scheduler.models.match import MatchStatus
from tournament_scheduler.models.player import DayPeriod
from tournament_scheduler.services.entity_store import (
    MatchRecord,
    ScheduleSnapshot,
    absolute_start,
    start_minutes,
)
from tournament_scheduler.utils.time_utils import intervals_overlap, to_minutes

logger = logging.getLogger(__name__)

# Player availability period boundaries
MORNING_END = to_minutes("11:00")
DAYTIME_END = to_minutes("17:00")


@dataclass(frozen=True)
class DetectedBlocker:
    """A blocker produced by a check; identity is assigned when persisted."""

    blocker_type: BlockerType
    severity: BlockerSeverity
    description: str
    affected_match_ids: Tuple[int, ...]
    suggested_resolution: Optional[str] = None

    @property
    def fingerprint(self) -> str:
        return blocker_fingerprint(self.blocker_type, self.affected_match_ids)


BlockerCheck = Callable[[ScheduleSnapshot], List[DetectedBlocker]]


def blocker_fingerprint(blocker_type: BlockerType, affected_match_ids: Iterable[int]) -> str:
    """Deterministic key for (type, sorted affected ids)."""
    ids = ",".join(str(i) for i in sorted(set(affected_match_ids)))
    raw = f"{BlockerType(blocker_type).value}:{ids}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def _sorted_by_start(matches: Iterable[MatchRecord]) -> List[MatchRecord]:
    return sorted(matches, key=lambda m: (absolute_start(m), m.id))


def _describe(snapshot: ScheduleSnapshot, match: MatchRecord) -> str:
    return f"{snapshot.match_label(match)} ({match.scheduled_date.isoformat()} {match.scheduled_time})"


# ============================================================================
# Default checks
# ============================================================================


def detect_rest_violations(snapshot: ScheduleSnapshot) -> List[DetectedBlocker]:
    """Consecutive matches of one player closer than the minimum rest period."""
    minimum_rest = snapshot.config.minimum_rest_minutes
    by_player: Dict[int, List[MatchRecord]] = defaultdict(list)
    for m in snapshot.scheduled_matches():
        for player_id in m.player_ids:
            by_player[player_id].append(m)

    blockers: List[DetectedBlocker] = []
    for player_id in sorted(by_player):
        ordered = _sorted_by_start(by_player[player_id])
        for prev, nxt in zip(ordered, ordered[1:]):
            gap = absolute_start(nxt) - (absolute_start(prev) + snapshot.duration_of(prev))
            if gap >= minimum_rest:
                continue
            player = snapshot.player_name(player_id)
            blockers.append(
                DetectedBlocker(
                    blocker_type=BlockerType.rest_violation,
                    severity=BlockerSeverity.warning,
                    description=(
                        f"{player} has {gap} minutes rest between {_describe(snapshot, prev)} "
                        f"and {_describe(snapshot, nxt)} (minimum {minimum_rest})"
                    ),
                    affected_match_ids=(prev.id, nxt.id),
                    suggested_resolution=f"Move one of the matches to allow at least {minimum_rest} minutes rest",
                )
            )
    return blockers


def detect_court_conflicts(snapshot: ScheduleSnapshot) -> List[DetectedBlocker]:
    """Consecutive matches on one court whose spans overlap."""
    by_court: Dict[int, List[MatchRecord]] = defaultdict(list)
    for m in snapshot.scheduled_matches():
        if m.court_id is not None:
            by_court[m.court_id].append(m)

    blockers: List[DetectedBlocker] = []
    for court_id in sorted(by_court):
        ordered = _sorted_by_start(by_court[court_id])
        for prev, nxt in zip(ordered, ordered[1:]):
            prev_start, next_start = absolute_start(prev), absolute_start(nxt)
            prev_end = prev_start + snapshot.duration_of(prev)
            if not intervals_overlap(prev_start, prev_end, next_start, next_start + snapshot.duration_of(nxt)):
                continue
            court = snapshot.court(court_id)
            court_name = court.name if court else f"Court {court_id}"
            blockers.append(
                DetectedBlocker(
                    blocker_type=BlockerType.court_conflict,
                    severity=BlockerSeverity.critical,
                    description=(
                        f"{court_name} is double-booked: {_describe(snapshot, prev)} "
                        f"runs into {_describe(snapshot, nxt)}"
                    ),
                    affected_match_ids=(prev.id, nxt.id),
                    suggested_resolution="Move one of the matches to another court or time slot",
                )
            )
    return blockers


DEFAULT_CHECKS: Tuple[BlockerCheck, ...] = (detect_rest_violations, detect_court_conflicts)


# ============================================================================
# Extension checks (opt-in)
# ============================================================================


def detect_player_double_bookings(snapshot: ScheduleSnapshot) -> List[DetectedBlocker]:
    """A player with two non-completed matches at the same date and time."""
    by_player: Dict[int, List[MatchRecord]] = defaultdict(list)
    for m in snapshot.scheduled_matches():
        if m.status == MatchStatus.completed:
            continue
        for player_id in m.player_ids:
            by_player[player_id].append(m)

    blockers: List[DetectedBlocker] = []
    for player_id in sorted(by_player):
        ordered = _sorted_by_start(by_player[player_id])
        for prev, nxt in zip(ordered, ordered[1:]):
            if absolute_start(prev) != absolute_start(nxt):
                continue
            blockers.append(
                DetectedBlocker(
                    blocker_type=BlockerType.schedule_conflict,
                    severity=BlockerSeverity.critical,
                    description=(
                        f"{snapshot.player_name(player_id)} has conflicting matches at "
                        f"{prev.scheduled_time} on {prev.scheduled_date.isoformat()}"
                    ),
                    affected_match_ids=(prev.id, nxt.id),
                    suggested_resolution="Reschedule one of the matches to a different time slot",
                )
            )
    return blockers


def day_period(minute_of_day: int) -> DayPeriod:
    if minute_of_day < MORNING_END:
        return DayPeriod.morning
    if minute_of_day < DAYTIME_END:
        return DayPeriod.daytime
    return DayPeriod.evening


def detect_availability_conflicts(snapshot: ScheduleSnapshot) -> List[DetectedBlocker]:
    """
    Match starts in a period the player has not marked available.

    Players without any availability entry for the match date are treated as
    unconstrained for that date.
    """
    blockers: List[DetectedBlocker] = []
    for m in snapshot.scheduled_matches():
        period = day_period(start_minutes(m))
        day_key = m.scheduled_date.isoformat()
        for player_id in m.player_ids:
            player = snapshot.players.get(player_id)
            if player is None or day_key not in player.availability:
                continue
            if period in player.availability[day_key]:
                continue
            blockers.append(
                DetectedBlocker(
                    blocker_type=BlockerType.availability_conflict,
                    severity=BlockerSeverity.info,
                    description=(
                        f"{player.name} is not available in the {period.value} of {day_key} "
                        f"({_describe(snapshot, m)})"
                    ),
                    affected_match_ids=(m.id,),
                    suggested_resolution="Move the match into a period the player marked available",
                )
            )
    return blockers


# ============================================================================
# Entry point
# ============================================================================


def detect_blockers(
    snapshot: ScheduleSnapshot,
    extra_checks: Sequence[BlockerCheck] = (),
) -> List[DetectedBlocker]:
    """
    Run the default checks, then any extra checks, over the snapshot.

    Returns:
        Blockers in check order, each check's output in its own sort order.
        Same snapshot -> same list.
    """
    blockers: List[DetectedBlocker] = []
    for check in tuple(DEFAULT_CHECKS) + tuple(extra_checks):
        found = check(snapshot)
        logger.debug("Check %s found %d blocker(s)", check.__name__, len(found))
        blockers.extend(found)

    logger.info(
        "Detected %d blocker(s) for tournament %d across %d scheduled match(es)",
        len(blockers),
        snapshot.tournament_id,
        len(snapshot.scheduled_matches()),
    )
    return blockers


EXTENSION_CHECKS: Dict[str, BlockerCheck] = {
    "player-double-booking": detect_player_double_bookings,
    "player-availability": detect_availability_conflicts,
}
