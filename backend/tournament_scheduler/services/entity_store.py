"""
Entity Store - immutable schedule snapshot for validation and detection

The database session owns all entities. The slot validator and conflict
detector never receive the session; they receive a ScheduleSnapshot built
here by load_snapshot(). Snapshot records are frozen dataclasses, so any
number of validator calls may share one snapshot (e.g. drop-zone
pre-computation) without synchronization.

Times stay as "HH:MM" strings on the records and are parsed on demand, so a
malformed stored value surfaces as ParseError at the point of use.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from sqlmodel import Session, select

from tournament_scheduler.models.court import Court, CourtSurface
from tournament_scheduler.models.court_availability import CourtAvailability
from tournament_scheduler.models.match import Match, MatchStatus
from tournament_scheduler.models.player import DayPeriod, Player
from tournament_scheduler.models.scheduling_config import (
    DEFAULT_BUFFER_MINUTES,
    DEFAULT_CONSTRAINT_PRIORITIES,
    DEFAULT_DAY_END,
    DEFAULT_DAY_START,
    DEFAULT_MATCH_DURATION_MINUTES,
    DEFAULT_MAX_MATCHES_PER_PLAYER_PER_DAY,
    DEFAULT_MINIMUM_REST_MINUTES,
    SchedulingConfig,
)
from tournament_scheduler.models.tournament import Tournament
from tournament_scheduler.utils.time_utils import MINUTES_PER_DAY, to_minutes


class EntityNotFoundError(LookupError):
    """Referenced tournament/match/court id does not exist"""
    pass


@dataclass(frozen=True)
class ConfigRecord:
    default_match_duration: int = DEFAULT_MATCH_DURATION_MINUTES
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES
    minimum_rest_minutes: int = DEFAULT_MINIMUM_REST_MINUTES
    day_start_time: str = DEFAULT_DAY_START
    day_end_time: str = DEFAULT_DAY_END
    max_matches_per_player_per_day: int = DEFAULT_MAX_MATCHES_PER_PLAYER_PER_DAY
    indoor_court_priority: bool = False
    constraint_priorities: Tuple[str, ...] = tuple(DEFAULT_CONSTRAINT_PRIORITIES)


@dataclass(frozen=True)
class CourtWindow:
    day_date: date
    start_time: str
    end_time: str
    blocked: bool = False
    reason: Optional[str] = None


@dataclass(frozen=True)
class CourtRecord:
    id: int
    name: str
    surface: CourtSurface = CourtSurface.hard
    indoor: bool = False
    lighting: bool = False
    is_finals_court: bool = False
    windows: Mapping[date, CourtWindow] = field(default_factory=dict, compare=False, hash=False)

    def window_for(self, day: date) -> Optional[CourtWindow]:
        return self.windows.get(day)


@dataclass(frozen=True)
class PlayerRecord:
    id: int
    name: str
    availability: Mapping[str, FrozenSet[DayPeriod]] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class MatchRecord:
    id: int
    draw_id: str
    round_name: str
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    court_id: Optional[int] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    status: MatchStatus = MatchStatus.scheduled

    @property
    def is_scheduled(self) -> bool:
        """Both date and time set; otherwise the match is excluded from conflict checks."""
        return self.scheduled_date is not None and bool(self.scheduled_time)

    @property
    def player_ids(self) -> Tuple[int, ...]:
        return tuple(pid for pid in (self.player1_id, self.player2_id) if pid is not None)


@dataclass(frozen=True)
class ScheduleSnapshot:
    """Read-only view of one tournament's courts, players, matches and config."""

    tournament_id: int
    courts: Mapping[int, CourtRecord]
    players: Mapping[int, PlayerRecord]
    matches: Tuple[MatchRecord, ...]
    config: ConfigRecord = ConfigRecord()

    def court(self, court_id: Optional[int]) -> Optional[CourtRecord]:
        if court_id is None:
            return None
        return self.courts.get(court_id)

    def match(self, match_id: int) -> Optional[MatchRecord]:
        for m in self.matches:
            if m.id == match_id:
                return m
        return None

    def player_name(self, player_id: Optional[int]) -> str:
        if player_id is None:
            return "TBD"
        player = self.players.get(player_id)
        return player.name if player else f"Player {player_id}"

    def match_label(self, match: MatchRecord) -> str:
        return f"{self.player_name(match.player1_id)} vs {self.player_name(match.player2_id)}"

    def duration_of(self, match: MatchRecord) -> int:
        """Match duration, falling back to the config default."""
        return match.duration_minutes or self.config.default_match_duration

    def scheduled_matches(self) -> List[MatchRecord]:
        return [m for m in self.matches if m.is_scheduled]

    def matches_for_player(self, player_id: int) -> List[MatchRecord]:
        return [m for m in self.matches if player_id in m.player_ids]


def start_minutes(match: MatchRecord) -> int:
    """Minute-of-day of the match start (ParseError on malformed time)."""
    return to_minutes(match.scheduled_time)


def absolute_start(match: MatchRecord) -> int:
    """Minutes since 0001-01-01 so spans on different dates never compare as same-day."""
    return match.scheduled_date.toordinal() * MINUTES_PER_DAY + start_minutes(match)


def _config_record(config: Optional[SchedulingConfig]) -> ConfigRecord:
    if config is None:
        return ConfigRecord()
    return ConfigRecord(
        default_match_duration=config.default_match_duration,
        buffer_minutes=config.buffer_minutes,
        minimum_rest_minutes=config.minimum_rest_minutes,
        day_start_time=config.day_start_time,
        day_end_time=config.day_end_time,
        max_matches_per_player_per_day=config.max_matches_per_player_per_day,
        indoor_court_priority=config.indoor_court_priority,
        constraint_priorities=tuple(config.constraint_priorities or ()),
    )


def _availability_record(raw: Optional[Dict[str, List[str]]]) -> Dict[str, FrozenSet[DayPeriod]]:
    result: Dict[str, FrozenSet[DayPeriod]] = {}
    for day_key, periods in (raw or {}).items():
        result[str(day_key)] = frozenset(DayPeriod(p) for p in periods)
    return result


def get_scheduling_config(session: Session, tournament_id: int) -> Optional[SchedulingConfig]:
    return session.exec(select(SchedulingConfig).where(SchedulingConfig.tournament_id == tournament_id)).first()


def load_snapshot(session: Session, tournament_id: int) -> ScheduleSnapshot:
    """
    Read courts, availability windows, players, matches and config for a
    tournament into an immutable ScheduleSnapshot.

    Raises:
        EntityNotFoundError if the tournament does not exist
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise EntityNotFoundError(f"Tournament {tournament_id} not found")

    courts = session.exec(select(Court).where(Court.tournament_id == tournament_id).order_by(Court.id)).all()
    court_ids = [c.id for c in courts]

    windows_by_court: Dict[int, Dict[date, CourtWindow]] = {cid: {} for cid in court_ids}
    if court_ids:
        windows = session.exec(select(CourtAvailability).where(CourtAvailability.court_id.in_(court_ids))).all()
        for w in windows:
            windows_by_court[w.court_id][w.day_date] = CourtWindow(
                day_date=w.day_date,
                start_time=w.start_time,
                end_time=w.end_time,
                blocked=w.blocked,
                reason=w.reason,
            )

    court_records = {
        c.id: CourtRecord(
            id=c.id,
            name=c.name,
            surface=CourtSurface(c.surface),
            indoor=c.indoor,
            lighting=c.lighting,
            is_finals_court=c.is_finals_court,
            windows=windows_by_court[c.id],
        )
        for c in courts
    }

    players = session.exec(select(Player).where(Player.tournament_id == tournament_id).order_by(Player.id)).all()
    player_records = {
        p.id: PlayerRecord(id=p.id, name=p.display_name, availability=_availability_record(p.availability))
        for p in players
    }

    matches = session.exec(select(Match).where(Match.tournament_id == tournament_id).order_by(Match.id)).all()
    match_records = tuple(match_to_record(m) for m in matches)

    return ScheduleSnapshot(
        tournament_id=tournament_id,
        courts=court_records,
        players=player_records,
        matches=match_records,
        config=_config_record(get_scheduling_config(session, tournament_id)),
    )


def match_to_record(m: Match) -> MatchRecord:
    return MatchRecord(
        id=m.id,
        draw_id=m.draw_id,
        round_name=m.round_name,
        player1_id=m.player1_id,
        player2_id=m.player2_id,
        court_id=m.court_id,
        scheduled_date=m.scheduled_date,
        scheduled_time=m.scheduled_time,
        duration_minutes=m.duration_minutes,
        status=MatchStatus(m.status),
    )
