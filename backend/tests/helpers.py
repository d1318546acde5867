"""In-memory snapshot builders for pure validator/detector tests."""
from datetime import date
from typing import Iterable, Optional

from tournament_scheduler.models.match import MatchStatus
from tournament_scheduler.services.entity_store import (
    ConfigRecord,
    CourtRecord,
    CourtWindow,
    MatchRecord,
    PlayerRecord,
    ScheduleSnapshot,
)

DAY = date(2024, 8, 15)
NEXT_DAY = date(2024, 8, 16)


def court(court_id: int, name: Optional[str] = None, windows: Iterable[CourtWindow] = ()) -> CourtRecord:
    return CourtRecord(id=court_id, name=name or f"Court {court_id}", windows={w.day_date: w for w in windows})


def player(player_id: int, name: Optional[str] = None, availability=None) -> PlayerRecord:
    return PlayerRecord(id=player_id, name=name or f"Player {player_id}", availability=availability or {})


def match(
    match_id: int,
    p1: Optional[int] = None,
    p2: Optional[int] = None,
    court_id: Optional[int] = None,
    day: Optional[date] = DAY,
    time: Optional[str] = None,
    duration: Optional[int] = None,
    status: MatchStatus = MatchStatus.scheduled,
) -> MatchRecord:
    return MatchRecord(
        id=match_id,
        draw_id="d1",
        round_name="R1",
        player1_id=p1,
        player2_id=p2,
        court_id=court_id,
        scheduled_date=day,
        scheduled_time=time,
        duration_minutes=duration,
        status=status,
    )


def snapshot(courts=(), players=(), matches=(), config: Optional[ConfigRecord] = None) -> ScheduleSnapshot:
    return ScheduleSnapshot(
        tournament_id=1,
        courts={c.id: c for c in courts},
        players={p.id: p for p in players},
        matches=tuple(matches),
        config=config or ConfigRecord(),
    )
