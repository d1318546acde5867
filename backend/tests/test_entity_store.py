"""load_snapshot: session rows -> immutable records"""
from dataclasses import FrozenInstanceError
from datetime import date

import pytest
from sqlmodel import Session

from tournament_scheduler.models.court_availability import CourtAvailability
from tournament_scheduler.models.match import Match, MatchStatus
from tournament_scheduler.models.player import DayPeriod, Player
from tournament_scheduler.models.tournament import Tournament
from tournament_scheduler.services.entity_store import (
    ConfigRecord,
    EntityNotFoundError,
    get_scheduling_config,
    load_snapshot,
)

DAY = date(2024, 8, 15)


def test_unknown_tournament_raises(session: Session):
    with pytest.raises(EntityNotFoundError):
        load_snapshot(session, 12345)


def test_snapshot_contains_tournament_entities(session: Session, tournament_setup):
    t = tournament_setup["tournament"]
    centre, court2 = tournament_setup["courts"]
    p1, p2 = tournament_setup["players"][:2]

    session.add(
        CourtAvailability(court_id=court2.id, day_date=DAY, start_time="14:00", end_time="20:00")
    )
    session.add(
        Match(
            tournament_id=t.id,
            draw_id="d1",
            round_name="QF",
            player1_id=p1.id,
            player2_id=p2.id,
            court_id=centre.id,
            scheduled_date=DAY,
            scheduled_time="09:00",
            status=MatchStatus.in_progress,
        )
    )
    session.commit()

    snap = load_snapshot(session, t.id)

    assert set(snap.courts) == {centre.id, court2.id}
    assert snap.courts[centre.id].is_finals_court is True
    assert snap.courts[court2.id].window_for(DAY).start_time == "14:00"
    assert snap.courts[centre.id].window_for(DAY) is None
    assert snap.player_name(p1.id) == "P1 Player"

    (record,) = snap.matches
    assert record.is_scheduled
    assert record.status == MatchStatus.in_progress
    assert record.player_ids == (p1.id, p2.id)
    assert snap.duration_of(record) == 90


def test_snapshot_excludes_other_tournaments(session: Session, tournament_setup):
    other = Tournament(name="Other", start_date=DAY, end_date=DAY)
    session.add(other)
    session.commit()
    session.refresh(other)
    session.add(Match(tournament_id=other.id, draw_id="d9", round_name="F"))
    session.commit()

    snap = load_snapshot(session, tournament_setup["tournament"].id)

    assert snap.matches == ()


def test_missing_config_falls_back_to_defaults(session: Session):
    t = Tournament(name="No Config", start_date=DAY, end_date=DAY)
    session.add(t)
    session.commit()
    session.refresh(t)

    assert load_snapshot(session, t.id).config == ConfigRecord()


def test_config_values_are_loaded(session: Session, tournament_setup):
    t = tournament_setup["tournament"]
    config = get_scheduling_config(session, t.id)
    config.minimum_rest_minutes = 120
    config.day_start_time = "09:00"
    session.add(config)
    session.commit()

    snap = load_snapshot(session, t.id)

    assert snap.config.minimum_rest_minutes == 120
    assert snap.config.day_start_time == "09:00"
    assert snap.config.constraint_priorities[0] == "court-availability"


def test_player_availability_becomes_periods(session: Session, tournament_setup):
    t = tournament_setup["tournament"]
    player = Player(
        tournament_id=t.id, first_name="Eve", last_name="Evening", availability={DAY.isoformat(): ["evening"]}
    )
    session.add(player)
    session.commit()
    session.refresh(player)

    snap = load_snapshot(session, t.id)

    assert snap.players[player.id].availability[DAY.isoformat()] == frozenset({DayPeriod.evening})


def test_snapshot_records_are_frozen(session: Session, tournament_setup):
    snap = load_snapshot(session, tournament_setup["tournament"].id)

    with pytest.raises(FrozenInstanceError):
        snap.config.minimum_rest_minutes = 0
