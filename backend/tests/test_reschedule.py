from datetime import date

import pytest
from sqlmodel import Session

from tournament_scheduler.models.court_availability import CourtAvailability
from tournament_scheduler.models.match import Match, MatchStatus
from tournament_scheduler.services.entity_store import EntityNotFoundError
from tournament_scheduler.services.reschedule import (
    RescheduleError,
    move_match,
    unschedule_match,
    update_match_status,
)
from tournament_scheduler.utils.time_utils import ParseError

DAY = date(2024, 8, 15)


@pytest.fixture
def placed(session: Session, tournament_setup):
    """P1 v P2 on Centre Court at 09:00, P3 v P4 on Court 2 at 09:00, P1 v P3 unscheduled"""
    t = tournament_setup["tournament"]
    centre, court2 = tournament_setup["courts"]
    p1, p2, p3, p4 = tournament_setup["players"]

    matches = [
        Match(tournament_id=t.id, draw_id="d1", round_name="R1", player1_id=p1.id, player2_id=p2.id,
              court_id=centre.id, scheduled_date=DAY, scheduled_time="09:00"),
        Match(tournament_id=t.id, draw_id="d1", round_name="R1", player1_id=p3.id, player2_id=p4.id,
              court_id=court2.id, scheduled_date=DAY, scheduled_time="09:00"),
        Match(tournament_id=t.id, draw_id="d1", round_name="R2", player1_id=p1.id, player2_id=p3.id),
    ]
    for m in matches:
        session.add(m)
    session.commit()
    for m in matches:
        session.refresh(m)

    return {"tournament": t, "centre": centre, "court2": court2, "matches": matches}


def test_move_commits_new_placement(session: Session, placed):
    t, centre = placed["tournament"], placed["centre"]
    unscheduled = placed["matches"][2]

    verdict = move_match(session, t.id, unscheduled.id, centre.id, DAY, "15:00")

    assert verdict.valid is True
    assert verdict.warnings == ()
    stored = session.get(Match, unscheduled.id)
    assert (stored.court_id, stored.scheduled_date, stored.scheduled_time) == (centre.id, DAY, "15:00")


def test_move_normalizes_time(session: Session, placed):
    t, centre = placed["tournament"], placed["centre"]
    m = placed["matches"][0]

    move_match(session, t.id, m.id, centre.id, DAY, "9:30")

    assert session.get(Match, m.id).scheduled_time == "09:30"


def test_move_onto_own_slot_is_allowed(session: Session, placed):
    t, centre = placed["tournament"], placed["centre"]
    m = placed["matches"][0]

    verdict = move_match(session, t.id, m.id, centre.id, DAY, "09:00")

    assert verdict.valid is True


def test_move_into_occupied_slot_is_refused(session: Session, placed):
    t, court2 = placed["tournament"], placed["court2"]
    m = placed["matches"][0]

    with pytest.raises(RescheduleError) as exc:
        move_match(session, t.id, m.id, court2.id, DAY, "09:00")

    assert exc.value.verdict.valid is False
    assert "P3 Player vs P4 Player" in str(exc.value)
    stored = session.get(Match, m.id)
    session.refresh(stored)
    assert stored.court_id == placed["centre"].id


def test_move_onto_blocked_court_is_refused(session: Session, placed):
    t, court2 = placed["tournament"], placed["court2"]
    session.add(CourtAvailability(court_id=court2.id, day_date=DAY, blocked=True, reason="Resurfacing"))
    session.commit()

    with pytest.raises(RescheduleError) as exc:
        move_match(session, t.id, placed["matches"][2].id, court2.id, DAY, "15:00")

    assert exc.value.verdict.reason == "Resurfacing"


def test_move_with_rest_warning_commits_by_default(session: Session, placed):
    t, court2 = placed["tournament"], placed["court2"]
    m = placed["matches"][2]  # P1 v P3, both play at 09:00 for 90 minutes

    verdict = move_match(session, t.id, m.id, court2.id, DAY, "11:00")

    assert verdict.valid is True
    assert len(verdict.warnings) == 2
    assert session.get(Match, m.id).scheduled_time == "11:00"


def test_move_with_rest_warning_refused_when_not_allowed(session: Session, placed):
    t, court2 = placed["tournament"], placed["court2"]
    m = placed["matches"][2]

    with pytest.raises(RescheduleError) as exc:
        move_match(session, t.id, m.id, court2.id, DAY, "11:00", allow_warnings=False)

    assert exc.value.verdict.valid is True
    assert exc.value.verdict.warnings
    assert session.get(Match, m.id).scheduled_time is None


def test_move_unknown_match_raises(session: Session, placed):
    with pytest.raises(EntityNotFoundError):
        move_match(session, placed["tournament"].id, 999, placed["centre"].id, DAY, "10:00")


def test_move_malformed_time_raises_parse_error(session: Session, placed):
    with pytest.raises(ParseError):
        move_match(session, placed["tournament"].id, placed["matches"][2].id, placed["centre"].id, DAY, "25:00")


def test_unschedule_clears_placement(session: Session, placed):
    m = placed["matches"][0]

    result = unschedule_match(session, placed["tournament"].id, m.id)

    assert result.court_id is None
    assert result.scheduled_date is None
    assert result.scheduled_time is None


def test_update_status(session: Session, placed):
    m = placed["matches"][0]

    result = update_match_status(session, placed["tournament"].id, m.id, MatchStatus.completed)

    assert result.status == MatchStatus.completed
