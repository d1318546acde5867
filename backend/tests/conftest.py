from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from tournament_scheduler.database import get_session
from tournament_scheduler.main import app

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables dropped after each test so counts never leak between tests
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from tournament_scheduler.models.blocker import Blocker  # noqa: F401
    from tournament_scheduler.models.court import Court  # noqa: F401
    from tournament_scheduler.models.court_availability import CourtAvailability  # noqa: F401
    from tournament_scheduler.models.match import Match  # noqa: F401
    from tournament_scheduler.models.player import Player  # noqa: F401
    from tournament_scheduler.models.scheduling_config import SchedulingConfig  # noqa: F401
    from tournament_scheduler.models.tournament import Tournament  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration, so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def tournament_setup(session: Session):
    """
    One tournament on 2024-08-15 with:
    - SchedulingConfig (defaults: 90 min matches, 90 min rest, 08:00-22:00)
    - 2 courts: Centre Court (no availability entries), Court 2
    - 4 players: P1..P4
    """
    from tournament_scheduler.models.court import Court, CourtSurface
    from tournament_scheduler.models.player import Player
    from tournament_scheduler.models.scheduling_config import SchedulingConfig
    from tournament_scheduler.models.tournament import Tournament

    tournament = Tournament(name="Summer Open", start_date=date(2024, 8, 15), end_date=date(2024, 8, 17))
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    session.add(SchedulingConfig(tournament_id=tournament.id))

    courts = [
        Court(tournament_id=tournament.id, name="Centre Court", surface=CourtSurface.hard, is_finals_court=True),
        Court(tournament_id=tournament.id, name="Court 2", surface=CourtSurface.clay),
    ]
    players = [
        Player(tournament_id=tournament.id, first_name=f"P{i}", last_name="Player") for i in range(1, 5)
    ]
    for obj in courts + players:
        session.add(obj)
    session.commit()
    for obj in courts + players:
        session.refresh(obj)

    return {"tournament": tournament, "courts": courts, "players": players}
