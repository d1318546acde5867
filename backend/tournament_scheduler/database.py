import os
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

# Default is a process-local in-memory database (mock dataset, no persistence)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_is_memory = DATABASE_URL in ("sqlite://", "sqlite:///:memory:")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

_engine_kwargs = {"poolclass": StaticPool} if _is_memory else {}

engine: Engine = create_engine(
    DATABASE_URL,
    echo=_echo,
    connect_args=_connect_args,
    **_engine_kwargs,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from tournament_scheduler.models.blocker import Blocker  # noqa: F401
    from tournament_scheduler.models.court import Court  # noqa: F401
    from tournament_scheduler.models.court_availability import CourtAvailability  # noqa: F401
    from tournament_scheduler.models.match import Match  # noqa: F401
    from tournament_scheduler.models.player import Player  # noqa: F401
    from tournament_scheduler.models.scheduling_config import SchedulingConfig  # noqa: F401
    from tournament_scheduler.models.tournament import Tournament  # noqa: F401

    SQLModel.metadata.create_all(engine)
