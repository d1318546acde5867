# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from tournament_scheduler.models.blocker import Blocker  # noqa: F401
from tournament_scheduler.models.court import Court  # noqa: F401
from tournament_scheduler.models.court_availability import CourtAvailability  # noqa: F401
from tournament_scheduler.models.match import Match  # noqa: F401
from tournament_scheduler.models.player import Player  # noqa: F401
from tournament_scheduler.models.scheduling_config import SchedulingConfig  # noqa: F401
from tournament_scheduler.models.tournament import Tournament  # noqa: F401
