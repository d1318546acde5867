from tournament_scheduler.models.blocker import Blocker, BlockerSeverity, BlockerSource, BlockerType
from tournament_scheduler.models.court import Court, CourtSurface
from tournament_scheduler.models.court_availability import CourtAvailability
from tournament_scheduler.models.match import Match, MatchStatus
from tournament_scheduler.models.player import DayPeriod, Player
from tournament_scheduler.models.scheduling_config import SchedulingConfig
from tournament_scheduler.models.tournament import Tournament

__all__ = [
    "Tournament",
    "Player",
    "DayPeriod",
    "Court",
    "CourtSurface",
    "CourtAvailability",
    "Match",
    "MatchStatus",
    "SchedulingConfig",
    "Blocker",
    "BlockerType",
    "BlockerSeverity",
    "BlockerSource",
]
