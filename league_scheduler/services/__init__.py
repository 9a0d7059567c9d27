"""
Services for pairing, materializing, posting and reconciling league day schedules.
"""

from .availability import AvailabilityResolver, AvailabilityResult
from .pairing import (
    SchedulingRunContext,
    PairingStrategy,
    FixedRotation,
    GreedyConstraintSolver,
    select_strategy,
    generate_pairings
)
from .materializer import ScheduleMaterializer
from .absentee_resolution import AbsenteeResolver
from .validator import ScheduleValidator
from .scheduler import LeagueScheduleService

__all__ = [
    "AvailabilityResolver",
    "AvailabilityResult",
    "SchedulingRunContext",
    "PairingStrategy",
    "FixedRotation",
    "GreedyConstraintSolver",
    "select_strategy",
    "generate_pairings",
    "ScheduleMaterializer",
    "AbsenteeResolver",
    "ScheduleValidator",
    "LeagueScheduleService"
]
