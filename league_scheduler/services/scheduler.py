"""
League day schedule service.

Runs the full flow for one (date, league day):
availability -> pairing -> materialize -> post -> absentee auto-resolution.
Posts for the same date are serialized within the process.
"""

import random
import threading
from datetime import date
from typing import Optional, List, Dict

from league_scheduler.core.exceptions import DataUnavailableError
from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import (
    LeagueSettings, ScheduleOutcome, ScheduleStatus, ResolutionReport, Match
)
from league_scheduler.services.availability import AvailabilityResolver
from league_scheduler.services.pairing import (
    PairingStrategy, FixedRotation, GreedyConstraintSolver, generate_pairings
)
from league_scheduler.services.materializer import ScheduleMaterializer
from league_scheduler.services.absentee_resolution import AbsenteeResolver
from league_scheduler.services.validator import ScheduleValidator

logger = get_logger(__name__)

STRATEGY_NAMES = ("auto", FixedRotation.name, GreedyConstraintSolver.name)

_post_locks: Dict[date, threading.Lock] = {}
_post_locks_guard = threading.Lock()


def post_lock(match_date: date) -> threading.Lock:
    """Lock shared by every post for one match date."""
    with _post_locks_guard:
        return _post_locks.setdefault(match_date, threading.Lock())


def make_strategy(name: Optional[str], team_count: int) -> Optional[PairingStrategy]:
    """Strategy for an explicit name; None lets the engine pick by team count."""
    if name is None or name == "auto":
        return None
    if name == FixedRotation.name:
        return FixedRotation(team_count)
    if name == GreedyConstraintSolver.name:
        return GreedyConstraintSolver()
    raise ValueError(f"Unknown strategy '{name}' (expected one of {', '.join(STRATEGY_NAMES)})")


class LeagueScheduleService:

    def __init__(self, store, settings: Optional[LeagueSettings] = None,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.settings = settings or LeagueSettings()
        self.rng = rng
        self.resolver = AvailabilityResolver()
        self.materializer = ScheduleMaterializer()
        self.validator = ScheduleValidator(self.settings)

    def generate(self, match_date: date, day: str, strategy: Optional[str] = None) -> ScheduleOutcome:
        """
        Build a schedule preview for a league day.

        Raises:
            DataUnavailableError: If the roster or absences cannot be loaded
        """
        availability = self.resolver.resolve_from_store(self.store, match_date, day)
        team_count = len(availability.eligible)

        pairing = None
        if team_count >= 2:
            pairing = generate_pairings(
                availability.eligible,
                settings=self.settings,
                strategy=make_strategy(strategy, team_count),
                rng=self.rng
            )

        outcome = self.materializer.materialize(availability, pairing)

        if outcome.has_schedule:
            validation = self.validator.validate_schedule(
                outcome.matches,
                outcome.eligible_teams,
                rematches_allowed="rematch" in outcome.relaxation_tiers,
                quota=outcome.quota
            )
            if not validation.is_valid:
                logger.error(f"Generated schedule failed validation:\n{validation.get_summary()}")

        logger.info(outcome.get_summary())
        return outcome

    def post(self, outcome: ScheduleOutcome, overwrite: bool = False) -> List[Match]:
        """
        Persist a generated schedule, then auto-resolve matches of absent teams.

        A failed auto-resolution does not undo the post: it is logged and
        recorded on `outcome.resolution_error`, and can be re-run later.

        Raises:
            ScheduleConflictError: If a schedule exists and overwrite is not confirmed
            DataUnavailableError: If the schedule itself could not be written
        """
        with post_lock(outcome.match_date):
            posted = self.materializer.post(self.store, outcome, overwrite=overwrite)

        outcome.resolution_error = None
        try:
            self.resolve_absentees(outcome.match_date, outcome.matches)
        except DataUnavailableError as e:
            outcome.resolution_error = str(e)
            logger.error(
                f"Schedule for {outcome.match_date.isoformat()} was posted but absentee "
                f"auto-resolution failed: {e}"
            )
        return posted

    def generate_and_post(self, match_date: date, day: str, overwrite: bool = False,
                          strategy: Optional[str] = None) -> ScheduleOutcome:
        outcome = self.generate(match_date, day, strategy=strategy)
        if outcome.has_schedule:
            self.post(outcome, overwrite=overwrite)
        else:
            logger.warning(f"Not posting: {outcome.message}")
        return outcome

    def resolve_absentees(self, match_date: date, scheduled: Optional[List[Match]] = None) -> ResolutionReport:
        report = AbsenteeResolver(self.store).resolve(match_date, scheduled)
        if report.skipped:
            logger.warning(report.get_summary())
        return report


def is_terminal_failure(outcome: ScheduleOutcome) -> bool:
    """True when the run produced nothing usable."""
    return outcome.status in (
        ScheduleStatus.NO_ELIGIBLE_TEAMS,
        ScheduleStatus.UNSUPPORTED_TEAM_COUNT,
        ScheduleStatus.NOTHING_GENERATED
    )
