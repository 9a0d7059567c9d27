"""
Schedule materializer: turns engine output into the final match list and
posts it to the league store.
"""

from datetime import date
from typing import List, Optional

from league_scheduler.core.exceptions import ScheduleConflictError, DataUnavailableError
from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import (
    Match, PairingResult, ScheduleOutcome, ScheduleStatus
)
from league_scheduler.services.availability import AvailabilityResult

logger = get_logger(__name__)


class ScheduleMaterializer:

    def materialize(self, availability: AvailabilityResult,
                    pairing: Optional[PairingResult]) -> ScheduleOutcome:
        """
        Stamp round/court numbers, date and league day onto the engine output.

        The returned outcome separates an empty eligible pool (NO_ELIGIBLE_TEAMS)
        from an engine that produced nothing (NOTHING_GENERATED).
        """
        outcome = ScheduleOutcome(
            status=ScheduleStatus.GENERATED,
            match_date=availability.match_date,
            day=availability.day,
            eligible_teams=availability.eligible_names,
            absent_teams=list(availability.absent)
        )

        if not availability.eligible:
            outcome.status = ScheduleStatus.NO_ELIGIBLE_TEAMS
            outcome.message = f"No eligible teams for {availability.day} {availability.match_date.isoformat()}"
            return outcome

        if pairing is None:
            outcome.status = ScheduleStatus.UNSUPPORTED_TEAM_COUNT
            outcome.message = f"Cannot generate a schedule for {len(availability.eligible)} team(s)"
            outcome.match_counts = {name: 0 for name in availability.eligible_names}
            return outcome

        outcome.strategy = pairing.strategy
        outcome.match_counts = dict(pairing.match_counts)
        outcome.relaxation_tiers = pairing.relaxation_tiers
        outcome.quota = pairing.quota

        if not pairing.supported:
            outcome.status = ScheduleStatus.UNSUPPORTED_TEAM_COUNT
            outcome.message = pairing.message or "Unsupported team count"
            return outcome

        outcome.matches = self.build_matches(pairing, availability.match_date, availability.day)

        if not outcome.matches:
            outcome.status = ScheduleStatus.NOTHING_GENERATED
            outcome.message = "Nothing generated: the engine produced no matches"
            return outcome

        shortfall = pairing.shortfall()
        if shortfall:
            outcome.status = ScheduleStatus.PARTIAL
            missing = ", ".join(f"{team} (-{count})" for team, count in sorted(shortfall.items()))
            outcome.message = f"Partial schedule: {len(shortfall)} team(s) under quota: {missing}"
        else:
            outcome.message = (
                f"Schedule generated with {len(outcome.matches)} matches, "
                f"every team at {pairing.quota}+ matches"
            )
        return outcome

    def build_matches(self, pairing: PairingResult, match_date: date, day: str) -> List[Match]:
        matches = []
        for round_index, pairs in enumerate(pairing.rounds):
            for court_index, (team1, team2) in enumerate(pairs):
                matches.append(Match(
                    round=round_index + 1,
                    court=court_index + 1,
                    team1=team1,
                    team2=team2,
                    match_date=match_date,
                    day=day,
                    is_posted=False
                ))
        return matches

    def post(self, store, outcome: ScheduleOutcome, overwrite: bool = False) -> List[Match]:
        """
        Persist a generated schedule, replacing an existing one only on confirmation.

        The new rows are inserted before the old ones are deleted, so a failed
        write leaves the previously posted schedule in place.

        Raises:
            ValueError: If the outcome holds no schedule
            ScheduleConflictError: If a schedule exists for the date and overwrite is False
            DataUnavailableError: If a write fails (the previous schedule is kept)
        """
        if not outcome.has_schedule:
            raise ValueError(f"Nothing to post: {outcome.status.value}")

        existing_ids = store.schedule_ids(outcome.match_date)
        if existing_ids and not overwrite:
            logger.warning(
                f"Schedule already exists for {outcome.match_date.isoformat()} "
                f"({len(existing_ids)} matches); overwrite not confirmed"
            )
            raise ScheduleConflictError(outcome.match_date, len(existing_ids))

        rows = [
            Match(
                round=m.round,
                court=m.court,
                team1=m.team1,
                team2=m.team2,
                match_date=m.match_date,
                day=m.day,
                is_posted=True
            )
            for m in outcome.matches
        ]
        posted = store.insert_matches(rows)

        if existing_ids:
            try:
                store.delete_matches(existing_ids)
            except DataUnavailableError:
                logger.error(
                    f"Could not remove the previous schedule for {outcome.match_date.isoformat()}; "
                    f"withdrawing the {len(posted)} new rows"
                )
                store.delete_matches([m.id for m in posted if m.id is not None])
                raise

        logger.info(f"Posted {len(posted)} matches for {outcome.match_date.isoformat()}")
        return posted
