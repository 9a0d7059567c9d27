"""
Availability resolver: which teams can play on a given date.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Iterable

from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import Team, Absence

logger = get_logger(__name__)


@dataclass
class AvailabilityResult:
    match_date: date
    day: str
    eligible: List[Team] = field(default_factory=list)
    absent: List[str] = field(default_factory=list)

    @property
    def eligible_names(self) -> List[str]:
        return [team.name for team in self.eligible]


class AvailabilityResolver:
    """Filters the roster down to the league day's teams that are not absent."""

    def resolve(self, match_date: date, day: str, roster: Iterable[Team],
                absences: Iterable[Absence]) -> AvailabilityResult:
        absent_names = {
            absence.team_name for absence in absences
            if absence.absence_date == match_date
        }

        eligible = []
        seen = set()
        absent_today = set()
        for team in roster:
            if team.day != day:
                continue
            if team.name in absent_names:
                absent_today.add(team.name)
                continue
            if team.name in seen:
                logger.warning(f"Duplicate team '{team.name}' on {day}; keeping the first entry")
                continue
            seen.add(team.name)
            eligible.append(team)

        logger.info(
            f"{len(eligible)} eligible team(s) for {day} {match_date.isoformat()}, "
            f"{len(absent_today)} absent"
        )
        return AvailabilityResult(
            match_date=match_date,
            day=day,
            eligible=eligible,
            absent=sorted(absent_today)
        )

    def resolve_from_store(self, store, match_date: date, day: str) -> AvailabilityResult:
        """
        Load roster and absences from the league store and resolve them.

        Raises:
            DataUnavailableError: If either fetch fails; no schedule should be built.
        """
        roster = store.load_teams(day)
        absences = store.load_absences(match_date)
        return self.resolve(match_date, day, roster, absences)
