"""
Schedule validation module for the League Day Scheduler.
Validates a generated schedule against the pairing invariants.
"""

from collections import defaultdict
from typing import List, Dict, Optional

from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import (
    Match, LeagueSettings, SchedulingConstraint,
    ScheduleValidationResult, format_match_counts
)

logger = get_logger(__name__)


class ScheduleValidator:
    """
    Validates league day schedules.
    Checks both hard constraints (must be satisfied) and soft constraints (shortfalls and relaxations).
    """

    def __init__(self, settings: Optional[LeagueSettings] = None):
        self.settings = settings or LeagueSettings()

    def validate_schedule(self, matches: List[Match], eligible_teams: Optional[List[str]] = None,
                          rematches_allowed: bool = False,
                          quota: Optional[int] = None) -> ScheduleValidationResult:
        """
        Validate a complete schedule against all constraints.

        Args:
            matches: The scheduled matches
            eligible_teams: Teams that should appear (for shortfall checks)
            rematches_allowed: True when the rematch relaxation fired for this run
            quota: Target matches per team (defaults to the league setting)

        Returns:
            ScheduleValidationResult with all violations found
        """
        result = ScheduleValidationResult(is_valid=True)
        teams = list(eligible_teams) if eligible_teams is not None else sorted(
            {team for match in matches for team in match.teams()}
        )

        self._check_round_double_booking(matches, result)
        self._check_court_numbers(matches, teams, result)
        self._check_rematches(matches, rematches_allowed, result)
        self._check_match_quota(matches, teams, result, quota)

        logger.info(
            f"Validation: valid={result.is_valid}, "
            f"hard={len(result.hard_constraint_violations)}, "
            f"soft={len(result.soft_constraint_violations)}"
        )
        for violation in result.hard_constraint_violations[:10]:  # Show first 10
            logger.warning(f"  - {violation.constraint_type}: {violation.description}")

        return result

    def _check_round_double_booking(self, matches: List[Match], result: ScheduleValidationResult):
        """A team may appear at most once per round and never against itself."""
        round_teams = defaultdict(lambda: defaultdict(list))

        for match in matches:
            if match.team1 == match.team2:
                result.add_violation(SchedulingConstraint(
                    constraint_type="self_match",
                    severity="hard",
                    description=f"{match.team1} is scheduled against itself in round {match.round}",
                    affected_teams=[match.team1],
                    affected_matches=[match]
                ))
            for team in match.teams():
                round_teams[match.round][team].append(match)

        for round_number, teams in round_teams.items():
            for team, team_matches in teams.items():
                if len(team_matches) > 1:
                    result.add_violation(SchedulingConstraint(
                        constraint_type="team_double_booked",
                        severity="hard",
                        description=f"{team} plays {len(team_matches)} matches in round {round_number}",
                        affected_teams=[team],
                        affected_matches=team_matches
                    ))

    def _check_court_numbers(self, matches: List[Match], teams: List[str], result: ScheduleValidationResult):
        capacity = self.settings.courts_for(len(teams))
        courts_by_round = defaultdict(list)

        for match in matches:
            courts_by_round[match.round].append(match.court)
            if match.court < 1 or match.court > capacity:
                result.add_violation(SchedulingConstraint(
                    constraint_type="court_out_of_range",
                    severity="hard",
                    description=f"Round {match.round} uses court {match.court} (capacity {capacity})",
                    affected_matches=[match]
                ))

        for round_number, courts in courts_by_round.items():
            if len(courts) != len(set(courts)):
                result.add_violation(SchedulingConstraint(
                    constraint_type="court_double_booked",
                    severity="hard",
                    description=f"Round {round_number} assigns the same court twice",
                    affected_matches=[m for m in matches if m.round == round_number]
                ))

    def _check_rematches(self, matches: List[Match], rematches_allowed: bool, result: ScheduleValidationResult):
        pairs = defaultdict(list)
        for match in matches:
            key = match.pair_key()
            if key:
                pairs[key].append(match)

        for (team_a, team_b), pair_matches in pairs.items():
            if len(pair_matches) > 1:
                result.add_violation(SchedulingConstraint(
                    constraint_type="rematch",
                    severity="soft" if rematches_allowed else "hard",
                    description=f"{team_a} and {team_b} meet {len(pair_matches)} times",
                    affected_teams=[team_a, team_b],
                    affected_matches=pair_matches
                ))

    def _check_match_quota(self, matches: List[Match], teams: List[str], result: ScheduleValidationResult,
                           quota: Optional[int] = None):
        quota = quota if quota is not None else self.settings.matches_per_team
        counts = self.match_counts(matches, teams)
        over_by_one = [team for team, count in counts.items() if count == quota + 1]

        for team, count in sorted(counts.items()):
            if count > quota:
                # One helper match per run is allowed
                allowed = count == quota + 1 and len(over_by_one) == 1
                result.add_violation(SchedulingConstraint(
                    constraint_type="over_quota",
                    severity="soft" if allowed else "hard",
                    description=f"{team} plays {count} matches (quota {quota})",
                    affected_teams=[team]
                ))
            elif count < quota:
                result.add_violation(SchedulingConstraint(
                    constraint_type="under_quota",
                    severity="soft",
                    description=f"{team} plays {count} matches (quota {quota})",
                    affected_teams=[team]
                ))

    def match_counts(self, matches: List[Match], teams: Optional[List[str]] = None) -> Dict[str, int]:
        counts = {team: 0 for team in (teams or [])}
        for match in matches:
            for team in match.teams():
                counts[team] = counts.get(team, 0) + 1
        return counts

    def generate_match_count_report(self, matches: List[Match], teams: Optional[List[str]] = None,
                                    quota: Optional[int] = None) -> str:
        """Human-readable per-team match counts with the shortfall called out."""
        quota = quota if quota is not None else self.settings.matches_per_team
        counts = self.match_counts(matches, teams)

        report = []
        report.append("=" * 40)
        report.append("MATCHES PER TEAM")
        report.append("=" * 40)
        report.append(format_match_counts(counts).rstrip("\n"))

        under = {team: count for team, count in counts.items() if count < quota}
        over = {team: count for team, count in counts.items() if count > quota}
        report.append("-" * 40)
        report.append(f"Teams at quota ({quota}): {len(counts) - len(under) - len(over)}")
        if over:
            report.append(f"Teams over quota: {', '.join(f'{t} ({c})' for t, c in sorted(over.items()))}")
        if under:
            report.append(f"Teams under quota: {', '.join(f'{t} ({c})' for t, c in sorted(under.items()))}")
        report.append("=" * 40)
        return "\n".join(report)
