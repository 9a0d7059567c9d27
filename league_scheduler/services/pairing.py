"""
Pairing engine for a single league day.

Two interchangeable strategies turn an eligible team list into rounds of
matches:

- FixedRotation(n): applies the precomputed rotation table for n teams (4-16).
  Deterministic, which keeps printed schedules reproducible.
- GreedyConstraintSolver: builds rounds on the fly for any pool size, under
  the match quota, court capacity and rematch rules, relaxing them in tiers
  when a round cannot be filled.

All per-run state lives in a SchedulingRunContext so the engine is re-entrant.
"""

import random
from collections import defaultdict, deque
from typing import List, Dict, Set, Tuple, Optional, Iterable

from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import Team, LeagueSettings, PairingResult, pair_key
from league_scheduler.services.rotation_tables import get_rotation_table, supports_team_count

logger = get_logger(__name__)


class SchedulingRunContext:
    """Pairing history and match counts for one scheduling run."""

    def __init__(self, team_names: Iterable[str], settings: LeagueSettings,
                 rng: Optional[random.Random] = None):
        self.settings = settings
        self.quota = settings.matches_per_team
        self.rng = rng if rng is not None else random.Random()
        self.team_names: List[str] = list(team_names)
        self.match_counts: Dict[str, int] = {team: 0 for team in self.team_names}
        self.recent_opponents: Dict[str, deque] = {
            team: deque(maxlen=settings.recent_opponent_window) for team in self.team_names
        }
        self.pair_counts: Dict[Tuple[str, str], int] = defaultdict(int)
        self.helper_team: Optional[str] = None
        self.helper_round: Optional[int] = None
        self.rematch_rounds: List[int] = []

    @property
    def helper_available(self) -> bool:
        return self.settings.allow_helper_match and self.helper_team is None

    def helper_straggler(self) -> Optional[str]:
        """The team a helper match may serve: the last under-quota team, one match short."""
        under = self.under_quota()
        if self.helper_available and len(under) == 1 and self.match_counts[under[0]] == self.quota - 1:
            return under[0]
        return None

    def under_quota(self) -> List[str]:
        return [team for team in self.team_names if self.match_counts[team] < self.quota]

    def at_quota(self) -> List[str]:
        return [team for team in self.team_names if self.match_counts[team] == self.quota]

    def has_played(self, team_a: str, team_b: str) -> bool:
        return self.pair_counts.get(pair_key(team_a, team_b), 0) > 0

    def is_recent(self, team_a: str, team_b: str) -> bool:
        return team_b in self.recent_opponents[team_a] or team_a in self.recent_opponents[team_b]

    def record(self, team_a: str, team_b: str):
        self.match_counts[team_a] += 1
        self.match_counts[team_b] += 1
        self.pair_counts[pair_key(team_a, team_b)] += 1
        # deque(maxlen) keeps only the most recent opponents
        self.recent_opponents[team_a].appendleft(team_b)
        self.recent_opponents[team_b].appendleft(team_a)

    def to_result(self, strategy: str, rounds: List[List[Tuple[str, str]]], message: str = "") -> PairingResult:
        return PairingResult(
            strategy=strategy,
            rounds=rounds,
            match_counts=dict(self.match_counts),
            quota=self.quota,
            helper_team=self.helper_team,
            helper_round=self.helper_round,
            rematch_rounds=list(self.rematch_rounds),
            message=message
        )


def rank_teams(teams: List[Team]) -> List[Team]:
    """Ascending rank (a missing rank counts as 0), ties broken alphabetically."""
    return sorted(
        teams,
        key=lambda t: (t.rank if t.rank is not None else 0.0, t.name.lower(), t.name)
    )


class PairingStrategy:
    """Interface shared by both pairing strategies."""

    name = "base"

    def pair(self, teams: List[Team], context: SchedulingRunContext) -> PairingResult:
        raise NotImplementedError


class FixedRotation(PairingStrategy):
    """Apply the precomputed rotation table for a known team count."""

    name = "fixed_rotation"

    def __init__(self, team_count: int):
        self.team_count = team_count

    def __repr__(self):
        return f"FixedRotation({self.team_count})"

    def pair(self, teams: List[Team], context: SchedulingRunContext) -> PairingResult:
        if len(teams) != self.team_count or not supports_team_count(self.team_count):
            message = f"Unsupported team count: {len(teams)} (rotation tables cover 4-16 teams)"
            logger.warning(message)
            result = context.to_result(self.name, [], message)
            result.supported = False
            return result

        ranked = rank_teams(teams)
        team_by_index = {index + 1: team.name for index, team in enumerate(ranked)}
        courts = context.settings.courts_for(self.team_count)
        table = get_rotation_table(self.team_count, context.quota, courts)

        rounds = []
        for table_round in table:
            pairs = []
            for index_a, index_b in table_round:
                team_a, team_b = team_by_index[index_a], team_by_index[index_b]
                context.record(team_a, team_b)
                pairs.append((team_a, team_b))
            rounds.append(pairs)

        logger.info(
            f"Applied {self.team_count}-team rotation table: "
            f"{sum(len(r) for r in rounds)} matches in {len(rounds)} rounds"
        )
        result = context.to_result(self.name, rounds)
        # A table never repeats a pair, so small pools top out at n - 1
        result.quota = min(context.quota, self.team_count - 1)
        return result


class GreedyConstraintSolver(PairingStrategy):
    """
    Build rounds incrementally until every team reaches its quota or no
    further pairing can be placed.

    Per round:
    1. Candidates are the under-quota teams, shuffled then stably sorted by
       matches played (fewest first).
    2. Each unclaimed team takes the first unclaimed partner it has never
       played and that is outside both recent-opponent windows.
    3. A short round allows rematches among the remaining under-quota
       teams. Only when a single team in the pool is left one match short
       does it get a helper match against an at-quota team (once per run).
    4. A round that places nothing ends the run.
    """

    name = "greedy"

    def __repr__(self):
        return "GreedyConstraintSolver()"

    def pair(self, teams: List[Team], context: SchedulingRunContext) -> PairingResult:
        courts = context.settings.courts_for(len(teams))
        max_rounds = context.settings.total_rounds
        rounds: List[List[Tuple[str, str]]] = []

        while True:
            under = context.under_quota()
            if len(under) < 2 and context.helper_straggler() is None:
                break

            if max_rounds is not None and len(rounds) >= max_rounds:
                logger.warning(f"Stopping at the configured limit of {max_rounds} rounds")
                break

            round_number = len(rounds) + 1
            pairs = self._build_round(under, courts, round_number, context)

            if not pairs:
                logger.warning(
                    f"Round {round_number} could not place any match; "
                    f"{len(under)} team(s) remain under quota"
                )
                break

            rounds.append(pairs)

        shortfall = {t: c for t, c in context.match_counts.items() if c < context.quota}
        if shortfall:
            message = f"{len(shortfall)} team(s) finished under the quota of {context.quota}"
            logger.warning(message)
        else:
            message = f"All {len(teams)} teams reached the quota of {context.quota}"
        return context.to_result(self.name, rounds, message)

    def _build_round(self, under: List[str], courts: int, round_number: int,
                     context: SchedulingRunContext) -> List[Tuple[str, str]]:
        candidates = list(under)
        context.rng.shuffle(candidates)
        # Stable sort keeps the shuffled order among ties
        candidates.sort(key=lambda t: context.match_counts[t])

        claimed: Set[str] = set()
        pairs: List[Tuple[str, str]] = []

        for i, t1 in enumerate(candidates):
            if len(pairs) >= courts:
                break
            if t1 in claimed:
                continue
            for t2 in candidates[i + 1:]:
                if t2 in claimed:
                    continue
                if context.has_played(t1, t2) or context.is_recent(t1, t2):
                    continue
                self._take(t1, t2, pairs, claimed, context)
                break

        if len(pairs) < courts and context.helper_straggler() is not None:
            self._place_helper_match(pairs, claimed, round_number, context)

        if len(pairs) < courts:
            self._place_rematches(candidates, courts, pairs, claimed, round_number, context)

        return pairs

    def _take(self, t1: str, t2: str, pairs: List[Tuple[str, str]], claimed: Set[str],
              context: SchedulingRunContext):
        pairs.append((t1, t2))
        claimed.update((t1, t2))
        context.record(t1, t2)

    def _place_helper_match(self, pairs: List[Tuple[str, str]], claimed: Set[str],
                            round_number: int, context: SchedulingRunContext):
        straggler = context.helper_straggler()
        if straggler is None or straggler in claimed:
            return
        helpers = [t for t in context.at_quota() if t not in claimed]

        for helper in helpers:
            if context.has_played(straggler, helper) or context.is_recent(straggler, helper):
                continue
            self._take(straggler, helper, pairs, claimed, context)
            context.helper_team = helper
            context.helper_round = round_number
            logger.info(
                f"Round {round_number}: helper match {straggler} vs {helper} "
                f"({helper} plays {context.match_counts[helper]})"
            )
            return

    def _place_rematches(self, candidates: List[str], courts: int, pairs: List[Tuple[str, str]],
                         claimed: Set[str], round_number: int, context: SchedulingRunContext):
        remaining = [t for t in candidates if t not in claimed and context.match_counts[t] < context.quota]
        placed = 0

        for i, t1 in enumerate(remaining):
            if len(pairs) >= courts:
                break
            if t1 in claimed:
                continue
            options = [t2 for t2 in remaining[i + 1:] if t2 not in claimed]
            if not options:
                continue
            # Prefer an opponent outside the recent window
            fresh = [t2 for t2 in options if not context.is_recent(t1, t2)]
            t2 = fresh[0] if fresh else options[0]
            self._take(t1, t2, pairs, claimed, context)
            placed += 1

        if placed:
            context.rematch_rounds.append(round_number)
            logger.info(f"Round {round_number}: filled {placed} court(s) with rematches")


def select_strategy(team_count: int) -> PairingStrategy:
    """Rotation table when one exists for the pool size, greedy otherwise."""
    if supports_team_count(team_count):
        return FixedRotation(team_count)
    return GreedyConstraintSolver()


def generate_pairings(teams: List[Team], settings: Optional[LeagueSettings] = None,
                      strategy: Optional[PairingStrategy] = None,
                      rng: Optional[random.Random] = None) -> PairingResult:
    """
    Run one scheduling pass over the eligible teams.

    Args:
        teams: Eligible teams for the day
        settings: League settings (defaults from config)
        strategy: Force a strategy instead of selecting by team count
        rng: Random source for the greedy tie-breaking shuffle

    Returns:
        PairingResult with rounds of (team1, team2) name pairs
    """
    settings = settings or LeagueSettings()
    strategy = strategy or select_strategy(len(teams))
    context = SchedulingRunContext([t.name for t in teams], settings, rng)
    return strategy.pair(teams, context)
