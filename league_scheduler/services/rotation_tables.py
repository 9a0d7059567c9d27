"""
Rotation tables for fixed-size league days.

A table is a sequence of rounds; each round is a tuple of disjoint
1-based team-index pairs. Index 1 is the best-ranked team of the day.

Pools up to quota + 1 teams play a full round robin. Larger pools play the
nearest ranks on either side (index distance 1..quota/2, wrapping around),
so every team gets exactly the quota and no pair repeats. Pairs are then
packed into rounds no wider than the court capacity, busiest teams first,
rotating teams that sat out the previous round onto the courts.
"""

from collections import defaultdict
from functools import lru_cache
from typing import Dict, List, Tuple

from league_scheduler.core.config import (
    ROTATION_MIN_TEAMS, ROTATION_MAX_TEAMS, MATCHES_PER_TEAM
)
from league_scheduler.models import LeagueSettings

IndexPair = Tuple[int, int]
RotationRound = Tuple[IndexPair, ...]
RotationTable = Tuple[RotationRound, ...]


def supports_team_count(team_count: int) -> bool:
    return ROTATION_MIN_TEAMS <= team_count <= ROTATION_MAX_TEAMS


def _index_pairs(team_count: int, matches_per_team: int) -> List[IndexPair]:
    """Every pairing the table will contain, nearest ranks first."""
    if team_count - 1 <= matches_per_team:
        offsets = list(range(1, team_count // 2 + 1))
    else:
        offsets = list(range(1, matches_per_team // 2 + 1))
        if matches_per_team % 2 == 1 and team_count % 2 == 0:
            # Odd quota: the opposite seat adds one more opponent each
            offsets.append(team_count // 2)

    pairs = []
    seen = set()
    for offset in offsets:
        for index in range(team_count):
            other = (index + offset) % team_count
            key = (min(index, other) + 1, max(index, other) + 1)
            if key in seen:
                continue
            seen.add(key)
            pairs.append(key)
    return pairs


def _pack_rounds(pairs: List[IndexPair], courts: int) -> List[RotationRound]:
    remaining = list(pairs)
    rounds: List[RotationRound] = []
    played_last_round = set()
    max_rounds = len(pairs)  # every pass places at least one pair

    while remaining:
        if len(rounds) >= max_rounds:
            raise RuntimeError(f"Rotation packing exceeded {max_rounds} rounds")

        load: Dict[int, int] = defaultdict(int)
        for a, b in remaining:
            load[a] += 1
            load[b] += 1

        def priority(position: int):
            a, b = remaining[position]
            just_played = (a in played_last_round) + (b in played_last_round)
            return (-(load[a] + load[b]), just_played, position)

        busy = set()
        chosen = []
        for position in sorted(range(len(remaining)), key=priority):
            a, b = remaining[position]
            if a in busy or b in busy:
                continue
            chosen.append(position)
            busy.update((a, b))
            if len(chosen) == courts:
                break

        rounds.append(tuple(remaining[position] for position in chosen))
        chosen_positions = set(chosen)
        remaining = [pair for position, pair in enumerate(remaining) if position not in chosen_positions]
        played_last_round = busy

    return rounds


@lru_cache(maxsize=None)
def get_rotation_table(team_count: int,
                       matches_per_team: int = MATCHES_PER_TEAM,
                       courts: int = None) -> RotationTable:
    """
    Return the rotation table for a pool size.

    Args:
        team_count: Number of eligible teams (4-16)
        matches_per_team: Target matches per team
        courts: Court capacity per round (defaults to the league default for the pool size)

    Raises:
        ValueError: If no table exists for the team count
    """
    if not supports_team_count(team_count):
        raise ValueError(
            f"No rotation table for {team_count} teams "
            f"(supported: {ROTATION_MIN_TEAMS}-{ROTATION_MAX_TEAMS})"
        )
    if courts is None:
        courts = LeagueSettings().courts_for(team_count)
    courts = max(1, min(courts, team_count // 2))

    pairs = _index_pairs(team_count, matches_per_team)
    return tuple(_pack_rounds(pairs, courts))


# Default tables, built once at import
ROTATION_TABLES: Dict[int, RotationTable] = {
    team_count: get_rotation_table(team_count)
    for team_count in range(ROTATION_MIN_TEAMS, ROTATION_MAX_TEAMS + 1)
}
