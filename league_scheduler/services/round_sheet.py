"""
Round sheet for printing or exporting a posted schedule.

Works purely from persisted matches: groups them by round and lists the
teams sitting out each round. No scheduling logic happens here.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Dict, Optional

from league_scheduler.core.config import BYE_LABEL
from league_scheduler.models import Match


@dataclass
class RoundSheetRound:
    round: int
    matches: List[Match] = field(default_factory=list)
    bye_teams: List[str] = field(default_factory=list)


@dataclass
class RoundSheet:
    match_date: Optional[date]
    day: Optional[str]
    teams: List[str] = field(default_factory=list)
    rounds: List[RoundSheetRound] = field(default_factory=list)


def all_teams(matches: List[Match]) -> List[str]:
    """Teams appearing anywhere in the day's schedule, in first-seen order."""
    teams: Dict[str, None] = {}
    for match in matches:
        for team in match.teams():
            teams.setdefault(team, None)
    return list(teams)


def bye_teams_for_round(teams: List[str], round_matches: List[Match]) -> List[str]:
    playing = set()
    for match in round_matches:
        playing.update(match.teams())
    return [team for team in teams if team not in playing]


def build_round_sheet(matches: List[Match]) -> RoundSheet:
    ordered = sorted(matches, key=lambda m: (m.round, m.court))
    teams = all_teams(ordered)

    grouped: Dict[int, List[Match]] = {}
    for match in ordered:
        grouped.setdefault(match.round, []).append(match)

    first = ordered[0] if ordered else None
    sheet = RoundSheet(
        match_date=first.match_date if first else None,
        day=first.day if first else None,
        teams=teams
    )
    for round_number, round_matches in grouped.items():
        sheet.rounds.append(RoundSheetRound(
            round=round_number,
            matches=round_matches,
            bye_teams=bye_teams_for_round(teams, round_matches)
        ))
    return sheet


def format_round_sheet(sheet: RoundSheet) -> str:
    if not sheet.rounds:
        return "No posted schedule.\n"

    header = f"{sheet.day or ''} {sheet.match_date.isoformat() if sheet.match_date else ''}".strip()
    lines = [header, "=" * len(header)] if header else []
    for sheet_round in sheet.rounds:
        lines.append(f"Round {sheet_round.round}")
        for match in sheet_round.matches:
            lines.append(f"  Court {match.court}: {match.team1 or '-'} vs {match.team2 or BYE_LABEL}")
        if sheet_round.bye_teams:
            lines.append(f"  Teams with a bye: {', '.join(sheet_round.bye_teams)}")
        lines.append("")
    return "\n".join(lines)
