"""
Data models for the League Day Scheduler.
Defines all data structures used throughout the application.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum

from league_scheduler.core.config import (
    MATCHES_PER_TEAM, MAX_COURTS_PER_ROUND, SMALL_POOL_THRESHOLD,
    SMALL_POOL_COURTS, RECENT_OPPONENT_WINDOW, DRAW_RESULT
)


def parse_match_date(value: Any) -> Optional[date]:
    """Accept a date, datetime or ISO string (date or timestamp) and return a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Could not parse match date: {value!r}")


def pair_key(team_a: str, team_b: str) -> Tuple[str, str]:
    """Order-independent key for a pairing."""
    return (team_a, team_b) if team_a <= team_b else (team_b, team_a)


class ScheduleStatus(Enum):
    GENERATED = "generated"
    PARTIAL = "partial"
    NO_ELIGIBLE_TEAMS = "no_eligible_teams"
    UNSUPPORTED_TEAM_COUNT = "unsupported_team_count"
    NOTHING_GENERATED = "nothing_generated"


class MatchStatus(Enum):
    UNSUBMITTED = "unsubmitted"
    WAITING = "waiting"
    APPROVED = "approved"
    CONFLICT = "conflict"


@dataclass
class Team:
    name: str
    day: str
    rank: Optional[float] = None
    id: Optional[str] = None

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        if isinstance(other, Team):
            return self.name == other.name
        return False

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Team":
        name = row.get("team_name") or row.get("name")
        rank = row.get("rank", row.get("average_score"))
        return cls(
            name=str(name).strip(),
            day=str(row.get("day") or "").strip(),
            rank=float(rank) if rank is not None else None,
            id=str(row["id"]) if row.get("id") is not None else None
        )


@dataclass
class Absence:
    team_name: str
    absence_date: date
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Absence":
        return cls(
            team_name=str(row["team_name"]).strip(),
            absence_date=parse_match_date(row["absence_date"]),
            id=row.get("id")
        )


@dataclass
class Match:
    round: int
    court: int
    team1: str
    team2: Optional[str] = None
    match_date: Optional[date] = None
    day: Optional[str] = None
    is_posted: bool = False
    id: Optional[int] = None

    def __str__(self):
        opponent = self.team2 if self.team2 else "BYE"
        return f"Round {self.round} Court {self.court}: {self.team1} vs {opponent}"

    @property
    def is_bye(self) -> bool:
        return self.team2 is None

    def teams(self) -> List[str]:
        return [t for t in (self.team1, self.team2) if t]

    def involves_team(self, team_name: str) -> bool:
        return team_name in (self.team1, self.team2)

    def get_opponent(self, team_name: str) -> Optional[str]:
        if self.team1 == team_name:
            return self.team2
        elif self.team2 == team_name:
            return self.team1
        return None

    def pair_key(self) -> Optional[Tuple[str, str]]:
        if self.is_bye:
            return None
        return pair_key(self.team1, self.team2)

    def to_row(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "court": self.court,
            "team1": self.team1,
            "team2": self.team2,
            "match_date": self.match_date.isoformat() if self.match_date else None,
            "day": self.day,
            "is_posted": self.is_posted
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Match":
        return cls(
            round=int(row["round"]),
            court=int(row["court"]),
            team1=row["team1"],
            team2=row.get("team2"),
            match_date=parse_match_date(row.get("match_date")),
            day=row.get("day"),
            is_posted=bool(row.get("is_posted", False)),
            id=row.get("id")
        )


@dataclass
class ScoreSubmission:
    match_id: int
    submitted_by: str
    team1_score: int
    team2_score: int
    winner: str
    is_approved: bool = False
    id: Optional[int] = None

    @property
    def is_draw(self) -> bool:
        return self.winner == DRAW_RESULT

    def same_result(self, other: "ScoreSubmission") -> bool:
        return (self.team1_score, self.team2_score) == (other.team1_score, other.team2_score)

    def to_row(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "submitted_by": self.submitted_by,
            "team1_score": self.team1_score,
            "team2_score": self.team2_score,
            "winner": self.winner,
            "is_approved": self.is_approved
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ScoreSubmission":
        return cls(
            match_id=row["match_id"],
            submitted_by=row["submitted_by"],
            team1_score=int(row["team1_score"]),
            team2_score=int(row["team2_score"]),
            winner=row.get("winner") or DRAW_RESULT,
            is_approved=bool(row.get("is_approved", False)),
            id=row.get("id")
        )


@dataclass
class LeagueSettings:
    """Scheduling knobs for one league configuration."""
    name: str = "default"
    matches_per_team: int = MATCHES_PER_TEAM
    max_courts: int = MAX_COURTS_PER_ROUND
    small_pool_threshold: int = SMALL_POOL_THRESHOLD
    small_pool_courts: int = SMALL_POOL_COURTS
    recent_opponent_window: int = RECENT_OPPONENT_WINDOW
    total_rounds: Optional[int] = None
    allow_helper_match: bool = True

    def courts_for(self, team_count: int) -> int:
        """Court capacity for a pool of the given size."""
        if team_count < self.small_pool_threshold:
            return min(self.small_pool_courts, self.max_courts)
        return self.max_courts

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LeagueSettings":
        defaults = cls()
        total_rounds = row.get("total_rounds")
        return cls(
            name=row.get("name") or defaults.name,
            matches_per_team=int(row.get("max_matches") or defaults.matches_per_team),
            max_courts=int(row.get("number_of_courts") or defaults.max_courts),
            small_pool_threshold=defaults.small_pool_threshold,
            small_pool_courts=defaults.small_pool_courts,
            recent_opponent_window=defaults.recent_opponent_window,
            total_rounds=int(total_rounds) if total_rounds else None,
            allow_helper_match=row.get("boost_weakest") is not False
        )


@dataclass
class PairingResult:
    """Raw engine output: rounds of team-name pairs plus what it took to build them."""
    strategy: str
    rounds: List[List[Tuple[str, str]]] = field(default_factory=list)
    match_counts: Dict[str, int] = field(default_factory=dict)
    quota: int = MATCHES_PER_TEAM
    supported: bool = True
    helper_team: Optional[str] = None
    helper_round: Optional[int] = None
    rematch_rounds: List[int] = field(default_factory=list)
    message: str = ""

    @property
    def total_matches(self) -> int:
        return sum(len(r) for r in self.rounds)

    @property
    def relaxation_tiers(self) -> List[str]:
        tiers = []
        if self.helper_team:
            tiers.append("helper_match")
        if self.rematch_rounds:
            tiers.append("rematch")
        return tiers

    def shortfall(self) -> Dict[str, int]:
        """Teams below quota and how many matches they are missing."""
        return {
            team: self.quota - count
            for team, count in self.match_counts.items()
            if count < self.quota
        }


@dataclass
class ScheduleOutcome:
    status: ScheduleStatus
    match_date: date
    day: str
    matches: List[Match] = field(default_factory=list)
    eligible_teams: List[str] = field(default_factory=list)
    absent_teams: List[str] = field(default_factory=list)
    match_counts: Dict[str, int] = field(default_factory=dict)
    strategy: Optional[str] = None
    relaxation_tiers: List[str] = field(default_factory=list)
    quota: int = MATCHES_PER_TEAM
    message: str = ""
    resolution_error: Optional[str] = None

    @property
    def has_schedule(self) -> bool:
        return self.status in (ScheduleStatus.GENERATED, ScheduleStatus.PARTIAL) and bool(self.matches)

    @property
    def round_count(self) -> int:
        return max((m.round for m in self.matches), default=0)

    def get_summary(self) -> str:
        summary = f"Schedule for {self.day} {self.match_date.isoformat()}: {self.status.value}\n"
        summary += f"{self.message}\n"
        summary += f"Eligible teams: {len(self.eligible_teams)}\n"
        if self.absent_teams:
            summary += f"Absent teams: {', '.join(sorted(self.absent_teams))}\n"
        if self.strategy:
            summary += f"Strategy: {self.strategy}\n"
        summary += f"Matches: {len(self.matches)} in {self.round_count} rounds\n"
        if self.relaxation_tiers:
            summary += f"Relaxations used: {', '.join(self.relaxation_tiers)}\n"
        if self.resolution_error:
            summary += f"Absentee auto-resolution failed: {self.resolution_error}\n"
        if self.match_counts:
            summary += "\nMatches per team:\n"
            summary += format_match_counts(self.match_counts)
        return summary


@dataclass
class ResolutionReport:
    match_date: date
    submissions: List[ScoreSubmission] = field(default_factory=list)
    skipped: List[Tuple[Match, str]] = field(default_factory=list)
    absent_teams: List[str] = field(default_factory=list)

    def get_summary(self) -> str:
        summary = f"Absentee resolution for {self.match_date.isoformat()}\n"
        summary += f"Absent teams: {', '.join(sorted(self.absent_teams)) or 'none'}\n"
        summary += f"Submissions written: {len(self.submissions)}\n"
        summary += f"Matches skipped: {len(self.skipped)}\n"
        for match, reason in self.skipped:
            summary += f"  - {match}: {reason}\n"
        return summary


@dataclass
class SchedulingConstraint:
    constraint_type: str
    severity: str
    description: str
    affected_teams: List[str] = field(default_factory=list)
    affected_matches: List[Match] = field(default_factory=list)


@dataclass
class ScheduleValidationResult:
    is_valid: bool
    hard_constraint_violations: List[SchedulingConstraint] = field(default_factory=list)
    soft_constraint_violations: List[SchedulingConstraint] = field(default_factory=list)

    def add_violation(self, constraint: SchedulingConstraint):
        if constraint.severity == 'hard':
            self.hard_constraint_violations.append(constraint)
            self.is_valid = False
        else:
            self.soft_constraint_violations.append(constraint)

    def get_summary(self) -> str:
        summary = f"Schedule Valid: {self.is_valid}\n"
        summary += f"Hard Violations: {len(self.hard_constraint_violations)}\n"
        summary += f"Soft Violations: {len(self.soft_constraint_violations)}\n"
        return summary


def format_match_counts(match_counts: Dict[str, int]) -> str:
    """Fixed-width team/count table sorted by team name."""
    lines = []
    for team, count in sorted(match_counts.items()):
        lines.append(f"{team.ljust(20)} {str(count).rjust(2)}")
    return "\n".join(lines) + "\n"
