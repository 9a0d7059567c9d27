"""
Data models for the scheduling system.
"""

from .models import (
    ScheduleStatus,
    MatchStatus,
    Team,
    Absence,
    Match,
    ScoreSubmission,
    LeagueSettings,
    PairingResult,
    ScheduleOutcome,
    ResolutionReport,
    SchedulingConstraint,
    ScheduleValidationResult,
    format_match_counts,
    pair_key,
    parse_match_date
)

__all__ = [
    "ScheduleStatus",
    "MatchStatus",
    "Team",
    "Absence",
    "Match",
    "ScoreSubmission",
    "LeagueSettings",
    "PairingResult",
    "ScheduleOutcome",
    "ResolutionReport",
    "SchedulingConstraint",
    "ScheduleValidationResult",
    "format_match_counts",
    "pair_key",
    "parse_match_date"
]
