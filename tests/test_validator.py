"""
Tests for schedule validation.
"""

from league_scheduler.models import Match, LeagueSettings
from league_scheduler.services.validator import ScheduleValidator
from league_scheduler.services.pairing import generate_pairings
from league_scheduler.services.materializer import ScheduleMaterializer
from league_scheduler.services.availability import AvailabilityResult
from conftest import MATCH_DATE, LEAGUE_DAY, make_teams


def violation_types(violations):
    return sorted(v.constraint_type for v in violations)


def test_generated_rotation_schedule_is_valid():
    availability = AvailabilityResult(match_date=MATCH_DATE, day=LEAGUE_DAY, eligible=make_teams(12))
    outcome = ScheduleMaterializer().materialize(availability, generate_pairings(availability.eligible))

    result = ScheduleValidator().validate_schedule(outcome.matches, outcome.eligible_teams)

    assert result.is_valid
    assert result.soft_constraint_violations == []


def test_double_booking_and_self_match_are_hard_violations():
    matches = [
        Match(round=1, court=1, team1="A", team2="B"),
        Match(round=1, court=2, team1="A", team2="C"),
        Match(round=2, court=1, team1="D", team2="D"),
    ]

    result = ScheduleValidator().validate_schedule(matches, ["A", "B", "C", "D"])

    assert not result.is_valid
    hard = violation_types(result.hard_constraint_violations)
    assert "team_double_booked" in hard
    assert "self_match" in hard


def test_court_checks():
    matches = [
        Match(round=1, court=1, team1="A", team2="B"),
        Match(round=1, court=1, team1="C", team2="D"),
        Match(round=2, court=5, team1="A", team2="C"),
    ]

    result = ScheduleValidator().validate_schedule(matches, ["A", "B", "C", "D"])

    hard = violation_types(result.hard_constraint_violations)
    assert "court_double_booked" in hard
    assert "court_out_of_range" in hard


def test_rematch_severity_depends_on_the_relaxation():
    matches = [
        Match(round=1, court=1, team1="A", team2="B"),
        Match(round=2, court=1, team1="B", team2="A"),
    ]
    validator = ScheduleValidator(LeagueSettings(matches_per_team=2))

    strict = validator.validate_schedule(matches, ["A", "B"])
    relaxed = validator.validate_schedule(matches, ["A", "B"], rematches_allowed=True)

    assert "rematch" in violation_types(strict.hard_constraint_violations)
    assert relaxed.is_valid
    assert violation_types(relaxed.soft_constraint_violations) == ["rematch"]


def test_single_helper_match_is_soft():
    matches = [
        Match(round=1, court=1, team1="A", team2="B"),
        Match(round=2, court=1, team1="C", team2="A"),
    ]

    result = ScheduleValidator(LeagueSettings(matches_per_team=1)).validate_schedule(matches, ["A", "B", "C"])

    assert result.is_valid
    assert violation_types(result.soft_constraint_violations) == ["over_quota"]


def test_two_teams_over_quota_is_hard():
    matches = [
        Match(round=1, court=1, team1="A", team2="B"),
        Match(round=2, court=1, team1="A", team2="C"),
        Match(round=3, court=1, team1="B", team2="C"),
    ]

    result = ScheduleValidator(LeagueSettings(matches_per_team=1)).validate_schedule(matches, ["A", "B", "C"])

    assert not result.is_valid
    assert violation_types(result.hard_constraint_violations).count("over_quota") == 3


def test_shortfall_is_soft_and_respects_an_explicit_quota():
    matches = [Match(round=1, court=1, team1="A", team2="B")]
    validator = ScheduleValidator()

    default = validator.validate_schedule(matches, ["A", "B"])
    explicit = validator.validate_schedule(matches, ["A", "B"], quota=1)

    assert default.is_valid
    assert violation_types(default.soft_constraint_violations) == ["under_quota", "under_quota"]
    assert explicit.soft_constraint_violations == []


def test_match_count_report_lists_every_team():
    matches = [Match(round=1, court=1, team1="Aces", team2="Blasters")]

    report = ScheduleValidator().generate_match_count_report(matches, ["Aces", "Blasters", "Comets"])

    assert "Aces                  1" in report
    assert "Comets                0" in report
    assert "Teams under quota: Aces (1), Blasters (1), Comets (0)" in report
