"""
Tests for the Supabase-backed league store.
"""

import pytest

from league_scheduler.core.exceptions import DataUnavailableError
from league_scheduler.models import Match, ScoreSubmission
from league_scheduler.services import supabase_store
from league_scheduler.services.supabase_store import SupabaseLeagueStore
from conftest import MATCH_DATE, LEAGUE_DAY, seed_teams


def test_missing_key_is_reported(monkeypatch):
    monkeypatch.setattr(supabase_store, "SUPABASE_KEY", "")
    with pytest.raises(DataUnavailableError) as exc_info:
        SupabaseLeagueStore()
    assert exc_info.value.source == "config"


def test_load_teams_maps_rank_and_skips_unnamed_rows(store, fake_client):
    seed_teams(fake_client, 3)
    fake_client.tables["teams"].append({"id": 99, "team_name": "", "day": LEAGUE_DAY})

    teams = store.load_teams(LEAGUE_DAY)

    assert [t.name for t in teams] == ["Team A", "Team B", "Team C"]
    assert [t.rank for t in teams] == [1.0, 2.0, 3.0]


def test_default_settings_when_none_are_stored(store):
    settings = store.load_league_settings("summer")
    assert settings.matches_per_team == 6
    assert settings.max_courts == 4
    assert settings.allow_helper_match


def test_stored_settings_are_mapped(store, fake_client):
    fake_client.tables["league_settings"].append({
        "name": "summer", "max_matches": 5, "number_of_courts": 3,
        "total_rounds": 8, "boost_weakest": False
    })

    settings = store.load_league_settings("summer")

    assert settings.matches_per_team == 5
    assert settings.max_courts == 3
    assert settings.total_rounds == 8
    assert settings.allow_helper_match is False
    assert settings.courts_for(6) == 3


def test_schedule_is_loaded_in_round_and_court_order(store):
    store.insert_matches([
        Match(round=2, court=1, team1="C", team2="D", match_date=MATCH_DATE, is_posted=True),
        Match(round=1, court=2, team1="A", team2="B", match_date=MATCH_DATE, is_posted=False),
        Match(round=1, court=1, team1="E", team2="F", match_date=MATCH_DATE, is_posted=True),
    ])

    everything = store.load_schedule(MATCH_DATE)
    posted = store.load_schedule(MATCH_DATE, posted_only=True)

    assert [(m.round, m.court) for m in everything] == [(1, 1), (1, 2), (2, 1)]
    assert [m.team1 for m in posted] == ["E", "C"]
    assert store.count_schedule(MATCH_DATE) == 3


def test_upsert_replaces_a_submission_from_the_same_submitter(store, fake_client):
    first = ScoreSubmission(match_id=1, submitted_by="system", team1_score=1, team2_score=0, winner="A")
    second = ScoreSubmission(match_id=1, submitted_by="system", team1_score=0, team2_score=1, winner="B")

    store.upsert_submissions([first])
    store.upsert_submissions([second])

    rows = fake_client.tables["score_submissions"]
    assert len(rows) == 1
    assert rows[0]["winner"] == "B"
    assert [s.winner for s in store.load_submissions([1])] == ["B"]


def test_failed_write_is_wrapped(store, fake_client):
    fake_client.failing_tables.add("schedules")
    with pytest.raises(DataUnavailableError):
        store.insert_matches([Match(round=1, court=1, team1="A", team2="B", match_date=MATCH_DATE)])


def test_delete_matches_removes_only_the_listed_rows(store, fake_client):
    kept, dropped = store.insert_matches([
        Match(round=1, court=1, team1="A", team2="B", match_date=MATCH_DATE, is_posted=True),
        Match(round=1, court=2, team1="C", team2="D", match_date=MATCH_DATE, is_posted=True),
    ])

    store.delete_matches([dropped.id])
    store.delete_matches([])

    assert store.schedule_ids(MATCH_DATE) == [kept.id]
