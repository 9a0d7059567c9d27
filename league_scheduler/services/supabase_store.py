"""
Supabase data store for the League Day Scheduler.
Reads rosters, absences and settings; writes schedules and score submissions.
"""

from datetime import date
from typing import List, Optional, Iterable, Dict, Any
from supabase import create_client, Client

from league_scheduler.core.config import (
    SUPABASE_URL, SUPABASE_KEY,
    TABLE_TEAMS, TABLE_ABSENCES, TABLE_SCHEDULES,
    TABLE_SCORE_SUBMISSIONS, TABLE_LEAGUE_SETTINGS
)
from league_scheduler.core.exceptions import DataUnavailableError
from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import (
    Team, Absence, Match, ScoreSubmission, LeagueSettings
)

logger = get_logger(__name__)


class SupabaseLeagueStore:
    def __init__(self, client: Optional[Client] = None):
        if client is None:
            if not SUPABASE_KEY:
                raise DataUnavailableError("SUPABASE_KEY is not configured", source="config")
            client = create_client(SUPABASE_URL, SUPABASE_KEY)
        self.client = client

    def _run(self, description: str, query) -> List[Dict[str, Any]]:
        try:
            response = query.execute()
        except Exception as e:
            logger.error(f"Error {description}: {e}")
            raise DataUnavailableError(f"Could not {description}: {e}", source=description) from e
        return response.data or []

    def load_teams(self, day: Optional[str] = None) -> List[Team]:
        query = self.client.table(TABLE_TEAMS).select('*')
        if day:
            query = query.eq('day', day)
        rows = self._run("load teams", query)

        teams = []
        for row in rows:
            if not (row.get('team_name') or row.get('name')):
                logger.warning(f"Skipping team row without a name: {row.get('id')}")
                continue
            teams.append(Team.from_row(row))

        logger.info(f"Loaded {len(teams)} teams" + (f" for {day}" if day else ""))
        return teams

    def load_absences(self, match_date: date) -> List[Absence]:
        query = (
            self.client.table(TABLE_ABSENCES)
            .select('*')
            .eq('absence_date', match_date.isoformat())
        )
        rows = self._run("load absences", query)
        absences = [Absence.from_row(row) for row in rows]
        logger.info(f"Loaded {len(absences)} absences for {match_date.isoformat()}")
        return absences

    def load_league_settings(self, name: Optional[str] = None) -> LeagueSettings:
        query = self.client.table(TABLE_LEAGUE_SETTINGS).select('*')
        if name:
            query = query.eq('name', name)
        rows = self._run("load league settings", query)

        if not rows:
            if name:
                logger.warning(f"League settings '{name}' not found; using defaults")
            return LeagueSettings()
        return LeagueSettings.from_row(rows[0])

    def load_schedule(self, match_date: date, posted_only: bool = False) -> List[Match]:
        query = (
            self.client.table(TABLE_SCHEDULES)
            .select('*')
            .eq('match_date', match_date.isoformat())
        )
        if posted_only:
            query = query.eq('is_posted', True)
        query = query.order('round').order('court')
        rows = self._run("load schedule", query)
        return [Match.from_row(row) for row in rows]

    def schedule_ids(self, match_date: date) -> List[int]:
        query = (
            self.client.table(TABLE_SCHEDULES)
            .select('id')
            .eq('match_date', match_date.isoformat())
        )
        return [row['id'] for row in self._run("check existing schedule", query)]

    def count_schedule(self, match_date: date) -> int:
        return len(self.schedule_ids(match_date))

    def delete_matches(self, match_ids: Iterable[int]):
        ids = list(match_ids)
        if not ids:
            return
        query = (
            self.client.table(TABLE_SCHEDULES)
            .delete()
            .in_('id', ids)
        )
        self._run("delete schedule rows", query)
        logger.info(f"Deleted {len(ids)} schedule rows")

    def insert_matches(self, matches: Iterable[Match]) -> List[Match]:
        rows = [match.to_row() for match in matches]
        if not rows:
            return []
        inserted = self._run("insert schedule", self.client.table(TABLE_SCHEDULES).insert(rows))
        logger.info(f"Inserted {len(inserted)} matches")
        return [Match.from_row(row) for row in inserted]

    def load_submissions(self, match_ids: Iterable[int]) -> List[ScoreSubmission]:
        ids = list(match_ids)
        if not ids:
            return []
        query = (
            self.client.table(TABLE_SCORE_SUBMISSIONS)
            .select('*')
            .in_('match_id', ids)
        )
        rows = self._run("load score submissions", query)
        return [ScoreSubmission.from_row(row) for row in rows]

    def upsert_submissions(self, submissions: Iterable[ScoreSubmission]) -> List[ScoreSubmission]:
        rows = [submission.to_row() for submission in submissions]
        if not rows:
            return []
        query = self.client.table(TABLE_SCORE_SUBMISSIONS).upsert(
            rows, on_conflict="match_id,submitted_by"
        )
        written = self._run("upsert score submissions", query)
        logger.info(f"Upserted {len(written)} score submissions")
        return [ScoreSubmission.from_row(row) for row in written]
