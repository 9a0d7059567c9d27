"""
Absentee auto-resolution.

Once a schedule is posted, every match that involves a team marked absent
on the match date gets a system score submission so standings are not
blocked: the absent team scores 0, the present team the nominal win value,
and a match between two absent teams is recorded as a draw.
"""

from collections import defaultdict
from datetime import date
from typing import List, Optional, Set

from league_scheduler.core.config import (
    FORFEIT_WIN_SCORE, FORFEIT_LOSS_SCORE, DRAW_RESULT, SYSTEM_SUBMITTER
)
from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import Match, ScoreSubmission, ResolutionReport

logger = get_logger(__name__)


class AbsenteeResolver:

    def __init__(self, store, submitter: str = SYSTEM_SUBMITTER,
                 win_score: int = FORFEIT_WIN_SCORE, loss_score: int = FORFEIT_LOSS_SCORE):
        self.store = store
        self.submitter = submitter
        self.win_score = win_score
        self.loss_score = loss_score

    def build_submission(self, match: Match, absent: Set[str]) -> Optional[ScoreSubmission]:
        """Forfeit result for a match, or None if neither side is absent."""
        if match.is_bye or match.id is None:
            return None
        team1_absent = match.team1 in absent
        team2_absent = match.team2 in absent
        if not (team1_absent or team2_absent):
            return None

        if team1_absent and team2_absent:
            winner = DRAW_RESULT
        elif team1_absent:
            winner = match.team2
        else:
            winner = match.team1

        return ScoreSubmission(
            match_id=match.id,
            submitted_by=self.submitter,
            team1_score=self.loss_score if team1_absent else self.win_score,
            team2_score=self.loss_score if team2_absent else self.win_score,
            winner=winner,
            is_approved=True
        )

    def link_to_persisted(self, scheduled: List[Match], persisted: List[Match],
                          report: ResolutionReport) -> List[Match]:
        """
        Attach persisted ids to in-memory matches by team pair.

        Duplicate pairs are narrowed by round and court; anything that still
        does not resolve to exactly one persisted id is skipped.
        """
        by_pair = defaultdict(list)
        for row in persisted:
            if row.id is not None and row.pair_key():
                by_pair[row.pair_key()].append(row)

        linked = []
        for match in scheduled:
            if match.is_bye:
                continue
            candidates = by_pair.get(match.pair_key(), [])
            if len(candidates) > 1:
                candidates = [c for c in candidates if c.round == match.round and c.court == match.court]
            if len(candidates) != 1:
                reason = "no persisted match" if not candidates else "ambiguous persisted matches"
                report.skipped.append((match, reason))
                logger.warning(f"Skipping auto-resolution for {match}: {reason}")
                continue
            linked.append(candidates[0])
        return linked

    def resolve(self, match_date: date, scheduled: Optional[List[Match]] = None) -> ResolutionReport:
        """
        Upsert forfeit submissions for absent teams on a date.

        Args:
            match_date: Date of the posted schedule
            scheduled: Matches as generated (without ids); defaults to the persisted schedule

        Returns:
            ResolutionReport with written submissions and skipped matches
        """
        report = ResolutionReport(match_date=match_date)
        absent = {absence.team_name for absence in self.store.load_absences(match_date)}
        report.absent_teams = sorted(absent)
        if not absent:
            logger.info(f"No absences on {match_date.isoformat()}; nothing to resolve")
            return report

        persisted = self.store.load_schedule(match_date, posted_only=True)
        if scheduled is None:
            candidates = []
            for match in persisted:
                if match.id is None:
                    report.skipped.append((match, "no persisted id"))
                    continue
                candidates.append(match)
        else:
            affected = [m for m in scheduled if any(t in absent for t in m.teams())]
            candidates = self.link_to_persisted(affected, persisted, report)

        submissions = []
        for match in candidates:
            submission = self.build_submission(match, absent)
            if submission:
                submissions.append(submission)

        if submissions:
            self.store.upsert_submissions(submissions)
        report.submissions = submissions
        logger.info(
            f"Auto-resolved {len(submissions)} match(es) for absent teams on {match_date.isoformat()}, "
            f"skipped {len(report.skipped)}"
        )
        return report
