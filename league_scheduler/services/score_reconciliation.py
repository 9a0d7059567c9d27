"""
Reconcile posted matches against score submissions.
"""

from collections import defaultdict
from typing import List, Dict, Optional

from league_scheduler.core.config import SYSTEM_SUBMITTER
from league_scheduler.models import Match, ScoreSubmission, MatchStatus


def match_status(match: Match, submissions: List[ScoreSubmission],
                 submitter: Optional[str] = None) -> MatchStatus:
    """
    Status of one match given its submissions.

    With `submitter` the status is seen from that team's side: its own
    submission alone is "waiting". Without it, one team submission is
    "waiting" for the other side.
    """
    own = [s for s in submissions if s.match_id == match.id]
    if any(s.submitted_by == SYSTEM_SUBMITTER for s in own):
        return MatchStatus.APPROVED

    if submitter is not None:
        mine = next((s for s in own if s.submitted_by == submitter), None)
        theirs = next((s for s in own if s.submitted_by != submitter), None)
    else:
        mine = own[0] if own else None
        theirs = next((s for s in own[1:] if s.submitted_by != mine.submitted_by), None) if mine else None

    if mine and theirs:
        return MatchStatus.APPROVED if mine.same_result(theirs) else MatchStatus.CONFLICT
    if mine or theirs:
        return MatchStatus.WAITING
    return MatchStatus.UNSUBMITTED


def reconcile(matches: List[Match], submissions: List[ScoreSubmission]) -> Dict[int, MatchStatus]:
    """Status for every persisted match, keyed by match id."""
    by_match: Dict[int, List[ScoreSubmission]] = defaultdict(list)
    for submission in submissions:
        by_match[submission.match_id].append(submission)

    statuses = {}
    for match in matches:
        if match.id is None or match.is_bye:
            continue
        statuses[match.id] = match_status(match, by_match.get(match.id, []))
    return statuses
