"""
API routes for league day schedule generation and management.
"""

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from typing import List, Dict, Optional
from datetime import datetime, date
from celery.result import AsyncResult

from league_scheduler.core.celery_app import celery_app
from league_scheduler.core.exceptions import DataUnavailableError, ScheduleConflictError
from league_scheduler.core.logging_config import get_logger
from league_scheduler.models import ScheduleOutcome, Match
from league_scheduler.services.supabase_store import SupabaseLeagueStore
from league_scheduler.services.scheduler import LeagueScheduleService
from league_scheduler.services.round_sheet import build_round_sheet, format_round_sheet
from league_scheduler.services.score_reconciliation import reconcile
from league_scheduler.tasks.scheduler_tasks import generate_schedule_task

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["schedule"])


def get_store():
    """League store dependency (overridden in tests)."""
    try:
        return SupabaseLeagueStore()
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


class ScheduleRequest(BaseModel):
    """Request model for schedule generation."""
    match_date: date
    day: str
    strategy: Optional[str] = None
    config_name: Optional[str] = None


class PostScheduleRequest(ScheduleRequest):
    """Request model for generating and posting a schedule."""
    overwrite: bool = False


class MatchResponse(BaseModel):
    """Response model for a single match."""
    id: Optional[int] = None
    round: int
    court: int
    team1: str
    team2: Optional[str] = None
    match_date: Optional[date] = None
    day: Optional[str] = None
    is_posted: bool


class ScheduleResponse(BaseModel):
    """Response model for schedule generation."""
    success: bool
    status: str
    message: str
    summary: str
    strategy: Optional[str] = None
    total_matches: int
    matches: List[MatchResponse]
    eligible_teams: List[str]
    absent_teams: List[str]
    match_counts: Dict[str, int]
    relaxation_tiers: List[str]
    posted: bool = False
    resolution_error: Optional[str] = None
    generation_time: float


class RoundResponse(BaseModel):
    round: int
    matches: List[MatchResponse]
    bye_teams: List[str]


class RoundSheetResponse(BaseModel):
    match_date: date
    day: Optional[str] = None
    teams: List[str]
    rounds: List[RoundResponse]
    text: str


class ResolutionResponse(BaseModel):
    match_date: date
    absent_teams: List[str]
    submitted: int
    skipped: int
    summary: str


def _match_response(match: Match) -> MatchResponse:
    return MatchResponse(
        id=match.id,
        round=match.round,
        court=match.court,
        team1=match.team1,
        team2=match.team2,
        match_date=match.match_date,
        day=match.day,
        is_posted=match.is_posted
    )


def _schedule_response(outcome: ScheduleOutcome, start_time: datetime, posted: bool = False) -> ScheduleResponse:
    return ScheduleResponse(
        success=outcome.has_schedule,
        status=outcome.status.value,
        message=outcome.message,
        summary=outcome.get_summary(),
        strategy=outcome.strategy,
        total_matches=len(outcome.matches),
        matches=[_match_response(m) for m in outcome.matches],
        eligible_teams=outcome.eligible_teams,
        absent_teams=outcome.absent_teams,
        match_counts=outcome.match_counts,
        relaxation_tiers=outcome.relaxation_tiers,
        posted=posted,
        resolution_error=outcome.resolution_error,
        generation_time=(datetime.now() - start_time).total_seconds()
    )


def _service(store, config_name: Optional[str]) -> LeagueScheduleService:
    settings = store.load_league_settings(config_name)
    return LeagueScheduleService(store, settings)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.post("/schedule", response_model=ScheduleResponse)
def generate_schedule(request: ScheduleRequest, store=Depends(get_store)):
    """
    Generate a schedule preview for a league day (nothing is persisted).
    """
    start_time = datetime.now()
    try:
        service = _service(store, request.config_name)
        outcome = service.generate(request.match_date, request.day, strategy=request.strategy)
        return _schedule_response(outcome, start_time)
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Schedule generation aborted: {str(e)}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/schedule/post", response_model=ScheduleResponse)
def post_schedule(request: PostScheduleRequest, store=Depends(get_store)):
    """
    Generate and post a schedule for a league day.

    Returns 409 when a schedule already exists for the date and overwrite is not set.
    A failed absentee auto-resolution after posting is reported in `resolution_error`.
    """
    start_time = datetime.now()
    try:
        service = _service(store, request.config_name)
        outcome = service.generate(request.match_date, request.day, strategy=request.strategy)
        posted = False
        if outcome.has_schedule:
            service.post(outcome, overwrite=request.overwrite)
            posted = True
        return _schedule_response(outcome, start_time, posted=posted)
    except ScheduleConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Schedule posting aborted: {str(e)}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/schedule/async")
async def generate_schedule_async(request: PostScheduleRequest, post: bool = False):
    """
    Start async schedule generation task.

    Returns:
        dict: Task ID for polling status
    """
    try:
        task = generate_schedule_task.delay(
            request.match_date.isoformat(),
            request.day,
            post=post,
            overwrite=request.overwrite,
            strategy=request.strategy,
            config_name=request.config_name
        )

        return {
            "task_id": task.id,
            "status": "PENDING",
            "message": "Schedule generation started"
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to start task: {str(e)}")


@router.get("/schedule/status/{task_id}")
async def get_schedule_status(task_id: str):
    """
    Get status of async schedule generation task.
    """
    try:
        task_result = AsyncResult(task_id, app=celery_app)

        if task_result.state == "PENDING":
            response = {
                "task_id": task_id,
                "status": "PENDING",
                "message": "Task is waiting to start..."
            }
        elif task_result.state == "PROGRESS":
            response = {
                "task_id": task_id,
                "status": "PROGRESS",
                "message": task_result.info.get("status", "Processing...")
            }
        elif task_result.state == "SUCCESS":
            response = {
                "task_id": task_id,
                "status": "SUCCESS",
                "result": task_result.result
            }
        elif task_result.state == "FAILURE":
            response = {
                "task_id": task_id,
                "status": "FAILURE",
                "message": str(task_result.info)
            }
        else:
            response = {
                "task_id": task_id,
                "status": task_result.state,
                "message": f"Task state: {task_result.state}"
            }

        return response
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {str(e)}")


@router.get("/schedule/{match_date}/rounds", response_model=RoundSheetResponse)
def get_round_sheet(match_date: date, store=Depends(get_store)):
    """Posted schedule grouped by round, with the teams on a bye in each round."""
    try:
        matches = store.load_schedule(match_date, posted_only=True)
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not matches:
        raise HTTPException(status_code=404, detail=f"No posted schedule for {match_date.isoformat()}")

    sheet = build_round_sheet(matches)
    return RoundSheetResponse(
        match_date=match_date,
        day=sheet.day,
        teams=sheet.teams,
        rounds=[
            RoundResponse(
                round=r.round,
                matches=[_match_response(m) for m in r.matches],
                bye_teams=r.bye_teams
            )
            for r in sheet.rounds
        ],
        text=format_round_sheet(sheet)
    )


@router.get("/schedule/{match_date}/status")
def get_score_status(match_date: date, store=Depends(get_store)):
    """Score submission status for every posted match on a date."""
    try:
        matches = store.load_schedule(match_date, posted_only=True)
        submissions = store.load_submissions([m.id for m in matches if m.id is not None])
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    statuses = reconcile(matches, submissions)
    counts: Dict[str, int] = {}
    for status in statuses.values():
        counts[status.value] = counts.get(status.value, 0) + 1

    return {
        "match_date": match_date.isoformat(),
        "matches": [
            {
                "id": m.id,
                "round": m.round,
                "court": m.court,
                "team1": m.team1,
                "team2": m.team2,
                "status": statuses[m.id].value
            }
            for m in matches if m.id in statuses
        ],
        "summary": counts
    }


@router.post("/schedule/{match_date}/resolve-absentees", response_model=ResolutionResponse)
def resolve_absentees(match_date: date, store=Depends(get_store)):
    """Write forfeit submissions for matches involving absent teams."""
    try:
        service = LeagueScheduleService(store)
        report = service.resolve_absentees(match_date)
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return ResolutionResponse(
        match_date=match_date,
        absent_teams=report.absent_teams,
        submitted=len(report.submissions),
        skipped=len(report.skipped),
        summary=report.get_summary()
    )
