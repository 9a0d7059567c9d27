"""
Celery tasks for schedule generation.
"""

import traceback
from datetime import datetime, date

from league_scheduler.core.celery_app import celery_app
from league_scheduler.core.exceptions import ScheduleConflictError, DataUnavailableError
from league_scheduler.core.logging_config import get_logger
from league_scheduler.services.supabase_store import SupabaseLeagueStore
from league_scheduler.services.scheduler import LeagueScheduleService

logger = get_logger(__name__)


def outcome_to_dict(outcome) -> dict:
    """JSON-serializable view of a ScheduleOutcome."""
    return {
        "status": outcome.status.value,
        "message": outcome.message,
        "match_date": outcome.match_date.isoformat(),
        "day": outcome.day,
        "strategy": outcome.strategy,
        "eligible_teams": outcome.eligible_teams,
        "absent_teams": outcome.absent_teams,
        "match_counts": outcome.match_counts,
        "relaxation_tiers": outcome.relaxation_tiers,
        "summary": outcome.get_summary(),
        "resolution_error": outcome.resolution_error,
        "matches": [
            {
                "round": m.round,
                "court": m.court,
                "team1": m.team1,
                "team2": m.team2,
                "match_date": m.match_date.isoformat() if m.match_date else None,
                "day": m.day,
                "is_posted": m.is_posted
            }
            for m in outcome.matches
        ]
    }


@celery_app.task(bind=True, name="generate_league_schedule")
def generate_schedule_task(self, match_date: str, day: str, post: bool = False,
                           overwrite: bool = False, strategy: str = None, config_name: str = None):
    """
    Async task to generate (and optionally post) a league day schedule.

    Returns:
        dict: Schedule outcome, or an error description
    """
    try:
        self.update_state(
            state="PROGRESS",
            meta={"status": "Loading teams and absences..."}
        )

        start_time = datetime.now()
        target_date = date.fromisoformat(match_date)

        store = SupabaseLeagueStore()
        settings = store.load_league_settings(config_name)
        service = LeagueScheduleService(store, settings)

        self.update_state(
            state="PROGRESS",
            meta={"status": f"Generating schedule for {day} {match_date}..."}
        )
        outcome = service.generate(target_date, day, strategy=strategy)

        result = outcome_to_dict(outcome)
        result["success"] = outcome.has_schedule
        result["posted"] = False

        if post and outcome.has_schedule:
            self.update_state(
                state="PROGRESS",
                meta={"status": "Posting schedule..."}
            )
            service.post(outcome, overwrite=overwrite)
            result["posted"] = True
            result["resolution_error"] = outcome.resolution_error

        result["generation_time"] = (datetime.now() - start_time).total_seconds()
        return result

    except ScheduleConflictError as e:
        return {
            "success": False,
            "conflict": True,
            "message": str(e),
            "existing_matches": e.existing_matches
        }

    except DataUnavailableError as e:
        logger.error(f"Data unavailable in generate_schedule_task: {e}")
        return {
            "success": False,
            "message": f"Schedule generation aborted: {e}",
            "error": str(e)
        }

    except Exception as e:
        error_trace = traceback.format_exc()
        logger.error(f"Error in generate_schedule_task: {error_trace}")

        return {
            "success": False,
            "message": f"Schedule generation failed: {str(e)}",
            "error": str(e),
            "traceback": error_trace
        }
