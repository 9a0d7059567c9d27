"""
Command-line entry point for the League Day Scheduler.
Generates a schedule for one league day, shows it, and optionally posts it.
"""

import sys
import logging
import argparse
from datetime import datetime, date
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from league_scheduler.core.config import DAYS_OF_WEEK
from league_scheduler.core.exceptions import DataUnavailableError, ScheduleConflictError
from league_scheduler.core.logging_config import setup_logging
from league_scheduler.services.supabase_store import SupabaseLeagueStore
from league_scheduler.services.scheduler import LeagueScheduleService, STRATEGY_NAMES, is_terminal_failure
from league_scheduler.services.round_sheet import build_round_sheet, format_round_sheet


def confirm_overwrite(error: ScheduleConflictError) -> bool:
    answer = input(f"{error}\nOverwrite the existing schedule? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def main():
    """
    Load the day's teams, generate the schedule, print it, and post it on request.
    """
    parser = argparse.ArgumentParser(
        description='League Day Scheduler - Generate a round-robin draw for one league day'
    )
    parser.add_argument('match_date', help='Match date (YYYY-MM-DD)')
    parser.add_argument('day', choices=DAYS_OF_WEEK, help='League day name')
    parser.add_argument(
        '--strategy',
        choices=STRATEGY_NAMES,
        default='auto',
        help='Pairing strategy (default: rotation table for 4-16 teams, greedy otherwise)'
    )
    parser.add_argument('--config', help='League settings configuration name')
    parser.add_argument('--post', action='store_true', help='Post the schedule after generating it')
    parser.add_argument(
        '--overwrite',
        action='store_true',
        help='Replace an existing schedule for the date without asking'
    )
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    print("\n" + "=" * 80)
    print("LEAGUE DAY SCHEDULER")
    print("=" * 80)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)

    try:
        match_date = date.fromisoformat(args.match_date)

        print(f"\n[STEP 1] Loading teams and absences for {args.day} {match_date.isoformat()}...")
        store = SupabaseLeagueStore()
        settings = store.load_league_settings(args.config)
        service = LeagueScheduleService(store, settings)

        print("\n[STEP 2] Generating schedule...")
        outcome = service.generate(match_date, args.day, strategy=args.strategy)

        print("\n" + "=" * 80)
        print("SCHEDULE SUMMARY")
        print("=" * 80)
        print(outcome.get_summary())

        if is_terminal_failure(outcome):
            print(f"ERROR: Cannot generate schedule: {outcome.message}")
            return 1

        print(format_round_sheet(build_round_sheet(outcome.matches)))
        print(service.validator.generate_match_count_report(
            outcome.matches, outcome.eligible_teams, quota=outcome.quota
        ))

        if not args.post:
            print("\nPreview only. Re-run with --post to publish this schedule.")
            return 0

        print("\n[STEP 3] Posting schedule...")
        try:
            service.post(outcome, overwrite=args.overwrite)
        except ScheduleConflictError as conflict:
            if not confirm_overwrite(conflict):
                print("Cancelled. The existing schedule was left unchanged.")
                return 1
            service.post(outcome, overwrite=True)

        print(f"Posted {len(outcome.matches)} matches for {match_date.isoformat()}")
        if outcome.resolution_error:
            print(f"WARNING: Absentee auto-resolution failed: {outcome.resolution_error}")
            print("Re-run it once the league store is reachable.")
        print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        return 0

    except DataUnavailableError as e:
        print(f"\nERROR: League data unavailable, no schedule generated: {e}")
        return 1

    except ValueError as e:
        print(f"\nERROR: {e}")
        return 1

    except KeyboardInterrupt:
        print("\n\nScheduling interrupted by user.")
        return 1


if __name__ == '__main__':
    sys.exit(main())
