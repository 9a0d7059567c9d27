"""
Configuration constants for the League Day Scheduler.
All configurable settings are defined here.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", os.getenv("SUPABASE_ANON_KEY", ""))

# Redis connection URL for Celery (default to localhost)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Table Names
TABLE_TEAMS = "teams"
TABLE_ABSENCES = "absences"
TABLE_SCHEDULES = "schedules"
TABLE_SCORE_SUBMISSIONS = "score_submissions"
TABLE_LEAGUE_SETTINGS = "league_settings"

# Match Quota Rules
MATCHES_PER_TEAM = int(os.getenv("MATCHES_PER_TEAM", "6"))

# Court Rules
MAX_COURTS_PER_ROUND = int(os.getenv("MAX_COURTS_PER_ROUND", "4"))
SMALL_POOL_THRESHOLD = int(os.getenv("SMALL_POOL_THRESHOLD", "8"))  # Pools below this use SMALL_POOL_COURTS
SMALL_POOL_COURTS = int(os.getenv("SMALL_POOL_COURTS", "3"))

# Rematch Avoidance
RECENT_OPPONENT_WINDOW = 3  # Last N opponents a team should not see again soon

# Rotation Tables
ROTATION_MIN_TEAMS = 4
ROTATION_MAX_TEAMS = 16

# Score Submissions
FORFEIT_WIN_SCORE = 1
FORFEIT_LOSS_SCORE = 0
DRAW_RESULT = "Draw"
SYSTEM_SUBMITTER = "system"

# Display
BYE_LABEL = "BYE"

DAYS_OF_WEEK = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday"
]
