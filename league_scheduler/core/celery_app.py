"""
Celery application for background schedule generation.
"""

from celery import Celery

from league_scheduler.core.config import REDIS_URL

SCHEDULING_QUEUE = "league_scheduling"

celery_app = Celery(
    "league_scheduler",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["league_scheduler.tasks.scheduler_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    enable_utc=True,
    task_default_queue=SCHEDULING_QUEUE,
    task_track_started=True,
    task_time_limit=120,
    task_soft_time_limit=90,
    result_expires=24 * 3600,  # seconds
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
)
