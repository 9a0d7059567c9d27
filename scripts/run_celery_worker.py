"""
Run the Celery worker that generates and posts schedules in the background.
"""

import argparse
import os
import sys

import redis

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from league_scheduler.core.celery_app import celery_app, SCHEDULING_QUEUE
from league_scheduler.core.config import REDIS_URL


def check_broker(url: str) -> bool:
    try:
        return bool(redis.Redis.from_url(url, socket_connect_timeout=3).ping())
    except redis.RedisError as e:
        print(f"ERROR: Cannot reach Redis at {url}: {e}")
        return False


def main():
    parser = argparse.ArgumentParser(description="Run the schedule generation worker")
    parser.add_argument("--loglevel", default="info")
    args = parser.parse_args()

    print("=" * 60)
    print("League Day Scheduler - Celery Worker")
    print("=" * 60)
    print(f"Broker: {REDIS_URL}")
    print(f"Queue: {SCHEDULING_QUEUE}")
    print("=" * 60)

    if not check_broker(REDIS_URL):
        return 1

    celery_app.worker_main([
        "worker",
        f"--loglevel={args.loglevel}",
        f"--queues={SCHEDULING_QUEUE}",
        "--concurrency=1",  # one post per date at a time
        "--pool=solo" if os.name == "nt" else "--pool=prefork"
    ])
    return 0


if __name__ == "__main__":
    sys.exit(main())
