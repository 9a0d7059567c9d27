"""
Run the League Day Scheduling API with uvicorn.
"""

import argparse
import os
import sys

import uvicorn

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from league_scheduler.core.config import LOG_LEVEL


def main():
    parser = argparse.ArgumentParser(description="Run the League Day Scheduling API")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload (production)")
    args = parser.parse_args()

    print("=" * 60)
    print("League Day Scheduling API Server")
    print("=" * 60)
    print(f"Listening on http://{args.host}:{args.port}")
    print(f"API Documentation: http://localhost:{args.port}/docs")
    print("=" * 60)

    uvicorn.run(
        "league_scheduler.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
