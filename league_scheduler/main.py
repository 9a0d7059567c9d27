"""
Main FastAPI application for the League Day Scheduler.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from league_scheduler.api import routes
from league_scheduler.core.logging_config import setup_logging

setup_logging()

app = FastAPI(
    title="League Day Scheduling API",
    description="API for generating, posting and reconciling league day match schedules",
    version="1.0.0"
)

# Enable CORS for the mobile/web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(routes.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "League Day Scheduling API",
        "version": "1.0.0",
        "endpoints": {
            "generate": "/api/schedule",
            "post": "/api/schedule/post",
            "rounds": "/api/schedule/{match_date}/rounds",
            "health": "/api/health"
        }
    }
