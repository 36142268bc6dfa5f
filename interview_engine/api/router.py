"""
Main API router for Interview Engine

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from interview_engine.api.endpoints import candidates, session

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    session.router,
    prefix="/session",
    tags=["Session"]
)

api_router.include_router(
    candidates.router,
    prefix="/candidates",
    tags=["Candidates"]
)
