"""
API layer for Interview Engine

Contains FastAPI routers for:
- Active session lifecycle
- Candidate archive
"""

from interview_engine.api.router import api_router

__all__ = ["api_router"]
