"""
API endpoint modules for Interview Engine
"""

from interview_engine.api.endpoints import candidates, session

__all__ = ["candidates", "session"]
