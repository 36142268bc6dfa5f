"""
Explicit context for the single active interview session.

The orchestrator threads one SessionContext through every pipeline call
instead of keeping session state in a global registry. Reset swaps in a
fresh context and marks the old one discarded, so an AI call that returns
after a reset can tell its result no longer applies.
"""

import asyncio

from interview_engine.core.errors import StateError
from interview_engine.core.state_machine import SessionEvent, SessionStateMachine
from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.interview import InterviewSession


class SessionContext:
    """Profile, session and mutation lock for one session lifetime."""

    def __init__(
        self,
        profile: CandidateProfile | None = None,
        session: InterviewSession | None = None,
    ):
        self.profile = profile
        self.session = session
        self.lock = asyncio.Lock()
        self.discarded = False

    @property
    def is_busy(self) -> bool:
        return self.lock.locked()

    def require_session(self) -> InterviewSession:
        if self.discarded or self.session is None:
            raise StateError("No active interview session. Please upload your resume again.")
        return self.session

    def require_profile(self) -> CandidateProfile:
        if self.discarded or self.profile is None:
            raise StateError("No candidate profile for this session.")
        return self.profile

    def apply(self, event: SessionEvent) -> InterviewSession:
        """Run an event through the state machine and keep the result."""
        self.session = SessionStateMachine.apply(self.require_session(), event)
        return self.session

    def discard(self) -> None:
        self.discarded = True
