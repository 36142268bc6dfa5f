"""
AI prompt templates for Interview Engine

Contains structured prompts for:
- Question plan generation
- Answer evaluation
- Interview summary
"""

from interview_engine.prompts.interviewer import InterviewerPrompts
from interview_engine.prompts.evaluator import EvaluatorPrompts
from interview_engine.prompts.report import ReportPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
    "ReportPrompts",
]
