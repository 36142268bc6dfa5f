"""
Interview Engine - timed mock-interview session engine.

Drives a candidate through a timed sequence of AI-generated questions,
scores each answer and archives a final summary, falling back to
deterministic behaviour whenever the AI service is unavailable.
"""

__version__ = "0.1.0"
__author__ = "Interview Engine Team"
