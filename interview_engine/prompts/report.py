"""
Summary Prompt Templates

Builds the end-of-interview summary prompt.
"""

import json

from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.interview import AnswerRecord
from interview_engine.models.question import InterviewQuestion


class ReportPrompts:
    """Prompt templates for the final interview summary."""

    OUTPUT_SCHEMA = """Return ONLY JSON with this schema:
{
  "finalScore": number (0-10),
  "summaryText": string,
  "strengths": string[],
  "improvements": string[]
}"""

    def summarize_prompt(
        self,
        profile: CandidateProfile,
        questions: list[InterviewQuestion],
        answers: list[AnswerRecord],
    ) -> str:
        """Build the summary prompt from the ordered plan and answers."""
        candidate = profile.model_dump(mode="json", include={"name", "role"})
        return f"""You are an AI interviewer summarizing a technical interview.
{self.OUTPUT_SCHEMA}

Candidate profile:
{json.dumps(candidate, indent=2)}

Questions:
{json.dumps([q.model_dump(mode="json") for q in questions], indent=2)}

Answers:
{json.dumps([a.model_dump(mode="json") for a in answers], indent=2)}"""
