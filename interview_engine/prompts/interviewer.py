"""
AI Interviewer Prompt Templates

Builds the prompt that asks the model for a complete, ordered question plan.
"""

import json

from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.question import InterviewConfiguration


class InterviewerPrompts:
    """Prompt templates for question plan generation."""

    SYSTEM_CONTEXT = """You are an AI technical interviewer creating a timed assessment.
Each question is asked one at a time and must stand alone."""

    OUTPUT_SCHEMA = """Return ONLY valid JSON that matches this schema:
{
  "questions": [
    {
      "id": string,
      "prompt": string,
      "difficulty": "easy" | "medium" | "hard",
      "category": string,
      "timeLimitSeconds": number,
      "guidance": string
    }
  ]
}"""

    def generate_questions_prompt(
        self,
        profile: CandidateProfile,
        config: InterviewConfiguration,
    ) -> str:
        """Build the question plan prompt."""
        plan = {
            "totalQuestions": config.total_questions,
            "difficultyPattern": [d.value for d in config.difficulty_pattern],
            "timerByDifficulty": {d.value: s for d, s in config.timer_by_difficulty.items()},
        }
        return f"""{self.SYSTEM_CONTEXT}

Create a {config.total_questions}-question assessment for the role: {profile.role}.

{self.OUTPUT_SCHEMA}

Interview configuration:
{json.dumps(plan, indent=2)}

Guidelines:
- Follow the difficulty pattern exactly, in order.
- Ignore candidate-specific resume details. Craft universally applicable questions.
- Cover a balanced mix of front-end, back-end, data handling, testing and deployment topics.
- Keep prompts concise but specific, and include guidance on what a strong answer covers."""
