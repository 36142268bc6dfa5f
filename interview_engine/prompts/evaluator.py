"""
AI Evaluator Prompt Templates

Contains the prompt for scoring a single answer on a 0-10 scale.
"""

import json

from interview_engine.models.interview import ChatMessage
from interview_engine.models.question import InterviewQuestion


class EvaluatorPrompts:
    """
    Prompt templates for AI evaluation of answers.

    Key principles:
    - One JSON object, no commentary
    - Feedback focused on the 2-3 issues that move the score
    """

    SYSTEM_CONTEXT = """You are an AI interviewer evaluating a candidate's answer.
Consider technical depth, clarity, and problem solving."""

    OUTPUT_RULES = """Return ONLY JSON with this schema:
{
  "score": number (0-10),
  "feedback": string
}

Rules:
- Respond with a single JSON object and absolutely no extra commentary, markdown, or explanations.
- The "feedback" value must be a concise summary under 100 words.
- Focus the feedback on the top 2-3 most critical issues or strengths that affect the score."""

    def evaluate_answer_prompt(
        self,
        question: InterviewQuestion,
        answer: str,
        transcript: list[ChatMessage],
    ) -> str:
        """Build the evaluation prompt, including the transcript so far."""
        history = [
            {"sender": message.sender.value, "body": message.body}
            for message in transcript
        ]
        return f"""{self.SYSTEM_CONTEXT}

{self.OUTPUT_RULES}

Question:
{question.model_dump_json(indent=2)}

Answer:
{answer}

Conversation history:
{json.dumps(history, indent=2)}"""
