"""
AI Service for Interview Engine

Handles all AI-powered operations:
- Question plan generation
- Answer evaluation
- Interview summary

Talks to the Gemini generateContent REST API. Every public method returns
None instead of raising when the service is unavailable, slow to fail or
answers with something unusable; callers own the deterministic fallback.
Retry and timeout policy live here, never in the session core.
"""

import asyncio
import json
import logging
import random
from typing import Any, Protocol

import httpx
from pydantic import ValidationError as SchemaError

from interview_engine.config.settings import Settings, get_settings
from interview_engine.core.errors import TransientServiceError
from interview_engine.models.candidate import CandidateProfile
from interview_engine.models.evaluation import EvaluationResult, QuestionDraft, SummaryDraft
from interview_engine.models.interview import AnswerRecord, ChatMessage
from interview_engine.models.question import InterviewConfiguration, InterviewQuestion
from interview_engine.prompts.evaluator import EvaluatorPrompts
from interview_engine.prompts.interviewer import InterviewerPrompts
from interview_engine.prompts.report import ReportPrompts

logger = logging.getLogger(__name__)


class InterviewAI(Protocol):
    """What the session core needs from an AI collaborator."""

    async def generate_questions(
        self, profile: CandidateProfile, config: InterviewConfiguration
    ) -> list[QuestionDraft] | None: ...

    async def evaluate_answer(
        self, question: InterviewQuestion, answer: str, transcript: list[ChatMessage]
    ) -> EvaluationResult | None: ...

    async def summarize(
        self,
        profile: CandidateProfile,
        questions: list[InterviewQuestion],
        answers: list[AnswerRecord],
    ) -> SummaryDraft | None: ...


def parse_json_from_text(raw: str | None) -> dict[str, Any] | None:
    """Pull the outermost JSON object out of a model response."""
    if not raw:
        return None

    text = raw.strip()
    json_start = text.find("{")
    json_end = text.rfind("}") + 1
    if json_start >= 0 and json_end > json_start:
        text = text[json_start:json_end]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse JSON from AI response: {e}")
        return None
    return data if isinstance(data, dict) else None


class AIService:
    """
    Gemini-backed implementation of InterviewAI.

    Model Selection:
    - Preferred model first, then each configured fallback model
    - A 404 for a model moves on to the next candidate
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the AI service.

        Args:
            settings: Application settings (defaults to cached settings)
            client: HTTP client override, mainly for tests
        """
        self.settings = settings or get_settings()
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.gemini_base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            timeout=self.settings.ai_timeout_seconds,
        )

        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()
        self.report_prompts = ReportPrompts()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _backoff_delay(self, attempt: int) -> float:
        backoff = self.settings.ai_retry_base_delay_seconds * 2 ** (attempt - 1)
        jitter = random.uniform(0, self.settings.ai_retry_jitter_seconds)
        return backoff + jitter

    async def _post_with_retry(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        """POST with exponential backoff on retryable statuses and transport errors."""
        max_attempts = self.settings.ai_max_attempts
        retry_statuses = set(self.settings.ai_retry_statuses)

        for attempt in range(1, max_attempts + 1):
            try:
                response = await self.client.post(
                    url,
                    params={"key": self.settings.gemini_api_key},
                    json=payload,
                )
            except httpx.TransportError as e:
                if attempt < max_attempts:
                    delay = self._backoff_delay(attempt)
                    logger.warning(f"AI request error (attempt {attempt}/{max_attempts}), retrying in {delay:.2f}s: {e}")
                    await asyncio.sleep(delay)
                    continue
                raise TransientServiceError(f"AI request failed: {e}") from e

            if response.status_code in retry_statuses and attempt < max_attempts:
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"AI request returned {response.status_code} "
                    f"(attempt {attempt}/{max_attempts}), retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise TransientServiceError("AI request retries exhausted")

    def _extract_content(self, result: dict) -> str | None:
        """Extract text content from a generateContent response."""
        candidates = result.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
        return text or None

    async def _call_gemini(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_output_tokens: int = 1024,
    ) -> str | None:
        """
        Send a prompt, walking the model candidates until one answers.

        Returns:
            Model response text, or None when nothing usable came back
        """
        if not self.settings.gemini_api_key:
            logger.debug("Gemini API key not configured, skipping AI call")
            return None

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "topP": 0.95,
                "topK": 32,
                "maxOutputTokens": max_output_tokens,
            },
        }

        for model in self.settings.gemini_models:
            try:
                response = await self._post_with_retry(f"/{model}:generateContent", payload)
            except TransientServiceError as e:
                logger.error(f"Gemini request failed for model '{model}': {e}")
                continue

            if response.status_code == 404:
                logger.warning(f"Gemini model '{model}' unavailable, trying next candidate")
                continue
            if response.is_error:
                logger.error(f"Gemini API error for model '{model}': {response.status_code} {response.text[:200]}")
                return None

            try:
                text = self._extract_content(response.json())
            except ValueError as e:
                logger.warning(f"Gemini model '{model}' returned invalid JSON: {e}")
                continue
            if text:
                return text
            logger.warning(f"Gemini model '{model}' returned empty content")

        logger.error(f"Gemini request failed: all model candidates exhausted {self.settings.gemini_models}")
        return None

    # =========================================================================
    # QUESTION GENERATION
    # =========================================================================

    async def generate_questions(
        self,
        profile: CandidateProfile,
        config: InterviewConfiguration,
    ) -> list[QuestionDraft] | None:
        """Ask for a complete, ordered question plan."""
        prompt = self.interviewer_prompts.generate_questions_prompt(profile, config)
        data = parse_json_from_text(
            await self._call_gemini(prompt, temperature=0.7, max_output_tokens=1024)
        )
        if not data or not isinstance(data.get("questions"), list):
            return None

        try:
            return [QuestionDraft.model_validate(item) for item in data["questions"]]
        except SchemaError as e:
            logger.warning(f"AI question plan failed validation: {e}")
            return None

    # =========================================================================
    # ANSWER EVALUATION
    # =========================================================================

    async def evaluate_answer(
        self,
        question: InterviewQuestion,
        answer: str,
        transcript: list[ChatMessage],
    ) -> EvaluationResult | None:
        """Score one answer on a 0-10 scale."""
        prompt = self.evaluator_prompts.evaluate_answer_prompt(question, answer, transcript)
        data = parse_json_from_text(
            await self._call_gemini(prompt, temperature=0.2, max_output_tokens=512)
        )
        if not data:
            return None

        try:
            return EvaluationResult.model_validate(data)
        except SchemaError as e:
            logger.warning(f"AI evaluation failed validation: {e}")
            return None

    # =========================================================================
    # SUMMARY
    # =========================================================================

    async def summarize(
        self,
        profile: CandidateProfile,
        questions: list[InterviewQuestion],
        answers: list[AnswerRecord],
    ) -> SummaryDraft | None:
        """Summarize a completed interview."""
        prompt = self.report_prompts.summarize_prompt(profile, questions, answers)
        data = parse_json_from_text(
            await self._call_gemini(prompt, temperature=0.3, max_output_tokens=1024)
        )
        if not data:
            return None

        try:
            return SummaryDraft.model_validate(data)
        except SchemaError as e:
            logger.warning(f"AI summary failed validation: {e}")
            return None
