import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

from app.core.errors import ConfigurationError, ParseError, PlaceholderDetected, UpstreamError, ValidationError
from app.schemas.quiz import GenerationRequest, Question
from app.services.llm_client import LLMClient
from app.services.prompts import build_quiz_prompt
from app.services.quiz_formatter import contains_placeholders, format_questions
from app.services.quiz_parser import parse_questions
from app.services.retry import retry_operation

logger = logging.getLogger(__name__)


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def _to_int(value: Any) -> Optional[int]:
    try:
        number = float(value)
        return int(number) if math.isfinite(number) else None
    except (TypeError, ValueError, OverflowError):
        return None


def resolve_question_count(value: Any, default: int, maximum: int) -> int:
    """Non-numeric input falls back to `default`; the result is clamped to [1, maximum]."""
    count = _to_int(value)
    if count is None:
        count = default
    return max(1, min(count, maximum))


def resolve_time_per_question(value: Any, default: int) -> int:
    seconds = _to_int(value)
    return seconds if seconds and seconds > 0 else default


def validate_generation_request(payload: GenerationRequest) -> None:
    details = {
        "courseId": _present(payload.courseId),
        "numberOfQuestions": _present(payload.numberOfQuestions),
        "difficulty": _present(payload.difficulty),
    }
    if not all(details.values()):
        logger.warning("Rejected quiz request, missing fields: %s", [k for k, ok in details.items() if not ok])
        raise ValidationError(details=details)


@dataclass
class Attempt:
    number: int
    model: str
    temperature: float


@dataclass
class GenerationResult:
    questions: List[Question]
    model: str
    attempts: int
    strategy: Optional[str] = None


class QuizGenerator:
    """
    Drives one quiz generation through its attempts.

    Attempt 0 uses the default model; every later attempt switches to the
    fallback model. Within an attempt, transient upstream errors are retried
    with exponential backoff. An attempt fails on an upstream error, on output
    with no recoverable question structure, or on placeholder content.
    """

    def __init__(
        self,
        llm: LLMClient,
        default_model: str,
        fallback_model: str,
        max_attempts: int = 2,
        backoff_retries: int = 2,
        backoff_initial_delay: float = 1.0,
        temperature: float = 0.3,
        fallback_temperature: float = 0.5,
        max_tokens: int = 2048,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.llm = llm
        self.default_model = default_model
        self.fallback_model = fallback_model
        self.max_attempts = max(1, max_attempts)
        self.backoff_retries = max(1, backoff_retries)
        self.backoff_initial_delay = backoff_initial_delay
        self.temperature = temperature
        self.fallback_temperature = fallback_temperature
        self.max_tokens = max_tokens
        self.sleep = sleep

    @classmethod
    def from_settings(cls, llm: LLMClient, settings) -> "QuizGenerator":
        return cls(
            llm,
            default_model=settings.LLM_DEFAULT_MODEL,
            fallback_model=settings.LLM_FALLBACK_MODEL,
            max_attempts=settings.QUIZ_MAX_ATTEMPTS,
            backoff_retries=settings.QUIZ_BACKOFF_RETRIES,
            backoff_initial_delay=settings.QUIZ_BACKOFF_INITIAL_DELAY,
            temperature=settings.QUIZ_TEMPERATURE,
            fallback_temperature=settings.QUIZ_FALLBACK_TEMPERATURE,
            max_tokens=settings.QUIZ_MAX_TOKENS,
        )

    @property
    def configured(self) -> bool:
        return self.llm.configured

    def ensure_configured(self) -> None:
        if not self.configured:
            logger.error("LLM API key is not configured")
            raise ConfigurationError(error="API key not configured")

    def attempt_for(self, number: int) -> Attempt:
        if number == 0:
            return Attempt(number, self.default_model, self.temperature)
        return Attempt(number, self.fallback_model, self.fallback_temperature)

    async def _attempt(self, attempt: Attempt, prompt: str, count: int, time_per_question: int) -> GenerationResult:
        raw = await retry_operation(
            lambda: self.llm.generate(
                prompt,
                model=attempt.model,
                temperature=attempt.temperature,
                max_tokens=self.max_tokens,
            ),
            max_retries=self.backoff_retries,
            initial_delay=self.backoff_initial_delay,
            sleep=self.sleep,
        )

        outcome = parse_questions(raw)
        if not outcome.ok:
            raise ParseError()
        if contains_placeholders(outcome.questions):
            raise PlaceholderDetected()

        questions = format_questions(outcome.questions, count, time_per_question)
        if not questions:
            raise ParseError("No valid questions could be formatted")

        return GenerationResult(questions, attempt.model, attempt.number + 1, outcome.strategy)

    async def generate(self, course_name: str, count: int, difficulty: str, time_per_question: int) -> GenerationResult:
        self.ensure_configured()
        logger.info('Generating %d %s questions for "%s"', count, difficulty, course_name)
        prompt = build_quiz_prompt(course_name, count, difficulty)
        started = time.monotonic()

        last_error: Optional[Exception] = None
        for number in range(self.max_attempts):
            attempt = self.attempt_for(number)
            logger.info("Attempt %d/%d using model %s", number + 1, self.max_attempts, attempt.model)
            try:
                result = await self._attempt(attempt, prompt, count, time_per_question)
            except (UpstreamError, ParseError, PlaceholderDetected) as e:
                logger.warning("Attempt %d with %s failed: %s", number + 1, attempt.model, e.message)
                last_error = e
                continue

            logger.info(
                "Generated %d questions with %s in %.2fs",
                len(result.questions),
                result.model,
                time.monotonic() - started,
            )
            return result

        logger.error("Quiz generation exhausted %d attempts in %.2fs", self.max_attempts, time.monotonic() - started)
        if isinstance(last_error, UpstreamError):
            raise last_error
        raise ParseError("Unable to generate valid questions", error=getattr(last_error, "message", None))
