"""
Recover a list of question objects from free-form model output.

The model is asked for a bare JSON array but regularly wraps it in code
fences, leaves trailing commas, forgets to quote keys or uses single quotes.
`parse_questions` runs a fixed sequence of increasingly aggressive repair
strategies and stops at the first one that yields at least one object.
"""
import json
import logging
import re
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json|javascript|js)?", re.IGNORECASE)
CONTROL_WHITESPACE_RE = re.compile(r"[\n\r\t]")
ARRAY_SPAN_RE = re.compile(r"(\[\s*\{.*\}\s*,?\s*\])", re.DOTALL)
BRACKET_CONTENT_RE = re.compile(r"\[(.*)\]", re.DOTALL)
UNQUOTED_KEY_RE = re.compile(r"([{,]\s*)['\"]?([A-Za-z_][A-Za-z0-9_]*)['\"]?\s*:")
SINGLE_QUOTED_VALUE_RE = re.compile(r"([:\[,]\s*)'([^']*)'")
TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
QUESTION_OBJECT_RE = re.compile(r"\{[^{}]*question[^{}]*options[^{}]*correctAnswer[^{}]*\}")


class ParseOutcome(NamedTuple):
    questions: List[Any]
    strategy: Optional[str]

    @property
    def ok(self) -> bool:
        return bool(self.questions)


def clean_model_output(raw: str) -> str:
    cleaned = FENCE_RE.sub("", raw)
    cleaned = CONTROL_WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def quote_keys(text: str) -> str:
    return UNQUOTED_KEY_RE.sub(r'\1"\2":', text)


def quote_single_quoted_values(text: str) -> str:
    return SINGLE_QUOTED_VALUE_RE.sub(lambda m: m.group(1) + json.dumps(m.group(2)), text)


def strip_trailing_commas(text: str) -> str:
    return TRAILING_COMMA_RE.sub(r"\1", text)


def _load_list(text: str) -> Optional[List[Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, list) else None


def _load_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def parse_array_span(text: str) -> Optional[List[Any]]:
    """Parse the outermost `[{...}]` span, quoting bare keys if needed."""
    match = ARRAY_SPAN_RE.search(text)
    span = match.group(1) if match else text

    # repairs rewrite string contents too, so only apply them to invalid JSON
    for candidate in (span, strip_trailing_commas(span), strip_trailing_commas(quote_keys(span))):
        parsed = _load_list(candidate)
        if parsed is not None:
            return parsed
    return None


def parse_bracket_contents(text: str) -> Optional[List[Any]]:
    """Rebuild the array from everything between the first `[` and last `]`."""
    match = BRACKET_CONTENT_RE.search(text)
    if not match:
        return None
    repaired = "[" + quote_single_quoted_values(quote_keys(match.group(1))) + "]"
    return _load_list(strip_trailing_commas(repaired))


def parse_question_objects(text: str) -> Optional[List[Any]]:
    """Salvage individual question objects; unparseable ones are dropped."""
    questions = []
    for candidate in QUESTION_OBJECT_RE.findall(text):
        obj = _load_object(candidate)
        if obj is None:
            obj = _load_object(strip_trailing_commas(quote_single_quoted_values(quote_keys(candidate))))
        if obj is None:
            logger.debug("Dropping unparseable question object: %s", candidate[:80])
            continue
        questions.append(obj)
    return questions or None


PARSE_STRATEGIES: Tuple[Tuple[str, Callable[[str], Optional[List[Any]]]], ...] = (
    ("array_span", parse_array_span),
    ("bracket_contents", parse_bracket_contents),
    ("question_objects", parse_question_objects),
)


def parse_questions(raw: Optional[str]) -> ParseOutcome:
    """Run the repair strategies in order. Never raises; an empty outcome means failure."""
    text = clean_model_output(raw or "")
    if not text:
        return ParseOutcome([], None)

    for name, strategy in PARSE_STRATEGIES:
        questions = strategy(text)
        if questions:
            logger.info("Parsed %d questions with the %s strategy", len(questions), name)
            return ParseOutcome(questions, name)
        logger.debug("Parse strategy %s found nothing", name)

    logger.warning("No question structure recoverable from model output: %s", text[:200])
    return ParseOutcome([], None)
