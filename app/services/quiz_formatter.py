import logging
import re
from typing import Any, Iterable, List, Optional

from app.schemas.quiz import Question

logger = logging.getLogger(__name__)

LETTERS = ("A", "B", "C", "D")

OPTION_PREFIX_RE = re.compile(r"^\(?[A-Da-d][.):]\s*")
ANSWER_LETTER_RE = re.compile(r"^[\"']?([A-D])[\"']?[.):]?$")
ANSWER_PREFIXED_RE = re.compile(r"^(?:OPTION\s+|\(?)([A-D])(?:[.):]|$)")

PLACEHOLDER_PATTERNS = (
    re.compile(r"question\s*\d+\s*about", re.IGNORECASE),
    re.compile(r"option\s*[a-d]\s*for\s*question", re.IGNORECASE),
    re.compile(r"\bplaceholder\b", re.IGNORECASE),
    re.compile(r"\bexample\b", re.IGNORECASE),
    re.compile(r"\bsample\b", re.IGNORECASE),
)
BARE_OPTION_RE = re.compile(r"^(?:\(?[A-D][.):]\s*)?option\s*[A-D]\.?$", re.IGNORECASE)


def _option_values(raw_options: Any) -> List[Any]:
    if isinstance(raw_options, list):
        return raw_options
    if isinstance(raw_options, dict):
        # {"A": "...", "B": "..."} style
        return [raw_options[key] for key in sorted(raw_options)]
    return []


def _raw_answer(raw: dict) -> Any:
    for key in ("correctAnswer", "correct_answer", "answer"):
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def contains_placeholders(questions: Iterable[Any]) -> bool:
    """True when any question or option looks like lazy filler content."""
    for item in questions:
        if not isinstance(item, dict):
            continue
        options = [opt for opt in _option_values(item.get("options")) if isinstance(opt, str)]
        texts = options + ([item["question"]] if isinstance(item.get("question"), str) else [])

        for text in texts:
            if any(pattern.search(text) for pattern in PLACEHOLDER_PATTERNS):
                logger.warning("Placeholder content detected: %s", text[:80])
                return True
        for option in options:
            if BARE_OPTION_RE.match(option.strip()):
                logger.warning("Bare placeholder option detected: %s", option)
                return True
    return False


def strip_option_prefix(text: str) -> str:
    """Remove letter prefixes such as "A. ", "b) " or "(C) ", including doubled ones."""
    previous = None
    while previous != text:
        previous = text
        text = OPTION_PREFIX_RE.sub("", text, count=1).strip()
    return text


def normalize_options(raw_options: Any) -> List[str]:
    options = [opt.strip() for opt in _option_values(raw_options) if isinstance(opt, str) and opt.strip()]
    while len(options) < len(LETTERS):
        options.append(f"Option {LETTERS[len(options)]}")
    options = options[: len(LETTERS)]
    return [f"{letter}. {strip_option_prefix(opt)}" for letter, opt in zip(LETTERS, options)]


def parse_correct_answer(raw_answer: Any, options: List[str]) -> Optional[str]:
    """Reduce "A", "a.", "'B'", "C)", "Option D" or the option text itself to a letter."""
    if raw_answer is None or isinstance(raw_answer, bool):
        return None

    answer = str(raw_answer).strip()
    upper = answer.upper()
    match = ANSWER_LETTER_RE.match(upper)
    if match:
        return match.group(1)

    bare = strip_option_prefix(answer).lower()
    for letter, option in zip(LETTERS, options):
        if bare and strip_option_prefix(option).lower() == bare:
            return letter

    match = ANSWER_PREFIXED_RE.match(upper)
    return match.group(1) if match else None


def format_question(raw: dict, index: int, time_per_question: int) -> Question:
    text = raw.get("question")
    question_text = (text.strip() if isinstance(text, str) else "") or f"Question {index + 1}"
    options = normalize_options(raw.get("options"))

    correct_answer = parse_correct_answer(_raw_answer(raw), options)
    if correct_answer is None:
        # rotate so a batch of unanswerable items doesn't all point at A
        correct_answer = LETTERS[index % len(LETTERS)]
        logger.warning('Assigned deterministic answer %s for question: "%s..."', correct_answer, question_text[:30])

    return Question(
        id=index + 1,
        question=question_text,
        options=options,
        correctAnswer=correct_answer,
        timePerQuestion=time_per_question,
    )


def format_questions(raw_questions: List[Any], count: int, time_per_question: int) -> List[Question]:
    """Normalise parsed items into canonical questions, at most `count` of them.

    Items are handled independently; a malformed one is skipped rather than
    failing the batch. Ids are contiguous from 1 over the kept items.
    """
    formatted: List[Question] = []
    for position, raw in enumerate(raw_questions):
        if len(formatted) == count:
            logger.info("Model returned %d questions, trimming to %d", len(raw_questions), count)
            break
        if not isinstance(raw, dict):
            logger.warning("Skipping invalid question at index %d: %r", position, raw)
            continue
        try:
            formatted.append(format_question(raw, len(formatted), time_per_question))
        except (TypeError, ValueError) as e:
            logger.error("Error formatting question %d: %s", position + 1, e)

    if 0 < len(formatted) < count:
        logger.warning("Model under-produced: %d of %d requested questions", len(formatted), count)
    return formatted
