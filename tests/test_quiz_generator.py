import asyncio

import pytest

from app.core.errors import ConfigurationError, ParseError, UpstreamError, ValidationError
from app.schemas.quiz import GenerationRequest
from app.services.quiz_generator import (
    resolve_question_count,
    resolve_time_per_question,
    validate_generation_request,
)
from fakes import (
    ALGORITHM_QUESTIONS,
    DEFAULT_MODEL,
    FALLBACK_MODEL,
    PLACEHOLDER_QUESTIONS,
    FakeLLM,
    make_generator,
    quiz_output,
    timeout_error,
)


def generate(generator, count=5):
    return asyncio.run(generator.generate("Algorithms", count, "medium", 30))


@pytest.mark.parametrize(
    "value, expected",
    [(5, 5), ("7", 7), (3.9, 3), (0, 1), (-4, 1), (50, 10), ("many", 5), (None, 5), ("nan", 5)],
)
def test_resolve_question_count(value, expected):
    assert resolve_question_count(value, default=5, maximum=10) == expected


@pytest.mark.parametrize("value, expected", [(45, 45), ("20", 20), (0, 30), (None, 30), ("soon", 30)])
def test_resolve_time_per_question(value, expected):
    assert resolve_time_per_question(value, default=30) == expected


def test_validation_reports_missing_fields():
    with pytest.raises(ValidationError) as info:
        validate_generation_request(GenerationRequest(courseId="abc", numberOfQuestions=5, difficulty="  "))

    assert info.value.status_code == 400
    assert info.value.details == {"courseId": True, "numberOfQuestions": True, "difficulty": False}


def test_first_attempt_uses_default_model():
    llm = FakeLLM(quiz_output())

    result = generate(make_generator(llm))

    assert result.model == DEFAULT_MODEL
    assert result.attempts == 1
    assert result.strategy == "array_span"
    assert len(result.questions) == 5
    assert llm.calls[0]["temperature"] == 0.3
    assert '"Algorithms"' in llm.calls[0]["prompt"]


def test_transient_failures_exhaust_backoff_then_fall_back():
    llm = FakeLLM(timeout_error(), timeout_error(), quiz_output())

    result = generate(make_generator(llm))

    assert llm.models == [DEFAULT_MODEL, DEFAULT_MODEL, FALLBACK_MODEL]
    assert result.model == FALLBACK_MODEL
    assert result.attempts == 2
    assert llm.calls[2]["temperature"] == 0.5


def test_transient_failure_recovered_within_backoff():
    llm = FakeLLM(timeout_error(), quiz_output())

    result = generate(make_generator(llm))

    assert result.model == DEFAULT_MODEL
    assert llm.models == [DEFAULT_MODEL, DEFAULT_MODEL]


def test_placeholder_output_triggers_fallback():
    llm = FakeLLM(quiz_output(PLACEHOLDER_QUESTIONS), quiz_output())

    result = generate(make_generator(llm))

    assert result.model == FALLBACK_MODEL
    assert result.questions[0].question == ALGORITHM_QUESTIONS[0]["question"]


def test_unparseable_output_on_every_attempt_is_a_parse_error():
    llm = FakeLLM("no json here", "still nothing")

    with pytest.raises(ParseError) as info:
        generate(make_generator(llm))

    assert info.value.status_code == 422
    assert llm.models == [DEFAULT_MODEL, FALLBACK_MODEL]


def test_upstream_failure_on_last_attempt_is_surfaced():
    permanent = UpstreamError("LLM API error: invalid model", upstream_status=400)
    llm = FakeLLM("garbage", permanent)

    with pytest.raises(UpstreamError) as info:
        generate(make_generator(llm))

    assert info.value.status_code == 500
    assert info.value.upstream_status == 400


def test_unconfigured_client_fails_before_any_call():
    llm = FakeLLM(configured=False)

    with pytest.raises(ConfigurationError):
        generate(make_generator(llm))
    assert llm.calls == []


def test_requested_count_trims_output():
    result = generate(make_generator(FakeLLM(quiz_output())), count=3)

    assert [q.id for q in result.questions] == [1, 2, 3]
