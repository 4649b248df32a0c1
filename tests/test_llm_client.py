import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from app.core.errors import ConfigurationError, UpstreamError
from app.services.llm_client import LLMClient

REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")


class FakeCompletions:
    def __init__(self, outcome):
        self.outcome = outcome
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def client_returning(outcome):
    llm = LLMClient(api_key="key", base_url="https://api.groq.com/openai/v1", default_model="gemma2-9b-it")
    completions = FakeCompletions(outcome)
    llm._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return llm, completions


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def status_error(code, message):
    response = httpx.Response(code, request=REQUEST)
    return openai.APIStatusError(message, response=response, body=None)


def test_generate_sends_chat_completion_request():
    llm, completions = client_returning(completion("[]"))

    assert asyncio.run(llm.generate("hi", temperature=0.3, max_tokens=100)) == "[]"
    assert completions.kwargs == {
        "model": "gemma2-9b-it",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0.3,
        "max_tokens": 100,
    }


def test_explicit_model_overrides_default():
    llm, completions = client_returning(completion("ok"))

    asyncio.run(llm.generate("hi", model="llama-3.3-70b-versatile"))

    assert completions.kwargs["model"] == "llama-3.3-70b-versatile"


def test_empty_content_is_an_upstream_error():
    llm, _ = client_returning(completion(""))

    with pytest.raises(UpstreamError, match="No content generated"):
        asyncio.run(llm.generate("hi"))


@pytest.mark.parametrize(
    "error, transient",
    [
        (openai.APITimeoutError(request=REQUEST), True),
        (openai.APIConnectionError(request=REQUEST), True),
        (status_error(429, "rate limited"), True),
        (status_error(503, "over capacity"), True),
        (status_error(400, "model not found"), False),
    ],
)
def test_provider_errors_are_mapped(error, transient):
    llm, _ = client_returning(error)

    with pytest.raises(UpstreamError) as info:
        asyncio.run(llm.generate("hi"))

    assert info.value.transient is transient


def test_status_error_keeps_upstream_details():
    llm, _ = client_returning(status_error(400, "model not found"))

    with pytest.raises(UpstreamError) as info:
        asyncio.run(llm.generate("hi"))

    assert info.value.upstream_status == 400
    assert "model not found" in info.value.message


def test_missing_key_is_a_configuration_error():
    llm = LLMClient(api_key=None, base_url="https://api.groq.com/openai/v1", default_model="gemma2-9b-it")

    assert not llm.configured
    with pytest.raises(ConfigurationError):
        asyncio.run(llm.generate("hi"))
