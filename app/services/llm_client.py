import asyncio
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from app.core.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = {429, 503}


class LLMClient:
    """Chat-completion client for any OpenAI-compatible provider (Groq by default).

    Outbound calls share one semaphore, so at most `max_concurrency`
    generations are in flight per process.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        default_model: str,
        timeout: float = 180.0,
        max_concurrency: int = 4,
        transport_retries: int = 0,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.default_model = default_model
        self.timeout = timeout
        self.transport_retries = transport_retries
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._client: Optional[AsyncOpenAI] = None

    @classmethod
    def from_settings(cls, settings) -> "LLMClient":
        return cls(
            api_key=settings.LLM_API_KEY,
            base_url=settings.LLM_BASE_URL,
            default_model=settings.LLM_DEFAULT_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            max_concurrency=settings.LLM_MAX_CONCURRENCY,
            transport_retries=settings.LLM_TRANSPORT_RETRIES,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if not self.configured:
            raise ConfigurationError(error="API key not configured")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=self.transport_retries,
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        model = model or self.default_model
        logger.info("Calling %s with prompt: %s...", model, prompt[:100])

        async with self._semaphore:
            try:
                completion = await self.client.chat.completions.create(
                    model=model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
            except openai.APITimeoutError as e:
                raise UpstreamError("LLM API error: ETIMEDOUT request timed out", transient=True) from e
            except openai.APIConnectionError as e:
                raise UpstreamError(f"LLM API error: ECONNRESET {e}", transient=True) from e
            except openai.APIStatusError as e:
                raise UpstreamError(
                    f"LLM API error: {e.message}",
                    upstream_status=e.status_code,
                    transient=e.status_code in TRANSIENT_STATUS_CODES,
                ) from e

        if not completion.choices or not completion.choices[0].message.content:
            raise UpstreamError("No content generated from the API")
        return completion.choices[0].message.content
