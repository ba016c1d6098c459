"""DeepSeek chat client for TG Reporter.

DeepSeek serves an OpenAI-compatible API, so requests go through the openai
SDK pointed at DeepSeek's base URL. Every failed attempt is retried after a
doubling pause (2s, 4s, ...) until the attempts run out.
"""

import os
import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from openai import OpenAI, OpenAIError

from .config import LLMSettings

logger = logging.getLogger(__name__)


DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"
REASONER_MODEL = "deepseek-reasoner"
CHAT_MODEL = "deepseek-chat"

API_KEY_ENV_VARS = ("DEEPSEEK_API_KEY", "OPENAI_API_KEY")


class LLMError(Exception):
    """Raised when the model gave no answer on any attempt."""

    def __init__(self, attempts: int, cause: Optional[Exception] = None):
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"No response from model after {attempts} attempts: {cause}")


@dataclass
class RetryPolicy:
    """How many times to ask and how long to pause between attempts."""

    attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0

    def delay(self, attempt: int) -> float:
        """Pause after failed attempt number ``attempt`` (1-based)."""
        return min(self.base_delay * 2 ** attempt, self.max_delay)


@dataclass
class TokenUsage:
    """Requests made and tokens billed by one client."""

    requests: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def record(self, usage) -> None:
        """Add a response's ``usage`` block; it may be missing."""
        self.requests += 1
        if usage is None:
            return
        self.prompt_tokens += usage.prompt_tokens or 0
        self.completion_tokens += usage.completion_tokens or 0


def resolve_api_key(api_key: Optional[str] = None) -> str:
    """Explicit key, else the first of DEEPSEEK_API_KEY / OPENAI_API_KEY that is set."""
    for candidate in (api_key, *(os.getenv(name) for name in API_KEY_ENV_VARS)):
        if candidate:
            return candidate
    raise ValueError(
        "LLM API key required. Set DEEPSEEK_API_KEY (or OPENAI_API_KEY) "
        "or pass api_key."
    )


class DeepSeekClient:
    """Sends single-turn chat prompts and returns the reply text."""

    def __init__(
        self,
        model: str = REASONER_MODEL,
        api_key: Optional[str] = None,
        base_url: str = DEEPSEEK_BASE_URL,
        timeout: float = 600,
        retry: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            model: Model name, e.g. deepseek-reasoner
            api_key: API key (see ``resolve_api_key``)
            base_url: Any OpenAI-compatible endpoint
            timeout: Per-request timeout in seconds
            retry: Attempt count and backoff
            sleep: Called with the backoff pause between attempts
        """
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self.usage = TokenUsage()
        self._sleep = sleep
        self.client = OpenAI(api_key=resolve_api_key(api_key), base_url=base_url)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> str:
        """
        Ask the model and return its answer.

        Raises:
            LLMError: If every attempt failed
        """
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        last_error: Optional[Exception] = None
        for attempt in range(1, self.retry.attempts + 1):
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    timeout=self.timeout,
                )
            except OpenAIError as e:
                last_error = e
                logger.error(f"Attempt {attempt}/{self.retry.attempts} failed: {e}")
                if attempt < self.retry.attempts:
                    self._sleep(self.retry.delay(attempt))
                continue

            self.usage.record(response.usage)
            return response.choices[0].message.content or ""

        raise LLMError(self.retry.attempts, last_error)


def create_llm_client(settings: LLMSettings, api_key: Optional[str] = None) -> DeepSeekClient:
    """Build a client from the ``llm`` section of the config."""
    return DeepSeekClient(
        model=settings.model,
        api_key=api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        retry=RetryPolicy(attempts=settings.max_retries),
    )
