import logging
import httpx
import time
import random
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from docchat.config.settings import settings, LLMConfig
from docchat.core.exceptions import GenerationError
from docchat.core.generate.prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "I apologize, but I couldn't generate a response."

# Failures worth another attempt against the same model
RETRYABLE = (httpx.HTTPError, KeyError, IndexError, ValueError)

class TextGenerator(ABC):
    @abstractmethod
    def generate(self, query: str, context_blocks: List[str]) -> str:
        pass

class RateLimited(Exception):
    pass

class LLMClient(TextGenerator):
    """
    OpenAI-compatible chat completions client (OpenRouter by default).
    Retries rate limits and transport errors with jittered backoff,
    then tries the fallback model once.
    """

    def __init__(self, config: Optional[LLMConfig] = None, api_key: Optional[str] = None):
        self.config = config or settings.llm
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.endpoint = self.config.base_url.rstrip("/") + "/chat/completions"

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "X-Title": "DocChat"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def generate(self, query: str, context_blocks: List[str]) -> str:
        messages = PromptBuilder.build_messages(query, context_blocks)
        return self.complete(messages)

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Sends chat messages and returns the response text.
        Raises GenerationError when both primary and fallback models fail.
        """
        if not self.api_key:
            logger.warning("No OpenRouter API key configured; requests will be rejected")

        models = [self.config.model]
        if self.config.fallback_model and self.config.fallback_model != self.config.model:
            models.append(self.config.fallback_model)

        last_error: Optional[Exception] = None
        for model in models:
            try:
                return self._complete_with_retries(model, messages)
            except GenerationError as e:
                last_error = e
                logger.warning(f"Model {model} gave up: {e}")

        raise GenerationError(f"Failed to generate chat response: {last_error}") from last_error

    def _complete_with_retries(self, model: str, messages: List[Dict[str, str]]) -> str:
        body = {
            "model": model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "stream": False
        }

        attempts = self.config.max_retries
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return self._post(body)
            except (RateLimited, *RETRYABLE) as e:
                last_error = e
                if attempt == attempts:
                    break
                delay = self._backoff(attempt)
                logger.warning(f"{model} attempt {attempt}/{attempts} failed ({e}); sleeping {delay:.2f}s")
                time.sleep(delay)

        raise GenerationError(f"{model} failed after {attempts} attempts: {last_error}") from last_error

    def _post(self, body: Dict[str, Any]) -> str:
        with httpx.Client(timeout=self.config.timeout_seconds) as client:
            response = client.post(self.endpoint, headers=self.headers, json=body)

            if response.status_code == 429:
                raise RateLimited("rate limited (429)")
            response.raise_for_status()

            choice = response.json()["choices"][0]
            return choice["message"].get("content") or EMPTY_RESPONSE

    def _backoff(self, attempt: int) -> float:
        return self.config.retry_base_delay * (2 ** (attempt - 1)) + random.uniform(0, 1)
