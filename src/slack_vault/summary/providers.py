"""Text-generation providers for summaries.

Each provider wraps one vendor SDK behind :class:`TextProvider`. SDK
exceptions are translated into the slack-vault error types so callers
never depend on vendor details.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol

import anthropic
import httpx
import openai
from google import genai
from google.genai import errors as genai_errors

from slack_vault.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SUMMARY_MAX_TOKENS,
    DEFAULT_SUMMARY_TEMPERATURE,
)
from slack_vault.errors import (
    ConfigurationError,
    EmptyResponseError,
    ProviderError,
    TransportError,
)
from slack_vault.logging import get_logger
from slack_vault.summary.prompts import SYSTEM_PROMPT

if TYPE_CHECKING:
    from pydantic import SecretStr

    from slack_vault.config import Settings

log = get_logger("slack_vault.summary.providers")


class TextProvider(Protocol):
    """A backend capable of turning a prompt into generated text."""

    name: str

    async def generate(self, prompt: str) -> str:
        """Return the first completion for ``prompt``."""
        ...


def _status_message(body: object, fallback: str) -> str:
    """Pull the provider-reported message out of an error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return fallback or "Unknown error"


class BaseProvider(ABC):
    """Settings shared by every provider; subclasses own the SDK client."""

    name = "provider"

    def __init__(
        self,
        api_key: str | None,
        model: str,
        *,
        max_tokens: int = DEFAULT_SUMMARY_MAX_TOKENS,
        temperature: float = DEFAULT_SUMMARY_TEMPERATURE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._client: Any = self._create_client(api_key) if api_key else None

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    def _create_client(self, api_key: str) -> Any:
        """Build the vendor SDK client."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the first completion for ``prompt``."""

    def _require_client(self) -> Any:
        if self._client is None:
            raise ConfigurationError(f"{self.name} API key not set")
        return self._client

    def _empty(self) -> EmptyResponseError:
        return EmptyResponseError(f"No response from {self.name}")


class OpenAIProvider(BaseProvider):
    """Chat Completions via ``openai.AsyncOpenAI``."""

    name = "OpenAI"

    def _create_client(self, api_key: str) -> openai.AsyncOpenAI:
        return openai.AsyncOpenAI(api_key=api_key, timeout=self._timeout)

    async def generate(self, prompt: str) -> str:
        client = self._require_client()
        log.debug("provider_request", provider=self.name, model=self._model)
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except openai.APIStatusError as exc:
            raise ProviderError(
                self.name, exc.status_code, _status_message(exc.body, exc.message)
            ) from exc
        except openai.APIError as exc:
            raise TransportError(f"{self.name} request failed: {exc}") from exc

        if not response.choices or not response.choices[0].message.content:
            raise self._empty()
        return str(response.choices[0].message.content)


class AnthropicProvider(BaseProvider):
    """Messages API via ``anthropic.AsyncAnthropic``."""

    name = "Anthropic"

    def _create_client(self, api_key: str) -> anthropic.AsyncAnthropic:
        return anthropic.AsyncAnthropic(api_key=api_key, timeout=self._timeout)

    async def generate(self, prompt: str) -> str:
        client = self._require_client()
        log.debug("provider_request", provider=self.name, model=self._model)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as exc:
            raise ProviderError(
                self.name, exc.status_code, _status_message(exc.body, exc.message)
            ) from exc
        except anthropic.APIError as exc:
            raise TransportError(f"{self.name} request failed: {exc}") from exc

        text = next(
            (block.text for block in response.content if getattr(block, "type", "") == "text"),
            "",
        )
        if not text:
            raise self._empty()
        return str(text)


class GeminiProvider(BaseProvider):
    """generateContent via the async surface of ``google.genai.Client``."""

    name = "Gemini"

    def _create_client(self, api_key: str) -> genai.Client:
        # HttpOptions.timeout is in milliseconds
        return genai.Client(
            api_key=api_key,
            http_options={"timeout": int(self._timeout * 1000)},
        )

    async def generate(self, prompt: str) -> str:
        client = self._require_client()
        log.debug("provider_request", provider=self.name, model=self._model)
        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config={
                    "system_instruction": SYSTEM_PROMPT,
                    "max_output_tokens": self._max_tokens,
                    "temperature": self._temperature,
                },
            )
        except genai_errors.APIError as exc:
            raise ProviderError(
                self.name, exc.code, exc.message or _status_message(exc.details, str(exc))
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{self.name} request failed: {exc}") from exc

        if not response.text:
            raise self._empty()
        return str(response.text)


def _secret(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value is not None else None


def build_provider(settings: Settings) -> TextProvider:
    """Instantiate the provider selected by ``settings.ai_provider``."""
    common: dict[str, Any] = {
        "max_tokens": settings.summary_max_tokens,
        "temperature": settings.summary_temperature,
        "timeout": settings.request_timeout,
    }
    match settings.ai_provider:
        case "openai":
            return OpenAIProvider(
                _secret(settings.openai_api_key), settings.openai_model, **common
            )
        case "anthropic":
            return AnthropicProvider(
                _secret(settings.anthropic_api_key), settings.anthropic_model, **common
            )
        case "gemini":
            return GeminiProvider(
                _secret(settings.gemini_api_key), settings.gemini_model, **common
            )
        case _:
            raise ConfigurationError(f"Unknown AI provider: {settings.ai_provider}")
