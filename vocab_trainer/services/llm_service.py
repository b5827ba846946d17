"""LLM service with provider fallback."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx
from loguru import logger
from tenacity import before_sleep_log, retry, stop_after_attempt, wait_exponential

from vocab_trainer.config import settings


@dataclass
class LLMResult:
    """Structured response returned by the :class:`LLMService`."""

    provider: str
    model: str
    content: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    raw_response: Dict[str, Any]


class LLMProviderError(RuntimeError):
    """Raised when a provider returns an error response."""


class BaseLLMProvider(Protocol):
    """Protocol shared by provider implementations."""

    name: str

    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:  # pragma: no cover - interface definition
        """Generate a chat completion."""


_provider_retry = retry(
    stop=stop_after_attempt(max(1, settings.LLM_MAX_RETRIES)),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    before_sleep=before_sleep_log(logger, "WARNING"),
    reraise=True,
)


@dataclass
class OpenAIProvider:
    """Generate chat completions using the OpenAI API."""

    api_key: str
    model: str
    base_url: str = "https://api.openai.com/v1"
    request_timeout: float = 25.0

    name: str = "openai"

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if settings.OPENAI_ORG_ID:
            headers["OpenAI-Organization"] = settings.OPENAI_ORG_ID
        return headers

    @_provider_retry
    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "messages": list(messages),
            "temperature": kwargs.get("temperature", 0.7),
        }
        if "response_format" in kwargs:
            payload["response_format"] = kwargs["response_format"]
        if "max_tokens" in kwargs:
            payload["max_tokens"] = kwargs["max_tokens"]

        with httpx.Client(base_url=self.base_url, timeout=self.request_timeout) as client:
            response = client.post("/chat/completions", json=payload, headers=self._build_headers())

        if response.status_code >= 400:
            logger.error("OpenAI returned error", status=response.status_code, body=response.text)
            raise LLMProviderError(f"OpenAI error {response.status_code}")

        data = response.json()
        choice = data.get("choices", [{}])[0]
        content = choice.get("message", {}).get("content")
        if not content:
            raise LLMProviderError("OpenAI response did not include content")

        usage = data.get("usage", {})
        return LLMResult(
            provider=self.name,
            model=payload["model"],
            content=content.strip(),
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", usage.get("prompt_tokens", 0) + usage.get("completion_tokens", 0)),
            raw_response=data,
        )


@dataclass
class AnthropicProvider:
    """Generate chat completions using the Anthropic API."""

    api_key: str
    model: str
    base_url: str = "https://api.anthropic.com/v1"
    request_timeout: float = 25.0

    name: str = "anthropic"

    @_provider_retry
    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "max_tokens": kwargs.get("max_tokens", 512),
            "temperature": kwargs.get("temperature", 0.7),
            "messages": [
                {"role": message["role"], "content": message["content"]}
                for message in messages
            ],
        }
        if "system" in kwargs:
            payload["system"] = kwargs["system"]

        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

        with httpx.Client(base_url=self.base_url, timeout=self.request_timeout) as client:
            response = client.post("/messages", json=payload, headers=headers)

        if response.status_code >= 400:
            logger.error("Anthropic returned error", status=response.status_code, body=response.text)
            raise LLMProviderError(f"Anthropic error {response.status_code}")

        data = response.json()
        chunks = [chunk.get("text", "") for chunk in data.get("content", []) if chunk.get("type") == "text"]
        content = "\n".join(filter(None, chunks)).strip()
        if not content:
            raise LLMProviderError("Anthropic response did not include content")

        usage = data.get("usage", {})
        prompt_tokens = usage.get("input_tokens", 0)
        completion_tokens = usage.get("output_tokens", 0)
        return LLMResult(
            provider=self.name,
            model=payload["model"],
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            raw_response=data,
        )


@dataclass
class GeminiProvider:
    """Generate content using the Google Gemini API."""

    api_key: str
    model: str
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    request_timeout: float = 25.0

    name: str = "gemini"

    @staticmethod
    def _to_contents(messages: Sequence[Dict[str, str]]) -> List[Dict[str, Any]]:
        return [
            {
                "role": "model" if message["role"] == "assistant" else "user",
                "parts": [{"text": message["content"]}],
            }
            for message in messages
        ]

    @_provider_retry
    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:
        model = kwargs.get("model", self.model)
        generation_config: Dict[str, Any] = {"temperature": kwargs.get("temperature", 0.7)}
        if "max_tokens" in kwargs:
            generation_config["maxOutputTokens"] = kwargs["max_tokens"]
        if kwargs.get("json_mode"):
            generation_config["responseMimeType"] = "application/json"

        payload: Dict[str, Any] = {
            "contents": self._to_contents(messages),
            "generationConfig": generation_config,
        }
        if "system" in kwargs:
            payload["systemInstruction"] = {"parts": [{"text": kwargs["system"]}]}

        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        with httpx.Client(base_url=self.base_url, timeout=self.request_timeout) as client:
            response = client.post(f"/models/{model}:generateContent", json=payload, headers=headers)

        if response.status_code >= 400:
            logger.error("Gemini returned error", status=response.status_code, body=response.text)
            raise LLMProviderError(f"Gemini error {response.status_code}")

        data = response.json()
        candidates = data.get("candidates") or [{}]
        parts = candidates[0].get("content", {}).get("parts", [])
        content = "".join(part.get("text", "") for part in parts).strip()
        if not content:
            raise LLMProviderError("Gemini response did not include content")

        usage = data.get("usageMetadata", {})
        prompt_tokens = usage.get("promptTokenCount", 0)
        completion_tokens = usage.get("candidatesTokenCount", 0)
        return LLMResult(
            provider=self.name,
            model=model,
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=usage.get("totalTokenCount", prompt_tokens + completion_tokens),
            raw_response=data,
        )


class LLMService:
    """Coordinate chat completion requests across providers."""

    def __init__(
        self,
        providers: Optional[Sequence[BaseLLMProvider]] = None,
        primary: Optional[str] = None,
        secondary: Optional[str] = None,
    ) -> None:
        if providers is not None:
            self._providers = list(providers)
        else:
            self._providers = self._build_default_providers()
        if not self._providers:
            raise ValueError("LLMService requires at least one provider")

        self._providers_by_name = {provider.name: provider for provider in self._providers}
        resolved_primary = primary or settings.PRIMARY_LLM_PROVIDER
        resolved_secondary = secondary or settings.SECONDARY_LLM_PROVIDER
        self._provider_order = self._build_order(resolved_primary, resolved_secondary)

    def _build_default_providers(self) -> List[BaseLLMProvider]:
        timeout = settings.LLM_REQUEST_TIMEOUT_SECONDS
        provider_list: List[BaseLLMProvider] = []
        if settings.GEMINI_API_KEY:
            provider_list.append(
                GeminiProvider(
                    api_key=settings.GEMINI_API_KEY,
                    model=settings.GEMINI_MODEL,
                    base_url=str(settings.GEMINI_API_BASE or "https://generativelanguage.googleapis.com/v1beta"),
                    request_timeout=timeout,
                )
            )
        if settings.OPENAI_API_KEY:
            provider_list.append(
                OpenAIProvider(
                    api_key=settings.OPENAI_API_KEY,
                    model=settings.OPENAI_MODEL,
                    base_url=str(settings.OPENAI_API_BASE or "https://api.openai.com/v1"),
                    request_timeout=timeout,
                )
            )
        if settings.ANTHROPIC_API_KEY:
            provider_list.append(
                AnthropicProvider(
                    api_key=settings.ANTHROPIC_API_KEY,
                    model=settings.ANTHROPIC_MODEL,
                    base_url=str(settings.ANTHROPIC_API_BASE or "https://api.anthropic.com/v1"),
                    request_timeout=timeout,
                )
            )
        return provider_list

    def _build_order(self, primary: Optional[str], secondary: Optional[str]) -> List[BaseLLMProvider]:
        ordered: List[BaseLLMProvider] = []
        seen: set[str] = set()

        def maybe_add(name: Optional[str]) -> None:
            if not name:
                return
            provider = self._providers_by_name.get(name)
            if provider and provider.name not in seen:
                ordered.append(provider)
                seen.add(provider.name)

        maybe_add(primary)
        maybe_add(secondary)
        for provider in self._providers:
            if provider.name in seen:
                continue
            ordered.append(provider)
        return ordered

    def generate_chat_completion(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 512,
        json_mode: bool = False,
        system_prompt: Optional[str] = None,
    ) -> LLMResult:
        """Generate a chat completion using the configured providers."""

        errors: List[str] = []
        for provider in self._provider_order:
            payload_kwargs: Dict[str, Any] = {
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
            provider_messages = messages
            if provider.name == "openai":
                if json_mode:
                    payload_kwargs["response_format"] = {"type": "json_object"}
                if system_prompt:
                    provider_messages = [{"role": "system", "content": system_prompt}, *messages]
            else:
                if system_prompt:
                    payload_kwargs["system"] = system_prompt
                if json_mode and provider.name == "gemini":
                    payload_kwargs["json_mode"] = True
            try:
                result = provider.generate(provider_messages, **payload_kwargs)
                logger.debug(
                    "LLM provider success",
                    provider=provider.name,
                    tokens=result.total_tokens,
                )
                return result
            except Exception as exc:
                logger.exception("LLM provider failure", provider=provider.name)
                errors.append(f"{provider.name}: {exc}")
                continue
        raise LLMProviderError("; ".join(errors))


__all__ = [
    "AnthropicProvider",
    "GeminiProvider",
    "LLMProviderError",
    "LLMResult",
    "LLMService",
    "OpenAIProvider",
]
