"""
LLM Client Module
Provides a unified interface for different LLM providers, with an explicit
per-call timeout and a single bounded retry
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

import aiohttp

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base error for a failed model call"""
    pass


class LLMTimeoutError(LLMError):
    """The model did not answer within the configured timeout"""
    pass


class LLMResponseError(LLMError):
    """The provider returned a non-success status or failed outright"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class LLMEmptyResponseError(LLMError):
    """The provider answered with no text"""
    pass


class BaseLLMClient(ABC):
    """Base class for LLM clients"""

    def __init__(self, timeout_seconds: float = 30.0, max_retries: int = 1):
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)

    @abstractmethod
    async def _generate(self,
                        system_prompt: str,
                        user_message: str,
                        response_format: Optional[Dict[str, Any]] = None,
                        temperature: float = 0.7) -> str:
        """Single provider call, without timeout or retry"""
        pass

    async def generate(self,
                       system_prompt: str,
                       user_message: str,
                       response_format: Optional[Dict[str, Any]] = None,
                       temperature: float = 0.7) -> str:
        """Generate a response from the LLM"""
        last_error: Optional[LLMError] = None

        for attempt in range(self.max_retries + 1):
            try:
                text = await asyncio.wait_for(
                    self._generate(system_prompt, user_message, response_format, temperature),
                    timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                last_error = LLMTimeoutError(
                    f"{self.provider_name} did not respond within {self.timeout_seconds}s"
                )
            except LLMError as e:
                last_error = e
            except Exception as e:
                last_error = LLMResponseError(f"{self.provider_name} call failed: {e}")
            else:
                if text and text.strip():
                    return text
                last_error = LLMEmptyResponseError(f"{self.provider_name} returned empty text")

            logger.warning(
                "LLM attempt %d/%d failed: %s",
                attempt + 1, self.max_retries + 1, last_error
            )

        raise last_error

    @property
    def provider_name(self) -> str:
        return type(self).__name__


class GeminiClient(BaseLLMClient):
    """Google Gemini client over the generateContent REST endpoint"""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", **kwargs):
        super().__init__(**kwargs)
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required for the gemini provider")
        self.api_key = api_key
        self.model = model

    async def _generate(self,
                        system_prompt: str,
                        user_message: str,
                        response_format: Optional[Dict[str, Any]] = None,
                        temperature: float = 0.7) -> str:
        generation_config: Dict[str, Any] = {"temperature": temperature}
        if response_format and response_format.get("type") == "json_object":
            generation_config["responseMimeType"] = "application/json"

        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_message}]}],
            "generationConfig": generation_config
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{self.BASE_URL}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise LLMResponseError(f"Gemini error: {error_text[:200]}", status=response.status)
                result = await response.json()

        candidates = result.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


class OpenAIClient(BaseLLMClient):
    """OpenAI API client"""

    def __init__(self, api_key: str, model: str = "gpt-4o", **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.model = model
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI
            # Retries are handled by BaseLLMClient
            self._client = AsyncOpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    async def _generate(self,
                        system_prompt: str,
                        user_message: str,
                        response_format: Optional[Dict[str, Any]] = None,
                        temperature: float = 0.7) -> str:
        client = self._get_client()

        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message}
            ],
            "temperature": temperature
        }

        if response_format and response_format.get("type") == "json_object":
            kwargs["response_format"] = {"type": "json_object"}

        create: Any = client.chat.completions.create
        response: Any = await create(**kwargs)

        return response.choices[0].message.content or ""


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude API client"""

    def __init__(self, api_key: str, model: str = "claude-3-5-sonnet-20241022", **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.model = model
        self._client = None

    def _get_client(self):
        if self._client is None:
            from anthropic import AsyncAnthropic
            self._client = AsyncAnthropic(api_key=self.api_key, max_retries=0)
        return self._client

    async def _generate(self,
                        system_prompt: str,
                        user_message: str,
                        response_format: Optional[Dict[str, Any]] = None,
                        temperature: float = 0.7) -> str:
        client = self._get_client()

        if response_format and response_format.get("type") == "json_object":
            system_prompt += "\n\nIMPORTANT: Respond ONLY with valid JSON, no other text."

        create: Any = client.messages.create
        response: Any = await create(
            model=self.model,
            max_tokens=4096,
            system=system_prompt,
            messages=[
                {"role": "user", "content": user_message}
            ],
            temperature=temperature
        )

        for block in getattr(response, "content", []) or []:
            if getattr(block, "type", None) == "text" and hasattr(block, "text"):
                return block.text

        return ""


class OllamaClient(BaseLLMClient):
    """
    Ollama client for free local LLM inference.
    Requires Ollama to be installed and running locally.
    """

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "llama3.2", **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip('/')
        self.model = model

    async def _generate(self,
                        system_prompt: str,
                        user_message: str,
                        response_format: Optional[Dict[str, Any]] = None,
                        temperature: float = 0.7) -> str:
        prompt = f"{system_prompt}\n\nUser: {user_message}\nAssistant:"

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature
            }
        }

        if response_format and response_format.get("type") == "json_object":
            payload["format"] = "json"

        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{self.base_url}/api/generate",
                json=payload
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise LLMResponseError(f"Ollama error: {error_text[:200]}", status=response.status)

                result = await response.json()
                return result.get("response", "")


MockReply = Union[str, Exception, Callable[[str, str], str]]


class MockLLMClient(BaseLLMClient):
    """
    Scripted LLM client for tests and offline use.
    Replies are consumed in order; the last one repeats. A reply may be a
    string, an exception instance to raise, or a callable taking
    (system_prompt, user_message).
    """

    def __init__(self, replies: Optional[List[MockReply]] = None, delay: float = 0.0, **kwargs):
        kwargs.setdefault("timeout_seconds", 5.0)
        super().__init__(**kwargs)
        self.replies: List[MockReply] = list(replies) if replies else [
            json.dumps({
                "message": "मी तुम्हाला दिव्यांग योजनांबद्दल मदत करतो.",
                "links": [],
                "yojanas": []
            }, ensure_ascii=False)
        ]
        self.delay = delay
        self.call_count = 0
        self.last_system_prompt: Optional[str] = None
        self.last_prompt: Optional[str] = None

    async def _generate(self,
                        system_prompt: str,
                        user_message: str,
                        response_format: Optional[Dict[str, Any]] = None,
                        temperature: float = 0.7) -> str:
        index = min(self.call_count, len(self.replies) - 1)
        self.call_count += 1
        self.last_system_prompt = system_prompt
        self.last_prompt = user_message

        if self.delay:
            await asyncio.sleep(self.delay)

        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(system_prompt, user_message)
        return reply


class LLMClientFactory:
    """Factory for creating LLM clients"""

    @staticmethod
    def create(provider: str = "gemini", **kwargs) -> BaseLLMClient:
        """Create an LLM client based on provider"""
        providers = {
            "gemini": GeminiClient,
            "openai": OpenAIClient,
            "anthropic": AnthropicClient,
            "ollama": OllamaClient,
            "mock": MockLLMClient
        }

        if provider not in providers:
            raise ValueError(f"Unknown LLM provider: {provider}")

        return providers[provider](**kwargs)

    @staticmethod
    def create_from_settings() -> BaseLLMClient:
        """Create LLM client from environment settings"""
        from ..config import settings

        provider = settings.llm_provider.lower()
        common = {
            "timeout_seconds": settings.llm_timeout_seconds,
            "max_retries": settings.llm_max_retries
        }

        if provider == "gemini":
            client = LLMClientFactory.create(
                "gemini", api_key=settings.gemini_api_key, model=settings.llm_model, **common
            )
        elif provider == "openai":
            client = LLMClientFactory.create(
                "openai", api_key=settings.openai_api_key, model=settings.llm_model, **common
            )
        elif provider == "anthropic":
            client = LLMClientFactory.create(
                "anthropic", api_key=settings.anthropic_api_key, model=settings.llm_model, **common
            )
        elif provider == "ollama":
            client = LLMClientFactory.create(
                "ollama", base_url=settings.ollama_base_url, model=settings.ollama_model, **common
            )
        else:
            client = LLMClientFactory.create(provider, **common)

        logger.info("Using LLM provider %s (%s)", provider, client.provider_name)
        return client
