"""
Cloud-Agnostic LLM Adapter.

TailorReach does not lock into any AI vendor. This module provides the
abstraction layer used by scoring, message drafting and onboarding:
plain completions, chat completions and streamed chat completions.
"""
import hashlib
import json
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional
from datetime import datetime, timezone

import httpx
from pydantic import BaseModel

from backend.app.core.logging import get_logger

logger = get_logger(__name__)


class LLMResponse(BaseModel):
    """Standardised response from any LLM adapter."""
    text: str
    model_version: str
    prompt_hash: str
    timestamp: datetime
    token_count: Optional[int] = None
    provider: str  # "openai", "gemini"


class LLMAdapterConfig(BaseModel):
    """Configuration for an LLM adapter instance."""
    provider: str
    completion_model: str
    chat_model: str
    api_key: Optional[str] = None
    endpoint_url: Optional[str] = None
    max_tokens: int = 256
    temperature: float = 0.7
    timeout_seconds: float = 30.0


class LLMAdapter(ABC):
    """Abstract base class for LLM adapters."""

    def __init__(self, config: LLMAdapterConfig):
        self.config = config

    @abstractmethod
    async def complete(
        self, prompt: str, *, max_tokens: Optional[int] = None, temperature: Optional[float] = None
    ) -> LLMResponse:
        """Send a single prompt to a text-completion model."""
        ...

    @abstractmethod
    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """Send a role-tagged conversation to a chat model."""
        ...

    @abstractmethod
    def stream_chat(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Stream the chat model's reply as text chunks."""
        ...

    async def aclose(self) -> None:
        """Release pooled connections held by the adapter."""
        return None

    def compute_prompt_hash(self, prompt: str) -> str:
        """Compute a SHA-256 hash of the prompt for audit logging."""
        return hashlib.sha256(prompt.encode()).hexdigest()[:16]

    def _response(self, text: str, model: str, prompt: str, token_count: Optional[int] = None) -> LLMResponse:
        return LLMResponse(
            text=text or "",
            model_version=f"{self.config.provider}/{model}",
            prompt_hash=self.compute_prompt_hash(prompt),
            timestamp=datetime.now(timezone.utc),
            token_count=token_count,
            provider=self.config.provider,
        )


class OpenAIAdapter(LLMAdapter):
    """Adapter for OpenAI and any OpenAI-compatible server (vLLM, Ollama, TGI)."""

    def __init__(self, config: LLMAdapterConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config)
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is not None and not self._http.is_closed:
            return self._http
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        self._http = httpx.AsyncClient(
            base_url=self.config.endpoint_url or "https://api.openai.com/v1",
            headers=headers,
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def complete(self, prompt, *, max_tokens=None, temperature=None) -> LLMResponse:
        payload = {
            "model": self.config.completion_model,
            "prompt": prompt,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
        }
        resp = await self._client().post("/completions", json=payload)
        resp.raise_for_status()
        data = resp.json()
        text = (data.get("choices") or [{}])[0].get("text", "")
        usage = data.get("usage") or {}
        return self._response(text, self.config.completion_model, prompt, usage.get("total_tokens"))

    async def chat(self, messages, *, max_tokens=None, temperature=None) -> LLMResponse:
        payload: Dict[str, Any] = {
            "model": self.config.chat_model,
            "messages": messages,
            "temperature": self.config.temperature if temperature is None else temperature,
        }
        if max_tokens:
            payload["max_tokens"] = max_tokens
        resp = await self._client().post("/chat/completions", json=payload)
        resp.raise_for_status()
        data = resp.json()
        message = (data.get("choices") or [{}])[0].get("message") or {}
        usage = data.get("usage") or {}
        return self._response(
            message.get("content") or "", self.config.chat_model, json.dumps(messages), usage.get("total_tokens")
        )

    async def stream_chat(self, messages) -> AsyncIterator[str]:
        payload = {
            "model": self.config.chat_model,
            "messages": messages,
            "temperature": self.config.temperature,
            "stream": True,
        }
        async with self._client().stream("POST", "/chat/completions", json=payload) as resp:
            resp.raise_for_status()
            # Server-sent events: "data: {...}" lines, terminated by "data: [DONE]"
            async for line in resp.aiter_lines():
                if not line.startswith("data:"):
                    continue
                data = line[len("data:"):].strip()
                if data == "[DONE]":
                    break
                chunk = json.loads(data)
                delta = (chunk.get("choices") or [{}])[0].get("delta") or {}
                content = delta.get("content")
                if content:
                    yield content


class GeminiAdapter(LLMAdapter):
    """Google Gemini implementation."""

    def __init__(self, config: LLMAdapterConfig):
        super().__init__(config)
        self._genai = None

    def _client(self):
        if self._genai is None:
            from google import genai
            self._genai = genai.Client(
                api_key=self.config.api_key,
                http_options={"timeout": int(self.config.timeout_seconds * 1000)},
            )
        return self._genai

    async def aclose(self) -> None:
        if self._genai is not None:
            await self._genai.aio.aclose()
            self._genai = None

    @staticmethod
    def _split_messages(messages: List[Dict[str, str]]):
        """Gemini takes the system prompt separately and calls the assistant 'model'."""
        from google.genai import types

        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        contents = [
            types.Content(
                role="model" if m["role"] == "assistant" else "user",
                parts=[types.Part(text=m["content"])],
            )
            for m in messages
            if m["role"] != "system"
        ]
        return ("\n\n".join(system_parts) or None), contents

    def _config(self, max_tokens=None, temperature=None, system_instruction=None):
        from google.genai import types
        return types.GenerateContentConfig(
            max_output_tokens=max_tokens or self.config.max_tokens,
            temperature=self.config.temperature if temperature is None else temperature,
            system_instruction=system_instruction,
        )

    async def complete(self, prompt, *, max_tokens=None, temperature=None) -> LLMResponse:
        response = await self._client().aio.models.generate_content(
            model=self.config.completion_model,
            contents=prompt,
            config=self._config(max_tokens, temperature),
        )
        return self._response(response.text, self.config.completion_model, prompt)

    async def chat(self, messages, *, max_tokens=None, temperature=None) -> LLMResponse:
        system_instruction, contents = self._split_messages(messages)
        response = await self._client().aio.models.generate_content(
            model=self.config.chat_model,
            contents=contents,
            config=self._config(max_tokens, temperature, system_instruction),
        )
        return self._response(response.text, self.config.chat_model, json.dumps(messages))

    async def stream_chat(self, messages) -> AsyncIterator[str]:
        system_instruction, contents = self._split_messages(messages)
        stream = await self._client().aio.models.generate_content_stream(
            model=self.config.chat_model,
            contents=contents,
            config=self._config(system_instruction=system_instruction),
        )
        async for chunk in stream:
            if chunk.text:
                yield chunk.text


def get_adapter(provider: Optional[str] = None) -> LLMAdapter:
    """
    Factory function. Returns the correct adapter based on environment config.

    Priority: provider argument > LLM_PROVIDER setting (default openai).
    """
    from backend.app.core.config import get_settings
    settings = get_settings()

    effective_provider = provider or settings.llm_provider

    if effective_provider == "openai":
        return OpenAIAdapter(LLMAdapterConfig(
            provider="openai",
            completion_model=settings.openai_completion_model,
            chat_model=settings.openai_chat_model,
            api_key=settings.openai_api_key,
            endpoint_url=settings.openai_base_url,
            temperature=settings.llm_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
        ))
    elif effective_provider == "gemini":
        return GeminiAdapter(LLMAdapterConfig(
            provider="gemini",
            completion_model=settings.gemini_model,
            chat_model=settings.gemini_model,
            api_key=settings.gemini_api_key,
            temperature=settings.llm_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
        ))
    else:
        raise ValueError(f"Unknown LLM provider: {effective_provider}")


_shared_adapter: Optional[LLMAdapter] = None


def get_llm_adapter() -> LLMAdapter:
    """FastAPI dependency; one pooled adapter per process. Overridden in tests."""
    global _shared_adapter
    if _shared_adapter is None:
        _shared_adapter = get_adapter()
    return _shared_adapter


async def close_llm_adapter() -> None:
    """Close the shared adapter on shutdown."""
    global _shared_adapter
    if _shared_adapter is not None:
        await _shared_adapter.aclose()
        _shared_adapter = None
