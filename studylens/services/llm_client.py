"""
StudyLens — LLM Clients
========================
One chat-completion call, one provider. Each client is constructed explicitly
from settings and owns its SDK handle; nothing here is process-global.

The SDK handle is created on first use, so a missing credential fails the
call (and surfaces as an AnalysisError upstream) instead of the app startup.
"""

import logging
import asyncio
from typing import Optional

import google.generativeai as genai
from groq import AsyncGroq
from openai import AsyncOpenAI

from studylens.core.config import Settings

logger = logging.getLogger(__name__)


class LLMClient:
    """Base class: send a single user-role prompt, get the reply text back."""

    provider = "base"

    def __init__(self, api_key: Optional[str], model: str):
        self._api_key = api_key
        self.model = model

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> Optional[str]:
        raise NotImplementedError


class GroqClient(LLMClient):
    provider = "groq"

    def __init__(self, api_key: Optional[str], model: str):
        super().__init__(api_key, model)
        self._client: Optional[AsyncGroq] = None

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> Optional[str]:
        if self._client is None:
            self._client = AsyncGroq(api_key=self._api_key)

        logger.info(f"[LLM] Calling Groq ({self.model})...")
        completion = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content


class OpenAIClient(LLMClient):
    provider = "openai"

    def __init__(self, api_key: Optional[str], model: str):
        super().__init__(api_key, model)
        self._client: Optional[AsyncOpenAI] = None

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> Optional[str]:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)

        logger.info(f"[LLM] Calling OpenAI ({self.model})...")
        completion = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content


class GeminiClient(LLMClient):
    """
    Gemini through google-generativeai. The SDK keeps its key in module state,
    so the key is (re)applied right before each call.
    """

    provider = "gemini"

    async def complete(self, prompt: str, temperature: float, max_tokens: int) -> Optional[str]:
        if not self._api_key:
            raise ValueError("Google API Key missing")

        genai.configure(api_key=self._api_key, transport="rest")
        model = genai.GenerativeModel(
            model_name=self.model,
            generation_config={
                "temperature": temperature,
                "max_output_tokens": max_tokens,
            },
        )

        logger.info(f"[LLM] Calling Gemini ({self.model})...")
        response = await asyncio.to_thread(model.generate_content, prompt)
        return response.text


def build_llm_client(settings: Settings) -> LLMClient:
    """Construct the client for the configured provider."""
    provider = settings.AI_PROVIDER
    if provider == "groq":
        client = GroqClient(settings.GROQ_API_KEY, settings.GROQ_MODEL)
        key_present = bool(settings.GROQ_API_KEY)
    elif provider == "openai":
        client = OpenAIClient(settings.OPENAI_API_KEY, settings.OPENAI_MODEL)
        key_present = bool(settings.OPENAI_API_KEY)
    elif provider == "gemini":
        client = GeminiClient(settings.GOOGLE_API_KEY, settings.GEMINI_MODEL)
        key_present = bool(settings.GOOGLE_API_KEY)
    else:
        raise ValueError(f"Unknown AI provider '{provider}'")

    if key_present:
        logger.info(f"[INIT] ✓ {provider} client configured ({client.model})")
    else:
        logger.warning(f"[INIT] ✗ {provider} API key missing; analysis calls will fail")
    return client
