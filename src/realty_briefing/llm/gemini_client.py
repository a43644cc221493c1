"""Async client for the Gemini generateContent API.

Tries the native endpoint up to ``max_attempts`` times with exponential
backoff, then falls back once to Gemini's OpenAI-compatible chat completions
endpoint with a role-based message list.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from realty_briefing.common.config import GeminiConfig
from realty_briefing.common.schema import GenerationOptions
from realty_briefing.llm.errors import (
    ConfigurationError,
    GenerationError,
    MalformedResponseError,
    TransportError,
    UpstreamError,
    UpstreamTimeoutError,
)

LOGGER = logging.getLogger("realty_briefing.llm.gemini")

Sleep = Callable[[float], Awaitable[None]]


def _excerpt(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class GeminiClient:
    """Stateless wrapper: a fresh HTTP client per ``generate`` call."""

    def __init__(
        self,
        config: GeminiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self._transport = transport
        self._sleep = sleep

    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """
        Generate text for ``prompt``.

        Args:
            prompt: Non-empty prompt text.
            options: Sampling parameters; defaults to ``GenerationOptions()``.

        Returns:
            The generated text, trimmed and non-empty.

        Raises:
            ConfigurationError: No API key configured.
            GenerationError: Every attempt, including the fallback, failed. The
                error from the last native attempt is raised.
        """
        cfg = self._config
        if not cfg.api_key:
            raise ConfigurationError("Gemini API key is not configured (set GEMINI_API_KEY)")
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")
        options = options or GenerationOptions()

        last_error: GenerationError | None = None
        async with httpx.AsyncClient(timeout=cfg.timeout_s, transport=self._transport) as http:
            for attempt in range(cfg.max_attempts):
                try:
                    text = await self._call_primary(http, prompt, options)
                    LOGGER.info("Gemini call succeeded on attempt %d/%d", attempt + 1, cfg.max_attempts)
                    return text
                except GenerationError as e:
                    last_error = e
                    LOGGER.warning(
                        "Gemini call failed (attempt %d/%d): %s: %s",
                        attempt + 1, cfg.max_attempts, type(e).__name__, e,
                    )
                if attempt < cfg.max_attempts - 1:
                    await self._sleep(cfg.backoff_s * 2 ** attempt)

            LOGGER.warning("Native endpoint exhausted; falling back to OpenAI-compatible endpoint")
            try:
                return await self._call_fallback(http, prompt, options)
            except GenerationError as e:
                LOGGER.error("Fallback call failed: %s: %s", type(e).__name__, e)
                if last_error is None:
                    raise
                raise last_error from e

    async def _call_primary(
        self, http: httpx.AsyncClient, prompt: str, options: GenerationOptions
    ) -> str:
        generation_config: dict[str, Any] = {"temperature": options.temperature}
        if options.top_k is not None:
            generation_config["topK"] = options.top_k
        if options.top_p is not None:
            generation_config["topP"] = options.top_p
        generation_config["maxOutputTokens"] = options.max_output_tokens
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": f"{self._config.persona}\n\n{prompt}"}]}
            ],
            "generationConfig": generation_config,
        }
        data = await self._post(
            http, self._config.primary_url, payload, params={"key": self._config.api_key}
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "\n".join(p.get("text") or "" for p in parts).strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise MalformedResponseError(f"unexpected response shape: {_excerpt(str(data))}") from e
        if not text:
            raise MalformedResponseError("first candidate has no text parts")
        return text

    async def _call_fallback(
        self, http: httpx.AsyncClient, prompt: str, options: GenerationOptions
    ) -> str:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": self._config.persona},
                {"role": "user", "content": prompt},
            ],
            "temperature": options.temperature,
            "max_tokens": options.max_output_tokens,
        }
        if options.top_p is not None:
            payload["top_p"] = options.top_p
        headers = {"Authorization": f"Bearer {self._config.api_key}"}
        data = await self._post(http, self._config.fallback_url, payload, headers=headers)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError(f"fallback response has no content: {_excerpt(str(data))}")
        return content.strip()

    async def _post(
        self, http: httpx.AsyncClient, url: str, payload: dict[str, Any], **kwargs: Any
    ) -> dict[str, Any]:
        # httpx timeouts apply per phase; wait_for caps the whole attempt
        try:
            r = await asyncio.wait_for(
                http.post(url, json=payload, **kwargs), self._config.timeout_s
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UpstreamTimeoutError(f"request timed out after {self._config.timeout_s}s") from e
        except httpx.RequestError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        if not r.is_success:
            LOGGER.debug("Upstream %s body: %s", r.status_code, _excerpt(r.text))
            raise UpstreamError(r.status_code, r.text)
        try:
            data = r.json()
        except ValueError as e:
            raise MalformedResponseError(f"response is not JSON: {_excerpt(r.text)}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"response is not a JSON object: {_excerpt(r.text)}")
        return data
