"""Unified streaming LLM client supporting multiple providers."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, TypeAlias

import httpx

from declutter.exceptions import ProviderError, generate_correlation_id
from declutter.llm.config import LLMConfig
from declutter.models import TokenUsage
from declutter.utils import log_with_correlation

LOGGER = logging.getLogger(__name__)

StreamEvent: TypeAlias = str | TokenUsage


class TextStream:
    """Forward-only stream of text chunks with a final usage record.

    Iterate it once; ``usage`` holds the provider's counters after the
    iteration finishes.

    Usage:
        stream = client.stream_text(system, prompt, max_tokens=1000)
        async for chunk in stream:
            ...
        print(stream.usage.total_tokens)
    """

    def __init__(self, events: AsyncIterator[StreamEvent]) -> None:
        self._events = events
        self._consumed = False
        self.usage = TokenUsage()

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise RuntimeError("TextStream can only be consumed once")
        self._consumed = True
        return self._chunks()

    async def _chunks(self) -> AsyncIterator[str]:
        async for event in self._events:
            if isinstance(event, TokenUsage):
                self.usage = event
            elif event:
                yield event


async def _iter_sse_json(response: httpx.Response) -> AsyncIterator[dict[str, Any]]:
    """Yield the JSON payload of each ``data:`` line of a server-sent-event stream."""
    async for line in response.aiter_lines():
        if not line.startswith("data:"):
            continue
        payload = line[len("data:") :].strip()
        if not payload or payload == "[DONE]":
            continue
        try:
            yield json.loads(payload)
        except json.JSONDecodeError:
            LOGGER.debug("Skipping malformed stream event: %s", payload[:200])


async def _raise_for_status(response: httpx.Response) -> None:
    """Read the body of a failed streaming response, then raise."""
    if response.is_error:
        await response.aread()
        response.raise_for_status()


class LLMClient:
    """
    Unified async LLM client that abstracts provider differences.

    Usage:
        from declutter.llm import LLMClient, resolve_llm_config

        config = resolve_llm_config(provider="ollama")
        client = LLMClient(config)

        stream = client.stream_text("You are terse.", "Hello!", max_tokens=100)
        text = "".join([chunk async for chunk in stream])
        await client.close()
    """

    def __init__(self, config: LLMConfig, timeout: float = 300.0) -> None:
        """
        Initialise LLM client.

        Args:
            config: LLM configuration.
            timeout: Request timeout in seconds.
        """
        self._config = config
        self._timeout = timeout
        self._http_client: httpx.AsyncClient | None = None
        self._ollama_client: Any | None = None

    @property
    def config(self) -> LLMConfig:
        return self._config

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for cloud providers."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def _get_ollama_client(self) -> Any:
        """Get or create Ollama AsyncClient."""
        if self._ollama_client is None:
            from ollama import AsyncClient  # type: ignore[import-untyped]

            self._ollama_client = AsyncClient(
                host=self._config.base_url,
                timeout=self._timeout,
            )
        return self._ollama_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def stream_text(
        self,
        system: str,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ) -> TextStream:
        """
        Stream a completion for one prompt under a system directive.

        Nothing is sent until the returned stream is iterated.

        Args:
            system: System directive.
            prompt: User prompt.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.

        Returns:
            TextStream of text chunks.

        Raises:
            ProviderError: If the provider is unsupported, or (during
                iteration) if the request fails.
        """
        provider = self._config.provider
        if provider == "ollama":
            events = self._stream_ollama(system, prompt, temperature, max_tokens)
        elif provider in ("openai", "openrouter"):
            events = self._stream_openai(system, prompt, temperature, max_tokens)
        elif provider == "anthropic":
            events = self._stream_anthropic(system, prompt, temperature, max_tokens)
        elif provider == "gemini":
            events = self._stream_gemini(system, prompt, temperature, max_tokens)
        else:
            raise ProviderError(
                f"Unsupported provider: {provider}",
                provider=provider,
            )
        return TextStream(events)

    async def _stream_ollama(
        self, system: str, prompt: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[StreamEvent]:
        """Stream from Ollama."""
        correlation_id = generate_correlation_id()
        client = await self._get_ollama_client()

        try:
            log_with_correlation(
                LOGGER,
                logging.DEBUG,
                "Sending streaming chat request to Ollama",
                correlation_id=correlation_id,
                model=self._config.model,
            )

            stream = await client.chat(
                model=self._config.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                stream=True,
                options={
                    "temperature": temperature,
                    "num_predict": max_tokens,
                    "num_ctx": self._config.num_ctx,
                },
            )
            async for part in stream:
                content = part.message.content if part.message else None
                if content:
                    yield content
                if part.done:
                    yield TokenUsage(
                        input_tokens=part.prompt_eval_count or 0,
                        output_tokens=part.eval_count or 0,
                    )

        except Exception as exc:
            log_with_correlation(
                LOGGER,
                logging.ERROR,
                f"Ollama chat failed: {exc}",
                correlation_id=correlation_id,
                model=self._config.model,
                error=str(exc),
            )
            raise ProviderError(
                f"Ollama chat failed: {str(exc)}",
                provider="ollama",
                correlation_id=correlation_id,
                context={"model": self._config.model, "error": str(exc)},
            ) from exc

    async def _stream_openai(
        self, system: str, prompt: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[StreamEvent]:
        """Stream from the OpenAI chat completions API (also used by OpenRouter)."""
        provider = self._config.provider
        correlation_id = generate_correlation_id()
        client = await self._get_http_client()

        request_body: dict[str, Any] = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": True,
            "stream_options": {"include_usage": True},
        }

        try:
            log_with_correlation(
                LOGGER,
                logging.DEBUG,
                f"Calling {provider} API",
                correlation_id=correlation_id,
                model=self._config.model,
            )
            async with client.stream(
                "POST",
                f"{self._config.base_url}/v1/chat/completions",
                headers={"Authorization": f"Bearer {self._config.api_key}"},
                json=request_body,
            ) as response:
                await _raise_for_status(response)
                async for data in _iter_sse_json(response):
                    for choice in data.get("choices") or []:
                        content = (choice.get("delta") or {}).get("content")
                        if content:
                            yield content
                    usage = data.get("usage")
                    if usage:
                        yield TokenUsage(
                            input_tokens=usage.get("prompt_tokens") or 0,
                            output_tokens=usage.get("completion_tokens") or 0,
                            total_tokens=usage.get("total_tokens"),
                        )

        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"{provider} API error: {exc.response.status_code}",
                provider=provider,
                correlation_id=correlation_id,
                context={"status_code": exc.response.status_code},
            ) from exc
        except Exception as exc:
            raise ProviderError(
                f"{provider} request failed: {str(exc)}",
                provider=provider,
                correlation_id=correlation_id,
            ) from exc

    async def _stream_anthropic(
        self, system: str, prompt: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[StreamEvent]:
        """Stream from the Anthropic messages API."""
        correlation_id = generate_correlation_id()
        client = await self._get_http_client()

        request_body: dict[str, Any] = {
            "model": self._config.model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "stream": True,
        }

        input_tokens = 0
        output_tokens = 0
        try:
            log_with_correlation(
                LOGGER,
                logging.DEBUG,
                "Calling Anthropic API",
                correlation_id=correlation_id,
                model=self._config.model,
            )
            async with client.stream(
                "POST",
                f"{self._config.base_url}/v1/messages",
                headers={
                    "x-api-key": self._config.api_key or "",
                    "anthropic-version": "2023-06-01",
                },
                json=request_body,
            ) as response:
                await _raise_for_status(response)
                async for data in _iter_sse_json(response):
                    event_type = data.get("type")
                    if event_type == "message_start":
                        usage = (data.get("message") or {}).get("usage") or {}
                        input_tokens = usage.get("input_tokens") or 0
                    elif event_type == "content_block_delta":
                        delta = data.get("delta") or {}
                        if delta.get("type") == "text_delta" and delta.get("text"):
                            yield delta["text"]
                    elif event_type == "message_delta":
                        usage = data.get("usage") or {}
                        output_tokens = usage.get("output_tokens") or output_tokens
                    elif event_type == "error":
                        error = data.get("error") or {}
                        raise ProviderError(
                            f"Anthropic stream error: {error.get('message', 'unknown error')}",
                            provider="anthropic",
                            correlation_id=correlation_id,
                            context={"error_type": error.get("type")},
                        )
            yield TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens)

        except ProviderError:
            raise
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Anthropic API error: {exc.response.status_code}",
                provider="anthropic",
                correlation_id=correlation_id,
                context={"status_code": exc.response.status_code},
            ) from exc
        except Exception as exc:
            raise ProviderError(
                f"Anthropic request failed: {str(exc)}",
                provider="anthropic",
                correlation_id=correlation_id,
            ) from exc

    async def _stream_gemini(
        self, system: str, prompt: str, temperature: float, max_tokens: int
    ) -> AsyncIterator[StreamEvent]:
        """Stream from the Gemini generateContent API."""
        correlation_id = generate_correlation_id()
        client = await self._get_http_client()

        request_body: dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }

        usage: TokenUsage | None = None
        try:
            log_with_correlation(
                LOGGER,
                logging.DEBUG,
                "Calling Gemini API",
                correlation_id=correlation_id,
                model=self._config.model,
            )
            async with client.stream(
                "POST",
                f"{self._config.base_url}/v1beta/models/{self._config.model}:streamGenerateContent",
                params={"alt": "sse"},
                headers={"x-goog-api-key": self._config.api_key or ""},
                json=request_body,
            ) as response:
                await _raise_for_status(response)
                async for data in _iter_sse_json(response):
                    for candidate in data.get("candidates") or []:
                        for part in (candidate.get("content") or {}).get("parts") or []:
                            if part.get("text"):
                                yield part["text"]
                    # usageMetadata is cumulative; the last one wins
                    metadata = data.get("usageMetadata")
                    if metadata:
                        usage = TokenUsage(
                            input_tokens=metadata.get("promptTokenCount") or 0,
                            output_tokens=metadata.get("candidatesTokenCount") or 0,
                            total_tokens=metadata.get("totalTokenCount"),
                        )
            if usage is not None:
                yield usage

        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Gemini API error: {exc.response.status_code}",
                provider="gemini",
                correlation_id=correlation_id,
                context={"status_code": exc.response.status_code},
            ) from exc
        except Exception as exc:
            raise ProviderError(
                f"Gemini request failed: {str(exc)}",
                provider="gemini",
                correlation_id=correlation_id,
            ) from exc
