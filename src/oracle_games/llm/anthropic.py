"""
anthropic.py

PURPOSE: Anthropic Claude LLM client implementation.
DEPENDENCIES: anthropic SDK

ARCHITECTURE NOTES:
Uses the Anthropic Python SDK to communicate with Claude.
Supports:
- Standard completions (narration, subject generation)
- Structured JSON output through forced tool use (yes/no answers, verdicts)
- OpenTelemetry tracing (when enabled)

The SDK's own retry loop is switched off (max_retries=0): the oracle layer
owns retry and backoff so that rate limits are never retried blindly.
SDK exceptions are classified here into OracleRateLimited (429) and
OracleUnavailable (timeouts, connection and 5xx errors are retryable;
other rejected requests are not).
"""

import json
import logging
import time
from typing import Any

import anthropic

from oracle_games.errors import OracleError, OracleRateLimited, OracleUnavailable
from oracle_games.llm.client import LLMClient, LLMRequest, LLMResponse
from oracle_games.observability import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
TOOL_NAME = "structured_response"


def classify_error(error: anthropic.AnthropicError) -> OracleError:
    """Map an SDK exception onto the oracle error taxonomy."""
    if isinstance(error, anthropic.RateLimitError):
        return OracleRateLimited("The API rate limit was reached. Wait a moment and try again.")
    if isinstance(error, anthropic.APITimeoutError):
        return OracleUnavailable("The API request timed out")
    if isinstance(error, anthropic.APIConnectionError):
        return OracleUnavailable(f"Could not reach the API: {error}")
    if isinstance(error, anthropic.APIStatusError):
        if error.status_code >= 500:
            return OracleUnavailable(f"The API returned a server error ({error.status_code})")
        return OracleUnavailable(
            f"The API rejected the request ({error.status_code}): {error.message}",
            retryable=False,
        )
    return OracleUnavailable(f"Unexpected API failure: {error}", retryable=False)


class AnthropicClient(LLMClient):
    """
    LLM client using Anthropic's Claude API.

    Supports both standard and structured JSON completions.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float | None = None,
    ):
        """
        Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. If None, uses ANTHROPIC_API_KEY env var.
            model: Model to use for completions.
            timeout: HTTP timeout in seconds; SDK default when None.
        """
        kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._client = anthropic.AsyncAnthropic(**kwargs)
        self._model = model

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model

    def _base_kwargs(self, request: LLMRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": request.max_tokens,
            "messages": [{"role": msg.role, "content": msg.content} for msg in request.messages],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.system:
            kwargs["system"] = request.system
        return kwargs

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """
        Send a completion request to Claude.

        Args:
            request: The request containing messages and parameters

        Returns:
            LLMResponse with the concatenated text blocks
        """
        with tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("llm.model", self._model)
            span.set_attribute("llm.message_count", len(request.messages))

            start_time = time.perf_counter()
            logger.debug(f"Sending request to {self._model}")

            try:
                response = await self._client.messages.create(**self._base_kwargs(request))
            except anthropic.AnthropicError as e:
                span.record_exception(e)
                raise classify_error(e) from e

            elapsed_ms = (time.perf_counter() - start_time) * 1000
            content = "".join(block.text for block in response.content if block.type == "text")

            span.set_attribute("llm.input_tokens", response.usage.input_tokens)
            span.set_attribute("llm.output_tokens", response.usage.output_tokens)
            span.set_attribute("llm.latency_ms", elapsed_ms)
            logger.debug(
                f"Response: {response.usage.input_tokens} in, "
                f"{response.usage.output_tokens} out, {elapsed_ms:.0f} ms"
            )

            return LLMResponse(
                content=content,
                model=response.model,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                stop_reason=response.stop_reason,
            )

    async def complete_json(
        self,
        request: LLMRequest,
        schema: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Request a JSON-structured response from Claude.

        Forces a single tool call whose input schema is the requested schema.
        Falls back to parsing a text block as JSON.

        Raises:
            ValueError: If no structured payload can be extracted
        """
        with tracer.start_as_current_span("llm.complete_json") as span:
            span.set_attribute("llm.model", self._model)
            span.set_attribute("llm.schema_name", schema.get("title", "unknown"))

            kwargs = self._base_kwargs(request)
            kwargs["tools"] = [
                {
                    "name": TOOL_NAME,
                    "description": "Return the structured response",
                    "input_schema": schema,
                }
            ]
            kwargs["tool_choice"] = {"type": "tool", "name": TOOL_NAME}

            logger.debug(f"Sending JSON request to {self._model}")

            try:
                response = await self._client.messages.create(**kwargs)
            except anthropic.AnthropicError as e:
                span.record_exception(e)
                raise classify_error(e) from e

            for block in response.content:
                if block.type == "tool_use" and block.name == TOOL_NAME:
                    span.set_attribute("llm.response_type", "tool_use")
                    return dict(block.input)

            for block in response.content:
                if block.type == "text":
                    try:
                        result = json.loads(block.text)
                    except json.JSONDecodeError:
                        continue
                    if isinstance(result, dict):
                        span.set_attribute("llm.response_type", "text_json")
                        return result

            span.set_attribute("llm.response_type", "failed")
            raise ValueError("Failed to get structured JSON response from Claude")


def create_anthropic_client(
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    timeout: float | None = None,
) -> AnthropicClient:
    """
    Factory function to create an Anthropic client.

    Args:
        api_key: Optional API key (uses env var if not provided)
        model: Model to use
        timeout: Optional HTTP timeout in seconds

    Returns:
        Configured AnthropicClient
    """
    return AnthropicClient(api_key=api_key, model=model, timeout=timeout)
