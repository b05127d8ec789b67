"""
client.py

PURPOSE: Abstract LLM client interface.
DEPENDENCIES: None (pure Python + typing)

ARCHITECTURE NOTES:
The oracle talks to language models only through this interface, so tests
can swap in a scripted client and other providers can be added later.

Contract for implementations:
- transport and API failures are raised as OracleError subclasses
  (OracleUnavailable, OracleRateLimited), never as SDK exceptions
- a reply that cannot be read as the requested structure raises ValueError;
  the oracle turns that into OracleInvalidResponse
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["user", "assistant"]


@dataclass
class LLMResponse:
    """Text reply plus the usage numbers worth logging."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    stop_reason: str | None = None


@dataclass
class LLMMessage:
    role: Role
    content: str


@dataclass
class LLMRequest:
    """
    Everything sent in one round-trip.

    The system prompt travels separately from the turns; `messages` must
    open with a user turn and alternate from there.
    """

    messages: list[LLMMessage] = field(default_factory=list)
    system: str | None = None
    temperature: float | None = 0.7
    max_tokens: int = 2048

    @classmethod
    def single(cls, prompt: str, system: str | None = None, **kwargs: Any) -> "LLMRequest":
        """A request holding one user turn."""
        return cls(messages=[LLMMessage(role="user", content=prompt)], system=system, **kwargs)


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def complete(self, request: LLMRequest) -> LLMResponse:
        """
        Get a free-text reply (narration).

        Raises:
            OracleUnavailable: On network, timeout or server failures
            OracleRateLimited: When the provider throttles the call
        """
        ...

    @abstractmethod
    async def complete_json(
        self,
        request: LLMRequest,
        schema: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Get a reply shaped by a JSON schema (answers, verdicts, subjects).

        Raises:
            ValueError: If no object can be read from the reply
            OracleUnavailable: On network, timeout or server failures
            OracleRateLimited: When the provider throttles the call
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...
