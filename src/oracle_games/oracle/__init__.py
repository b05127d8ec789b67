"""Oracle module: the games' only route to the language model."""

from oracle_games.oracle.base import (
    CampaignOpening,
    NarrationContext,
    Oracle,
    QuestionContext,
)
from oracle_games.oracle.llm_oracle import LLMOracle, parse_answer
from oracle_games.oracle.retry import RetryPolicy, with_retries

__all__ = [
    "CampaignOpening",
    "LLMOracle",
    "NarrationContext",
    "Oracle",
    "QuestionContext",
    "RetryPolicy",
    "parse_answer",
    "with_retries",
]
