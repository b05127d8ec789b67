"""
llm_oracle.py

PURPOSE: Oracle backed by a language model.
DEPENDENCIES: LLM client, prompts

ARCHITECTURE NOTES:
Every call goes through `_call`, which:
- bounds the round-trip with asyncio.wait_for (a timeout is OracleUnavailable)
- turns unusable payloads (ValueError from complete_json) into OracleInvalidResponse
- retries retryable failures with exponential backoff
Structured replies are validated here, so the engines only ever receive an
Answer, a bool, a non-empty string or a CampaignOpening.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from oracle_games.errors import OracleInvalidResponse, OracleUnavailable
from oracle_games.llm.client import LLMClient, LLMMessage, LLMRequest
from oracle_games.models.adventure import NarrativeRole
from oracle_games.models.character import Ability, CharacterSheet
from oracle_games.models.questions import Answer, Category
from oracle_games.observability import get_tracer
from oracle_games.oracle.base import CampaignOpening, NarrationContext, Oracle, QuestionContext
from oracle_games.oracle.prompts import (
    ACTION_TEMPLATE,
    ANSWER_SCHEMA,
    CAMPAIGN_SCHEMA,
    CAMPAIGN_TEMPLATE,
    CATEGORY_HINTS,
    DUNGEON_MASTER_PROMPT,
    JUDGE_PROMPT,
    JUDGE_TEMPLATE,
    QUESTION_TEMPLATE,
    QUESTIONS_HOST_PROMPT,
    SUBJECT_PROMPT,
    SUBJECT_SCHEMA,
    SUBJECT_TEMPLATE,
    VERDICT_SCHEMA,
)
from oracle_games.oracle.retry import RetryPolicy, Sleep, with_retries

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

T = TypeVar("T")


def parse_answer(payload: dict[str, Any]) -> Answer:
    """
    Read the answer out of a structured reply.

    Raises:
        OracleInvalidResponse: If the payload has no recognisable answer
    """
    value = payload.get("answer")
    if isinstance(value, str):
        try:
            return Answer(value.strip().lower())
        except ValueError:
            pass
    raise OracleInvalidResponse(f"Oracle gave an unusable answer: {value!r}")


def _format_history(context: QuestionContext) -> str:
    if not context.history:
        return "(none)"
    return "\n".join(
        f"{record.number}. {record.question} -> {record.answer.value}" for record in context.history
    )


def _format_abilities(character: CharacterSheet) -> str:
    return ", ".join(
        f"{ability.abbreviation} {character.abilities.score(ability)}" for ability in Ability
    )


class LLMOracle(Oracle):
    """
    An oracle that asks a language model.

    Low temperature for answers and verdicts, the configured temperature
    for narration, and a high one for picking subjects.
    """

    def __init__(
        self,
        client: LLMClient,
        timeout: float = 30.0,
        retry: RetryPolicy | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        history_limit: int = 20,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the oracle.

        Args:
            client: The LLM client to consult.
            timeout: Seconds allowed for one round-trip before it counts as unavailable.
            retry: Backoff policy for retryable failures.
            temperature: Sampling temperature for narration.
            max_tokens: Maximum tokens for narration replies.
            history_limit: Narrative log entries replayed to the model each turn.
            sleep: Awaitable used between retries (replaced in tests).
        """
        self._client = client
        self._timeout = timeout
        self._retry = retry or RetryPolicy()
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._history_limit = history_limit
        self._sleep = sleep

    async def _call(self, name: str, factory: Callable[[], Awaitable[T]]) -> T:
        async def attempt() -> T:
            try:
                return await asyncio.wait_for(factory(), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                raise OracleUnavailable(
                    f"The oracle did not answer within {self._timeout:g} seconds"
                ) from e
            except ValueError as e:
                raise OracleInvalidResponse(f"The oracle's reply could not be read: {e}") from e

        with tracer.start_as_current_span(f"oracle.{name}") as span:
            span.set_attribute("oracle.model", self._client.model_name)
            try:
                return await with_retries(attempt, self._retry, sleep=self._sleep, description=name)
            except Exception as e:
                span.record_exception(e)
                raise

    async def ask(self, context: QuestionContext, question: str) -> Answer:
        prompt = QUESTION_TEMPLATE.format(
            category=context.category.value,
            subject=context.subject,
            history=_format_history(context),
            question=question,
        )
        request = LLMRequest.single(
            prompt,
            system=QUESTIONS_HOST_PROMPT,
            temperature=0.0,
            max_tokens=256,
        )
        payload = await self._call("ask", lambda: self._client.complete_json(request, ANSWER_SCHEMA))
        answer = parse_answer(payload)
        logger.debug(f"Q{len(context.history) + 1}: {question!r} -> {answer.value}")
        return answer

    async def generate_subject(self, category: Category) -> str:
        prompt = SUBJECT_TEMPLATE.format(
            category=category.value,
            category_hint=CATEGORY_HINTS[category.value],
        )
        request = LLMRequest.single(
            prompt,
            system=SUBJECT_PROMPT,
            temperature=1.0,
            max_tokens=256,
        )
        payload = await self._call(
            "generate_subject", lambda: self._client.complete_json(request, SUBJECT_SCHEMA)
        )
        subject = payload.get("subject")
        if not isinstance(subject, str) or not subject.strip():
            raise OracleInvalidResponse("The oracle did not choose a subject")
        return subject.strip().strip("\"'.")

    async def check_guess(self, subject: str, guess: str) -> bool:
        request = LLMRequest.single(
            JUDGE_TEMPLATE.format(subject=subject, guess=guess),
            system=JUDGE_PROMPT,
            temperature=0.0,
            max_tokens=256,
        )
        payload = await self._call(
            "check_guess", lambda: self._client.complete_json(request, VERDICT_SCHEMA)
        )
        verdict = payload.get("correct")
        if not isinstance(verdict, bool):
            raise OracleInvalidResponse(f"The oracle gave an unusable verdict: {verdict!r}")
        return verdict

    def _conversation(self, context: NarrationContext) -> list[LLMMessage]:
        roles = {NarrativeRole.PLAYER: "user", NarrativeRole.NARRATOR: "assistant"}
        messages = [
            LLMMessage(role=roles[entry.role], content=entry.text)
            for entry in context.recent[-self._history_limit :]
        ]
        # The Messages API wants the conversation to open with the user
        while messages and messages[0].role != "user":
            messages.pop(0)
        return messages

    async def narrate(self, context: NarrationContext, action: str) -> str:
        prompt = ACTION_TEMPLATE.format(
            campaign=context.campaign,
            location=context.location,
            quest=context.quest,
            character=context.character.describe(),
            action=action,
        )
        request = LLMRequest(
            messages=[*self._conversation(context), LLMMessage(role="user", content=prompt)],
            system=DUNGEON_MASTER_PROMPT,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        response = await self._call("narrate", lambda: self._client.complete(request))
        text = response.content.strip()
        if not text:
            raise OracleInvalidResponse("The Dungeon Master said nothing")
        return text

    async def open_campaign(self, character: CharacterSheet) -> CampaignOpening:
        prompt = CAMPAIGN_TEMPLATE.format(
            character=character.describe(),
            background=character.background.value,
            abilities=_format_abilities(character),
        )
        request = LLMRequest.single(
            prompt,
            system=DUNGEON_MASTER_PROMPT,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        payload = await self._call(
            "open_campaign", lambda: self._client.complete_json(request, CAMPAIGN_SCHEMA)
        )

        def text(key: str) -> str:
            value = payload.get(key)
            return value.strip() if isinstance(value, str) else ""

        introduction = text("introduction")
        if not introduction:
            raise OracleInvalidResponse("The Dungeon Master did not describe the opening scene")
        return CampaignOpening(
            campaign=text("campaign"),
            location=text("location"),
            quest=text("quest"),
            introduction=introduction,
        )
