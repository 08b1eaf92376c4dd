"""
Question strategies for reverse mode.

Two ways for the oracle to play, selectable per session:

- AskOnlyStrategy: the whole raw reply is the next question and the oracle
  keeps asking until the player confirms a guess made elsewhere.
- GuessingStrategy: questions use the ``<REASONING>/<QUESTION>`` grammar,
  and after a few answers the oracle is asked whether it is confident
  enough (``<SHOULD_GUESS>``) to name the character (``<GUESS>``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from whoami.engine.errors import OracleError, ParseError
from whoami.engine.parser import ResponseParser
from whoami.llm.prompt_loader import PromptLoader, get_loader
from whoami.models.game import (
    ChatMessage,
    CompletionOptions,
    ReverseContext,
    ReverseResult,
    ReverseResultKind,
    Role,
    Turn,
)

if TYPE_CHECKING:
    from whoami.engine.protocols import Oracle

logger = logging.getLogger(__name__)

GUESS_AFTER_TURNS = 3


def format_history(turns: list[Turn]) -> str:
    """Render turns oldest first, one ``Q: ... A: ...`` line each."""
    if not turns:
        return "None yet."
    return "\n".join(f"Q: {turn.question} A: {turn.answer.value}" for turn in turns)


def format_summary(summary: str) -> str:
    return summary or "Nothing yet."


class _PromptedStrategy:
    """Prompt plumbing shared by the strategies."""

    QUESTION_OPTIONS = CompletionOptions(temperature=0.7, max_tokens=150)

    def __init__(self, prompt_loader: PromptLoader | None = None):
        self.prompts = prompt_loader or get_loader()

    def _messages(self, filename: str, context: ReverseContext) -> list[ChatMessage]:
        prompt = self.prompts.render(
            "reverse",
            filename,
            summary=format_summary(context.running_summary),
            history=format_history(context.history),
        )
        return [ChatMessage(role=Role.SYSTEM, content=prompt)]


class AskOnlyStrategy(_PromptedStrategy):
    """Treat the oracle's raw reply as the question; never guess."""

    async def generate_question(
        self,
        oracle: "Oracle",
        context: ReverseContext,
    ) -> ReverseResult:
        messages = self._messages("ask_question.txt", context)
        raw = await oracle.complete(messages, self.QUESTION_OPTIONS)

        question = raw.strip()
        if not question:
            raise ParseError("Oracle returned an empty question")
        return ReverseResult(result=ReverseResultKind.QUESTION, question=question)

    async def follow_up(
        self,
        oracle: "Oracle",
        context: ReverseContext,
    ) -> ReverseResult:
        return await self.generate_question(oracle, context)


class GuessingStrategy(_PromptedStrategy):
    """Tagged-grammar questions with a guess once the oracle is confident.

    Attributes:
        guess_after_turns: Minimum answered turns before a guess is considered
    """

    SHOULD_GUESS_OPTIONS = CompletionOptions(temperature=0.3, max_tokens=100)
    GUESS_OPTIONS = CompletionOptions(temperature=0.7, max_tokens=150)

    def __init__(
        self,
        prompt_loader: PromptLoader | None = None,
        parser: ResponseParser | None = None,
        guess_after_turns: int = GUESS_AFTER_TURNS,
    ):
        super().__init__(prompt_loader)
        self.parser = parser or ResponseParser()
        self.guess_after_turns = guess_after_turns

    async def generate_question(
        self,
        oracle: "Oracle",
        context: ReverseContext,
    ) -> ReverseResult:
        messages = self._messages("ask_question_tagged.txt", context)
        raw = await oracle.complete(messages, self.QUESTION_OPTIONS)

        question = self.parser.extract_tag(raw, ResponseParser.QUESTION_TAG)
        if not question:
            raise ParseError("Failed to parse question response")
        return ReverseResult(
            result=ReverseResultKind.QUESTION,
            question=question,
            reasoning=self.parser.extract_reasoning(raw),
        )

    async def follow_up(
        self,
        oracle: "Oracle",
        context: ReverseContext,
    ) -> ReverseResult:
        if context.turn_count >= self.guess_after_turns:
            if await self.should_make_guess(oracle, context):
                return await self.make_guess(oracle, context)
        return await self.generate_question(oracle, context)

    async def should_make_guess(
        self,
        oracle: "Oracle",
        context: ReverseContext,
    ) -> bool:
        """Ask the oracle whether it knows enough to guess.

        A failed call or an unreadable reply counts as "not yet".
        """
        messages = self._messages("should_guess.txt", context)
        try:
            raw = await oracle.complete(messages, self.SHOULD_GUESS_OPTIONS)
        except OracleError as e:
            logger.warning(f"Error determining if should guess: {e}")
            return False

        decision = self.parser.parse_yes_no(raw, ResponseParser.SHOULD_GUESS_TAG)
        return decision is True

    async def make_guess(
        self,
        oracle: "Oracle",
        context: ReverseContext,
    ) -> ReverseResult:
        messages = self._messages("make_guess.txt", context)
        raw = await oracle.complete(messages, self.GUESS_OPTIONS)

        guess = self.parser.extract_tag(raw, ResponseParser.GUESS_TAG)
        if not guess:
            raise ParseError("Failed to parse guess response")
        return ReverseResult(
            result=ReverseResultKind.GUESS,
            guess=guess,
            reasoning=self.parser.extract_reasoning(raw),
        )
