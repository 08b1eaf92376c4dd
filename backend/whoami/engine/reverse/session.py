"""
Reverse mode: the oracle asks questions to guess the player's character.

The session keeps the transcript of answered questions. Every
SUMMARY_INTERVAL answers the transcript is folded into a running summary
by the oracle and cleared, which bounds prompt size however long the game
runs. How questions and guesses are produced is delegated to a
QuestionStrategy.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from whoami.engine.errors import (
    NoPendingQuestionError,
    OracleError,
    ParseError,
    StaleEpochError,
)
from whoami.engine.reverse.strategies import (
    AskOnlyStrategy,
    format_history,
    format_summary,
)
from whoami.engine.session import GameSession
from whoami.models.game import (
    ChatMessage,
    CompletionOptions,
    GameStatus,
    ReverseAnswer,
    ReverseContext,
    ReverseResult,
    ReverseResultKind,
    Role,
    Turn,
    WinEvent,
)

if TYPE_CHECKING:
    from whoami.engine.protocols import Oracle, QuestionStrategy

    Move = Callable[[Oracle, ReverseContext], Awaitable[ReverseResult]]

logger = logging.getLogger(__name__)

SUMMARY_INTERVAL = 10


class ReverseGameSession(GameSession):
    """One reverse game, reset in place between games.

    Attributes:
        strategy: How the oracle asks and guesses
        summary_interval: Answers between two summarizations

    Example:
        >>> session = ReverseGameSession(oracle)
        >>> first = await session.start()
        >>> first.question
        'Is your character real?'
        >>> nxt = await session.answer_question(ReverseAnswer.NO)
    """

    mode = "reverse"
    SUMMARY_OPTIONS = CompletionOptions(temperature=0.3, max_tokens=300)

    def __init__(
        self,
        oracle: "Oracle",
        strategy: "QuestionStrategy | None" = None,
        summary_interval: int = SUMMARY_INTERVAL,
        **kwargs,
    ):
        """
        Args:
            oracle: The text-completion backend
            strategy: Question strategy (defaults to AskOnlyStrategy)
            summary_interval: Answers between two summarizations
            **kwargs: session_id, session_logger, prompt_loader, parser
        """
        super().__init__(oracle, **kwargs)
        if summary_interval < 1:
            raise ValueError("summary_interval must be positive")
        self.strategy = strategy or AskOnlyStrategy(self.prompts)
        self.summary_interval = summary_interval
        self._history: list[Turn] = []
        self._running_summary = ""
        self._pending_question = ""
        self._turn_count = 0
        self._last_guess: str | None = None

    @property
    def history(self) -> list[Turn]:
        """Unsummarized answered turns, oldest first (a copy)."""
        return list(self._history)

    @property
    def running_summary(self) -> str:
        return self._running_summary

    @property
    def pending_question(self) -> str:
        return self._pending_question

    @property
    def turn_count(self) -> int:
        return self._turn_count

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> ReverseResult:
        """Begin a new game and return the oracle's first question.

        Raises:
            NotReadyError: If the oracle is not initialized
        """
        self._require_ready()
        epoch = self._epoch.advance()
        self._clear_game()
        self._started = True
        self.status = GameStatus.PLAYING

        logger.info(f"Reverse game started: session={self.session_id} epoch={epoch}")
        self._log_event(f"Game started (epoch {epoch})")
        return await self.generate_question()

    def reset(self) -> None:
        """Stop the current game; in-flight oracle calls become stale."""
        epoch = self._epoch.advance()
        self._clear_game()
        self._started = False
        self.status = GameStatus.NOT_STARTED
        logger.info(f"Reverse game reset: session={self.session_id} epoch={epoch}")
        self._log_event(f"Game reset (epoch {epoch})")

    def _clear_game(self) -> None:
        self._history = []
        self._running_summary = ""
        self._pending_question = ""
        self._turn_count = 0
        self._last_guess = None

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    async def generate_question(self) -> ReverseResult:
        """Ask the strategy for the next question.

        Raises:
            NotStartedError: If start() has not been called
        """
        self._require_started()
        return await self._run_move("generate_question", self.strategy.generate_question)

    async def answer_question(self, answer: ReverseAnswer | str) -> ReverseResult:
        """Record the player's answer to the pending question and move on.

        Args:
            answer: YES, NO or IRRELEVANT

        Returns:
            The oracle's next move (QUESTION or GUESS), or ERROR

        Raises:
            NotStartedError: If start() has not been called
            NoPendingQuestionError: If no question is waiting for an answer
            ValueError: If the answer is not a known label
        """
        self._require_started()
        if not self._pending_question:
            raise NoPendingQuestionError()

        answer = ReverseAnswer(answer.upper())
        epoch = self._epoch.capture()

        self._history.append(Turn(question=self._pending_question, answer=answer))
        self._pending_question = ""
        self._turn_count += 1

        if len(self._history) % self.summary_interval == 0:
            await self._summarize(epoch)
            if not self._epoch.is_current(epoch):
                return ReverseResult.error("Game was reset")

        return await self._run_move("follow_up", self.strategy.follow_up)

    def remove_answer(self, question_text: str) -> int:
        """Retract every answered turn whose question equals the text.

        The UI must remove the question and its answer from its transcript
        together; the engine only filters by question.

        Returns:
            Number of turns removed
        """
        kept = [turn for turn in self._history if turn.question != question_text]
        removed = len(self._history) - len(kept)
        if removed:
            self._history = kept
            self._turn_count -= removed
            logger.info(f"Removed {removed} turn(s) from reverse history")
            self._log_event(f"Retracted answer to: {question_text}")
        return removed

    async def confirm_guess(self, is_correct: bool) -> ReverseResult | None:
        """Tell the session whether the oracle's guess was right.

        Returns:
            None when the guess was correct (the win signal fires), otherwise
            the next question

        Raises:
            NotStartedError: If start() has not been called
        """
        self._require_started()
        if is_correct:
            self.status = GameStatus.WON
            logger.info(f"Reverse game won: session={self.session_id}")
            self._log_event(f"Guess confirmed: {self._last_guess}")
            self.win_signal.emit(
                WinEvent(epoch=self._epoch.current, character=self._last_guess)
            )
            return None

        return await self.generate_question()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _context(self) -> ReverseContext:
        return ReverseContext(
            running_summary=self._running_summary,
            history=list(self._history),
            turn_count=self._turn_count,
        )

    async def _run_move(self, purpose: str, move: Move) -> ReverseResult:
        """Run a strategy move and apply its result if still current."""
        epoch = self._epoch.capture()
        try:
            result = await move(self._bound_oracle(purpose, epoch), self._context())
            self._epoch.ensure_current(epoch)
        except StaleEpochError as e:
            logger.info(f"Discarding {purpose}: {e}")
            return ReverseResult.error("Game was reset")
        except (OracleError, ParseError) as e:
            if not self._epoch.is_current(epoch):
                return ReverseResult.error("Game was reset")
            logger.warning(f"Reverse {purpose} failed: {e}")
            return ReverseResult.error(str(e) or f"Failed to {purpose}")

        if result.result == ReverseResultKind.QUESTION and result.question:
            self._pending_question = result.question
        elif result.result == ReverseResultKind.GUESS:
            self._last_guess = result.guess
        return result

    async def _summarize(self, epoch: int) -> bool:
        """Fold the transcript into the running summary.

        A failed or empty summary leaves the transcript as it was.

        Returns:
            True if the history was compacted
        """
        prompt = self.prompts.render(
            "reverse",
            "summarize.txt",
            summary=format_summary(self._running_summary),
            history=format_history(self._history),
        )
        messages = [ChatMessage(role=Role.SYSTEM, content=prompt)]

        try:
            raw = await self._call_oracle("summarize", epoch, messages, self.SUMMARY_OPTIONS)
        except OracleError as e:
            logger.warning(f"Summarization failed, keeping transcript: {e}")
            return False

        if not self._epoch.is_current(epoch):
            logger.info(f"Discarding summary from epoch {epoch}")
            return False

        summary = raw.strip()
        if not summary:
            logger.warning("Summarization returned nothing, keeping transcript")
            return False

        compacted = len(self._history)
        self._running_summary = summary
        self._history.clear()
        logger.info(f"Summarized {compacted} turn(s) into running summary")
        self._log_event(f"Summarized {compacted} turn(s)")
        return True
