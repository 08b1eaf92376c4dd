"""
Classic mode: the player guesses a character the engine picked.

Each question is answered by the oracle with the secret character in its
system prompt. Independently of that round trip, a win check looks for the
character in the player's question and publishes a WinEvent when it
matches. The win is advisory: the session keeps answering questions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from whoami.engine.characters import CharacterPool, get_default_theme, get_pool
from whoami.engine.errors import OracleError, StaleEpochError
from whoami.engine.session import GameSession
from whoami.engine.win import SubstringWinDetector
from whoami.models.game import (
    APOLOGY_MESSAGE,
    ChatMessage,
    ClassicAnswer,
    ClassicResult,
    CompletionOptions,
    GameStatus,
    Role,
    WinEvent,
)

if TYPE_CHECKING:
    from whoami.engine.protocols import Oracle, WinDetector

logger = logging.getLogger(__name__)

NOT_VALID_MESSAGE = "That's not a valid yes/no question. Please ask a yes/no question."
STALE_MESSAGE = "The game was restarted before this question was answered."


class ClassicGameSession(GameSession):
    """One classic game, reset in place between games.

    Attributes:
        theme: Theme the secret character is drawn from
        pool: Shared CharacterPool (no repeats within the process)
        win_detector: Rule deciding whether a question wins

    Example:
        >>> session = ClassicGameSession(oracle)
        >>> await session.start()
        >>> result = await session.ask_question("Are you a lion?")
        >>> result.result
        <ClassicAnswer.YES: 'YES'>
    """

    mode = "classic"
    ANSWER_OPTIONS = CompletionOptions(temperature=0.7, max_tokens=100)

    def __init__(
        self,
        oracle: "Oracle",
        pool: CharacterPool | None = None,
        win_detector: "WinDetector | None" = None,
        theme: str | None = None,
        **kwargs,
    ):
        """
        Args:
            oracle: The text-completion backend
            pool: Character pool (defaults to the process-wide pool)
            win_detector: Win rule (defaults to SubstringWinDetector)
            theme: Theme to draw characters from
            **kwargs: session_id, session_logger, prompt_loader, parser
        """
        super().__init__(oracle, **kwargs)
        self.pool = pool or get_pool()
        self.win_detector = win_detector or SubstringWinDetector()
        self.theme = theme or get_default_theme()
        self._secret_character = ""
        self._won_questions: set[str] = set()
        self._win_checks: set[asyncio.Task] = set()

    @property
    def secret_character(self) -> str:
        """The character to guess. For tests and debugging only."""
        return self._secret_character

    async def start(self, theme: str | None = None) -> None:
        """Begin a new game with a freshly drawn character.

        Args:
            theme: Optional theme override for this and later games

        Raises:
            NotReadyError: If the oracle is not initialized
            KeyError: If the theme is unknown (the current game is kept)
        """
        self._require_ready()
        character = self.pool.draw(theme or self.theme)

        epoch = self._epoch.advance()
        if theme:
            self.theme = theme
        self._secret_character = character
        self._won_questions.clear()
        self._started = True
        self.status = GameStatus.PLAYING

        logger.info(f"Classic game started: session={self.session_id} epoch={epoch}")
        self._log_event(f"Game started (epoch {epoch}, theme {self.theme})")

    def reset(self) -> None:
        """Stop the current game; in-flight answers become stale."""
        epoch = self._epoch.advance()
        self._started = False
        self._secret_character = ""
        self._won_questions.clear()
        self.status = GameStatus.NOT_STARTED
        logger.info(f"Classic game reset: session={self.session_id} epoch={epoch}")
        self._log_event(f"Game reset (epoch {epoch})")

    async def ask_question(self, question: str) -> ClassicResult:
        """Ask the oracle a yes/no question about the secret character.

        Args:
            question: The player's question

        Returns:
            ClassicResult with YES, NO or NOT_VALID; ERROR if the oracle
            failed; STALE if the game was reset while waiting

        Raises:
            NotStartedError: If start() has not been called
        """
        self._require_started()
        epoch = self._epoch.capture()

        if not question.strip():
            return ClassicResult(
                result=ClassicAnswer.NOT_VALID,
                question=question,
                message=NOT_VALID_MESSAGE,
            )

        self._schedule_win_check(question, self._secret_character, epoch)

        messages = self._build_messages(question)
        try:
            raw = await self._call_oracle("answer", epoch, messages, self.ANSWER_OPTIONS)
        except OracleError as e:
            if not self._epoch.is_current(epoch):
                return self._stale_result(question)
            logger.warning(f"Oracle failed to answer: {e}")
            return ClassicResult(
                result=ClassicAnswer.ERROR,
                question=question,
                reasoning=str(e),
                message=APOLOGY_MESSAGE,
            )

        try:
            self._epoch.ensure_current(epoch)
        except StaleEpochError as e:
            logger.info(f"Discarding answer: {e}")
            return self._stale_result(question)

        parsed = self.parser.parse_answer(raw)
        if not parsed.tagged:
            logger.warning(f"Answer tag missing, fell back to {parsed.answer}")

        result = ClassicAnswer(parsed.answer)
        return ClassicResult(
            result=result,
            question=question,
            win=question in self._won_questions,
            reasoning=parsed.reasoning,
            message=NOT_VALID_MESSAGE if result == ClassicAnswer.NOT_VALID else None,
        )

    def won_with(self, question: str) -> bool:
        """Whether a win check for this exact question has fired this game."""
        return question in self._won_questions

    async def flush_win_checks(self) -> None:
        """Wait until every scheduled win check has finished."""
        while self._win_checks:
            await asyncio.gather(*list(self._win_checks))

    def _build_messages(self, question: str) -> list[ChatMessage]:
        system_prompt = self.prompts.render(
            "classic",
            "answer_system.txt",
            character=self._secret_character,
            theme=self.theme,
        )
        user_prompt = self.prompts.render(
            "classic", "answer_user.txt", question=question
        )
        return [
            ChatMessage(role=Role.SYSTEM, content=system_prompt),
            ChatMessage(role=Role.USER, content=user_prompt),
        ]

    def _stale_result(self, question: str) -> ClassicResult:
        return ClassicResult(
            result=ClassicAnswer.STALE,
            question=question,
            message=STALE_MESSAGE,
        )

    def _schedule_win_check(self, question: str, character: str, epoch: int) -> None:
        task = asyncio.create_task(self._check_win(question, character, epoch))
        self._win_checks.add(task)
        task.add_done_callback(self._win_checks.discard)

    async def _check_win(self, question: str, character: str, epoch: int) -> None:
        try:
            won = await self.win_detector.is_win(question, character)
        except Exception as e:
            logger.warning(f"Win check failed: {type(e).__name__}: {e}")
            return

        if not won:
            return
        if not self._epoch.is_current(epoch):
            logger.debug(f"Dropping win from epoch {epoch}")
            return

        self._won_questions.add(question)
        self.status = GameStatus.WON
        logger.info(f"Classic game won: session={self.session_id} epoch={epoch}")
        self._log_event(f"Won with question: {question}")
        self.win_signal.emit(
            WinEvent(epoch=epoch, question=question, character=character)
        )
