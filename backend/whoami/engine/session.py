"""
Shared plumbing for classic and reverse game sessions.

A session is created once per player and reset in place. Every reset
advances its EpochGuard, so an oracle call issued before the reset can be
recognized as stale when it completes.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from whoami.engine.epoch import EpochGuard
from whoami.engine.errors import NotReadyError, NotStartedError, OracleError
from whoami.engine.events import WinSignal
from whoami.engine.parser import ResponseParser
from whoami.llm.prompt_loader import PromptLoader, get_loader
from whoami.models.game import ChatMessage, CompletionOptions, GameStatus

if TYPE_CHECKING:
    from whoami.engine.protocols import Oracle
    from whoami.llm.session_logger import SessionLogger


class GameSession:
    """Base class holding the state both game modes share.

    Attributes:
        session_id: Unique identifier for this session
        oracle: The text-completion backend
        win_signal: Channel on which WinEvents are published
        status: NOT_STARTED, PLAYING or WON
    """

    mode = "game"

    def __init__(
        self,
        oracle: "Oracle",
        session_id: str | None = None,
        session_logger: "SessionLogger | None" = None,
        prompt_loader: PromptLoader | None = None,
        parser: ResponseParser | None = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.oracle = oracle
        self.session_logger = session_logger
        self.prompts = prompt_loader or get_loader()
        self.parser = parser or ResponseParser()
        self.win_signal = WinSignal()
        self.status = GameStatus.NOT_STARTED
        self._epoch = EpochGuard()
        self._started = False
        self._in_flight = 0

    @property
    def started(self) -> bool:
        return self._started

    @property
    def epoch(self) -> int:
        return self._epoch.current

    @property
    def awaiting_oracle(self) -> bool:
        """True while any oracle request issued by this session is pending."""
        return self._in_flight > 0

    def _require_ready(self) -> None:
        if not self.oracle.is_ready():
            raise NotReadyError()

    def _require_started(self) -> None:
        if not self._started:
            raise NotStartedError()

    def _log_event(self, message: str) -> None:
        if self.session_logger is not None:
            self.session_logger.log_event(message)

    async def _call_oracle(
        self,
        purpose: str,
        epoch: int,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str:
        """Send one request to the oracle.

        Any failure is normalized to OracleError. The in-flight counter
        is restored whatever happens.

        Raises:
            OracleError: On any oracle failure
        """
        self._in_flight += 1
        try:
            raw = await self.oracle.complete(messages, options)
        except OracleError:
            raise
        except Exception as e:
            raise OracleError(f"{type(e).__name__}: {e}") from e
        finally:
            self._in_flight -= 1

        if self.session_logger is not None:
            self.session_logger.log_interaction(purpose, epoch, messages, raw)
        return raw or ""

    def _bound_oracle(self, purpose: str, epoch: int) -> "SessionOracle":
        return SessionOracle(self, purpose, epoch)


class SessionOracle:
    """Oracle view handed to strategies.

    Routes calls through the owning session so they are counted, logged and
    normalized like the session's own calls.
    """

    def __init__(self, session: GameSession, purpose: str, epoch: int):
        self._session = session
        self.purpose = purpose
        self.epoch = epoch

    def is_ready(self) -> bool:
        return self._session.oracle.is_ready()

    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str:
        return await self._session._call_oracle(
            self.purpose, self.epoch, messages, options
        )
