"""Unit tests for ClassicGameSession.

Tests cover:
- Readiness and start preconditions
- YES / NO / NOT_VALID answers
- Oracle failures become ERROR results
- Answers from before a restart become STALE
- Win detection and the win signal
- In-flight tracking
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from tests.mocks.oracle import MockOracle
from whoami.engine.classic.session import (
    NOT_VALID_MESSAGE,
    ClassicGameSession,
)
from whoami.engine.errors import NotReadyError, NotStartedError
from whoami.llm.session_logger import SessionLogger
from whoami.models.game import (
    APOLOGY_MESSAGE,
    ClassicAnswer,
    GameStatus,
    Role,
)


class TestClassicStart:
    """Tests for starting and resetting classic games."""

    @pytest.mark.asyncio
    async def test_start_requires_ready_oracle(self, simba_pool) -> None:
        """start() refuses to run before the oracle is ready."""
        session = ClassicGameSession(MockOracle(ready=False), pool=simba_pool)

        with pytest.raises(NotReadyError):
            await session.start()

        assert session.started is False
        assert session.epoch == 0

    @pytest.mark.asyncio
    async def test_start_draws_character(self, classic_session) -> None:
        """start() picks the secret character and advances the epoch."""
        await classic_session.start()

        assert classic_session.started is True
        assert classic_session.secret_character == "Simba"
        assert classic_session.status == GameStatus.PLAYING
        assert classic_session.epoch == 1

    @pytest.mark.asyncio
    async def test_start_with_theme(self, mock_oracle, character_pool) -> None:
        """A theme passed to start() is used for the draw."""
        session = ClassicGameSession(mock_oracle, pool=character_pool)
        await session.start(theme="pixar")

        assert session.theme == "pixar"
        assert session.secret_character in {"Woody", "Nemo"}

    @pytest.mark.asyncio
    async def test_unknown_theme_keeps_current_game(self, mock_oracle, character_pool) -> None:
        """A failed start leaves the running game and its theme untouched."""
        session = ClassicGameSession(mock_oracle, pool=character_pool, theme="disney")
        await session.start()
        secret = session.secret_character

        with pytest.raises(KeyError):
            await session.start(theme="dreamworks")

        assert session.theme == "disney"
        assert session.started is True
        assert session.secret_character == secret
        assert session.epoch == 1

        await session.start()
        assert session.epoch == 2
        assert session.secret_character in {"Simba", "Ariel", "Mickey Mouse", "Elsa", "Goofy"}

    @pytest.mark.asyncio
    async def test_restart_advances_epoch(self, classic_session) -> None:
        """Every start is a new epoch."""
        await classic_session.start()
        await classic_session.start()

        assert classic_session.epoch == 2

    @pytest.mark.asyncio
    async def test_reset_stops_game(self, classic_session) -> None:
        """reset() clears the game and advances the epoch."""
        await classic_session.start()
        classic_session.reset()

        assert classic_session.started is False
        assert classic_session.secret_character == ""
        assert classic_session.status == GameStatus.NOT_STARTED
        assert classic_session.epoch == 2

    @pytest.mark.asyncio
    async def test_ask_before_start(self, classic_session, mock_oracle) -> None:
        """Asking before start() raises NotStartedError."""
        with pytest.raises(NotStartedError):
            await classic_session.ask_question("Are you a lion?")

        mock_oracle.assert_called(0)

    @pytest.mark.asyncio
    async def test_ask_after_reset(self, classic_session) -> None:
        """Asking after reset() raises NotStartedError."""
        await classic_session.start()
        classic_session.reset()

        with pytest.raises(NotStartedError):
            await classic_session.ask_question("Are you a lion?")


class TestClassicAnswers:
    """Tests for answering questions."""

    @pytest.mark.asyncio
    async def test_yes_answer(self, classic_session) -> None:
        """A tagged YES reply becomes a YES result."""
        await classic_session.start()
        result = await classic_session.ask_question("Are you a lion?")

        assert result.result == ClassicAnswer.YES
        assert result.question == "Are you a lion?"
        assert result.reasoning == "Fits the character"
        assert result.message is None

    @pytest.mark.asyncio
    async def test_no_answer(self, classic_session) -> None:
        """A tagged NO reply becomes a NO result."""
        await classic_session.start()
        result = await classic_session.ask_question("Is it Mickey Mouse?")

        assert result.result == ClassicAnswer.NO
        assert result.win is False

    @pytest.mark.asyncio
    async def test_not_valid_answer(self, simba_pool) -> None:
        """NOT_VALID from the oracle carries the hint message."""
        oracle = MockOracle({"default": "<answer>NOT_VALID</answer>"})
        session = ClassicGameSession(oracle, pool=simba_pool)
        await session.start()

        result = await session.ask_question("Tell me a story")

        assert result.result == ClassicAnswer.NOT_VALID
        assert result.message == NOT_VALID_MESSAGE

    @pytest.mark.asyncio
    async def test_untagged_reply_falls_back(self, simba_pool) -> None:
        """Untagged replies are classified lexically."""
        oracle = MockOracle({"default": "No, not at all."})
        session = ClassicGameSession(oracle, pool=simba_pool)
        await session.start()

        result = await session.ask_question("Are you a fish?")

        assert result.result == ClassicAnswer.NO

    @pytest.mark.asyncio
    async def test_blank_question_skips_oracle(self, classic_session, mock_oracle) -> None:
        """A blank question is NOT_VALID without an oracle call."""
        await classic_session.start()
        result = await classic_session.ask_question("   ")

        assert result.result == ClassicAnswer.NOT_VALID
        mock_oracle.assert_called(0)

    @pytest.mark.asyncio
    async def test_prompt_contents(self, classic_session, mock_oracle) -> None:
        """The system prompt names the character and the user prompt wraps the question."""
        await classic_session.start()
        await classic_session.ask_question("Are you a lion?")

        call = mock_oracle.get_last_call()
        system, user = call.messages
        assert system.role == Role.SYSTEM
        assert "Simba" in system.content
        assert user.role == Role.USER
        assert user.content == "<question>Are you a lion?</question>"
        assert call.options.temperature == 0.7
        assert call.options.max_tokens == 100

    @pytest.mark.asyncio
    async def test_oracle_failure_is_error_result(self, classic_session, mock_oracle) -> None:
        """Oracle exceptions never escape ask_question."""
        await classic_session.start()
        mock_oracle.error = RuntimeError("connection refused")

        result = await classic_session.ask_question("Are you a lion?")

        assert result.result == ClassicAnswer.ERROR
        assert result.message == APOLOGY_MESSAGE
        assert "connection refused" in result.reasoning
        assert classic_session.awaiting_oracle is False

    @pytest.mark.asyncio
    async def test_session_usable_after_error(self, classic_session, mock_oracle) -> None:
        """The player can retry after an ERROR result."""
        await classic_session.start()
        mock_oracle.error = RuntimeError("timeout")
        await classic_session.ask_question("Are you a lion?")

        mock_oracle.error = None
        result = await classic_session.ask_question("Are you a lion?")

        assert result.result == ClassicAnswer.YES


class TestClassicEpochs:
    """Tests for stale answers across restarts."""

    @pytest.mark.asyncio
    async def test_answer_after_restart_is_stale(self, classic_session, mock_oracle) -> None:
        """An answer that arrives after a restart is discarded."""
        await classic_session.start()
        gate = mock_oracle.hold_next()

        task = asyncio.create_task(classic_session.ask_question("Are you a lion?"))
        await mock_oracle.wait_for_calls(1)
        assert classic_session.awaiting_oracle is True

        await classic_session.start()
        gate.set()
        result = await task

        assert result.result == ClassicAnswer.STALE
        assert classic_session.awaiting_oracle is False

    @pytest.mark.asyncio
    async def test_failure_after_reset_is_stale(self, classic_session, mock_oracle) -> None:
        """A failure from a previous epoch is reported as STALE, not ERROR."""
        await classic_session.start()
        gate = mock_oracle.hold_next()
        mock_oracle.error = RuntimeError("late failure")

        task = asyncio.create_task(classic_session.ask_question("Are you a lion?"))
        await mock_oracle.wait_for_calls(1)
        classic_session.reset()
        gate.set()

        result = await task
        assert result.result == ClassicAnswer.STALE

    @pytest.mark.asyncio
    async def test_awaiting_flag_lifecycle(self, classic_session, mock_oracle) -> None:
        """awaiting_oracle is set only while a call is pending."""
        await classic_session.start()
        assert classic_session.awaiting_oracle is False

        gate = mock_oracle.hold_next()
        task = asyncio.create_task(classic_session.ask_question("Are you a lion?"))
        await mock_oracle.wait_for_calls(1)
        assert classic_session.awaiting_oracle is True

        gate.set()
        await task
        assert classic_session.awaiting_oracle is False


class TestClassicWin:
    """Tests for win detection."""

    @pytest.mark.asyncio
    async def test_naming_character_wins(self, classic_session) -> None:
        """A question naming the character fires the win signal."""
        events = []
        classic_session.win_signal.subscribe(events.append)
        await classic_session.start()

        result = await classic_session.ask_question("Are you Simba?")
        await classic_session.flush_win_checks()

        assert result.result == ClassicAnswer.YES
        assert classic_session.won_with("Are you Simba?")
        assert classic_session.status == GameStatus.WON
        assert len(events) == 1
        assert events[0].won is True
        assert events[0].epoch == 1
        assert events[0].character == "Simba"

    @pytest.mark.asyncio
    async def test_other_questions_do_not_win(self, classic_session) -> None:
        """Questions without the name never fire the signal."""
        events = []
        classic_session.win_signal.subscribe(events.append)
        await classic_session.start()

        await classic_session.ask_question("Are you a lion?")
        await classic_session.flush_win_checks()

        assert events == []
        assert classic_session.status == GameStatus.PLAYING

    @pytest.mark.asyncio
    async def test_win_is_advisory(self, classic_session) -> None:
        """Questions are still answered after a win."""
        await classic_session.start()
        await classic_session.ask_question("Are you Simba?")
        await classic_session.flush_win_checks()

        result = await classic_session.ask_question("Do you have a mane?")

        assert result.result == ClassicAnswer.YES

    @pytest.mark.asyncio
    async def test_win_from_old_epoch_dropped(self, classic_session) -> None:
        """A win check finishing after a reset does not fire."""
        events = []
        classic_session.win_signal.subscribe(events.append)
        await classic_session.start()

        await classic_session.ask_question("Are you Simba?")
        classic_session.reset()
        await classic_session.flush_win_checks()

        assert events == []
        assert classic_session.status == GameStatus.NOT_STARTED

    @pytest.mark.asyncio
    async def test_win_check_independent_of_oracle(self, classic_session, mock_oracle) -> None:
        """The win fires even when the oracle fails."""
        events = []
        classic_session.win_signal.subscribe(events.append)
        await classic_session.start()
        mock_oracle.error = RuntimeError("down")

        result = await classic_session.ask_question("Is it simba?")
        await classic_session.flush_win_checks()

        assert result.result == ClassicAnswer.ERROR
        assert len(events) == 1

    @pytest.mark.asyncio
    async def test_failing_detector_is_logged(self, mock_oracle, simba_pool) -> None:
        """A broken win detector does not break the game."""

        class BrokenDetector:
            async def is_win(self, question: str, character: str) -> bool:
                raise RuntimeError("detector down")

        session = ClassicGameSession(
            mock_oracle, pool=simba_pool, win_detector=BrokenDetector()
        )
        await session.start()

        result = await session.ask_question("Are you Simba?")
        await session.flush_win_checks()

        assert result.result == ClassicAnswer.YES
        assert session.status == GameStatus.PLAYING


class TestClassicSessionLog:
    """Tests for per-session debug logs."""

    @pytest.mark.asyncio
    async def test_interactions_logged(self, mock_oracle, simba_pool, tmp_path) -> None:
        """Each oracle call is written to the session log."""
        session = ClassicGameSession(mock_oracle, pool=simba_pool, session_id="abc")
        session.session_logger = SessionLogger("abc", "classic", logs_dir=tmp_path)

        await session.start()
        await session.ask_question("Are you a lion?")

        content = session.session_logger.log_file.read_text(encoding="utf-8")
        assert "ORACLE INTERACTION #1" in content
        assert "answer | epoch 1" in content
        assert "Game started" in content


class TestCustomWinDetector:
    """Win detection is swappable."""

    @pytest.mark.asyncio
    async def test_detector_receives_question_and_character(
        self, mock_oracle, simba_pool
    ) -> None:
        """The injected detector decides the win."""
        detector = AsyncMock()
        detector.is_win.return_value = True
        session = ClassicGameSession(mock_oracle, pool=simba_pool, win_detector=detector)
        await session.start()

        await session.ask_question("Do you have a mane?")
        await session.flush_win_checks()

        detector.is_win.assert_awaited_once_with("Do you have a mane?", "Simba")
        assert session.won_with("Do you have a mane?")
