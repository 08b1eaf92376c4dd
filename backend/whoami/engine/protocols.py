"""
Protocol definitions for the game session engine.

This module defines the interfaces (Protocols) at the seams of the engine.
Using protocols enables:

- Dependency injection for testing (scripted oracles)
- Swappable implementations (win detection, question strategies)
- Type-safe duck typing

Component Flow:
    Session -> prompt -> Oracle -> raw text -> ResponseParser -> result
                                                      |
    Classic: question -> WinDetector -> WinSignal     |
    Reverse: ReverseContext -> QuestionStrategy ------+
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from whoami.models.game import (
        ChatMessage,
        CompletionOptions,
        ReverseContext,
        ReverseResult,
    )


@runtime_checkable
class Oracle(Protocol):
    """Protocol for the text-completion backend.

    The engine depends only on this contract, not on how the model is
    hosted.

    Example implementations:
        - LiteLLMOracle: Production oracle backed by LiteLLM
        - MockOracle: Scripted replies for tests
    """

    def is_ready(self) -> bool:
        """Whether the backing model is loaded and can answer."""
        ...

    async def complete(
        self,
        messages: list["ChatMessage"],
        options: "CompletionOptions",
    ) -> str:
        """Return one completion for the role-tagged messages.

        Args:
            messages: Ordered system/user messages
            options: Sampling configuration

        Returns:
            The completion text

        Raises:
            OracleUnavailableError: If the model is not loaded
            OracleError: On transport or model failure
        """
        ...


@runtime_checkable
class WinDetector(Protocol):
    """Protocol for deciding whether a classic-mode question wins the game.

    Example implementations:
        - SubstringWinDetector: Case-insensitive name match in the question
    """

    async def is_win(self, question: str, character: str) -> bool:
        """Check whether the question identifies the secret character.

        Args:
            question: The player's literal question
            character: The secret character

        Returns:
            True if the player has guessed the character
        """
        ...


@runtime_checkable
class QuestionStrategy(Protocol):
    """Protocol for how the oracle plays reverse mode.

    Strategies build prompts and interpret replies; the session owns
    state, epochs and error recovery. Strategies may raise OracleError or
    ParseError, which the session turns into ERROR results.

    Example implementations:
        - AskOnlyStrategy: Raw reply is the question, always keeps asking
        - GuessingStrategy: Tagged grammar, proposes a guess when confident
    """

    async def generate_question(
        self,
        oracle: Oracle,
        context: "ReverseContext",
    ) -> "ReverseResult":
        """Produce the next question.

        Args:
            oracle: Oracle to query (calls are tracked by the session)
            context: Running summary and unsummarized history

        Returns:
            A QUESTION result
        """
        ...

    async def follow_up(
        self,
        oracle: Oracle,
        context: "ReverseContext",
    ) -> "ReverseResult":
        """Produce the move that follows a recorded answer.

        Args:
            oracle: Oracle to query (calls are tracked by the session)
            context: Running summary and history including the new answer

        Returns:
            A QUESTION or GUESS result
        """
        ...
