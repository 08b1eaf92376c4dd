"""Pydantic models for the Who Am I? engine"""

from whoami.models.game import (
    ChatMessage,
    ClassicAnswer,
    ClassicResult,
    CompletionOptions,
    GameStatus,
    OracleStatus,
    ParsedAnswer,
    ReverseAnswer,
    ReverseContext,
    ReverseResult,
    ReverseResultKind,
    Role,
    Turn,
    WinEvent,
)

__all__ = [
    # Oracle contract
    "ChatMessage",
    "CompletionOptions",
    "OracleStatus",
    "Role",
    # Session state
    "GameStatus",
    "Turn",
    "WinEvent",
    # Classic mode
    "ClassicAnswer",
    "ClassicResult",
    "ParsedAnswer",
    # Reverse mode
    "ReverseAnswer",
    "ReverseContext",
    "ReverseResult",
    "ReverseResultKind",
]
