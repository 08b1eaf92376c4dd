"""
Game models - Pydantic models for oracle messages, turns and session results
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


APOLOGY_MESSAGE = "Sorry, I encountered an error. Please try again."


# =============================================================================
# Oracle Contract Models
# =============================================================================

class Role(str, Enum):
    """Role tag of a message sent to the oracle"""
    SYSTEM = "system"
    USER = "user"


class ChatMessage(BaseModel):
    """Single role-tagged message"""
    role: Role
    content: str


class CompletionOptions(BaseModel):
    """Sampling configuration for one oracle call"""
    temperature: float = 0.7
    max_tokens: int = 100
    stream: bool = False


class OracleStatus(str, Enum):
    """Lifecycle of the backing model"""
    NOT_INITIALIZED = "NOT_INITIALIZED"
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    FAILED = "FAILED"


# =============================================================================
# Session State Models
# =============================================================================

class GameStatus(str, Enum):
    """Coarse session state shared by both modes"""
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    WON = "won"  # Advisory in classic mode, terminal in reverse mode


class ClassicAnswer(str, Enum):
    """Outcome of a classic-mode question"""
    YES = "YES"
    NO = "NO"
    NOT_VALID = "NOT_VALID"
    ERROR = "ERROR"  # Oracle failed, the player can retry
    STALE = "STALE"  # The game changed while the oracle was answering


class ReverseAnswer(str, Enum):
    """Answer the human gives to an oracle question"""
    YES = "YES"
    NO = "NO"
    IRRELEVANT = "IRRELEVANT"


class Turn(BaseModel):
    """One answered question in reverse-mode history"""
    model_config = ConfigDict(frozen=True)

    question: str
    answer: ReverseAnswer


class WinEvent(BaseModel):
    """Published on a session's win signal"""
    won: bool = True
    epoch: int
    question: str | None = None  # Classic: the question that triggered the win
    character: str | None = None


# =============================================================================
# Results
# =============================================================================

class ParsedAnswer(BaseModel):
    """Structured decision extracted from an oracle reply"""
    answer: str
    reasoning: str | None = None
    tagged: bool = False  # True when the value came from a tag, not the fallback


class ClassicResult(BaseModel):
    """Response to a classic-mode question"""
    result: ClassicAnswer
    question: str
    win: bool = False
    reasoning: str | None = None
    message: str | None = None  # User-facing text for ERROR/STALE outcomes


class ReverseResultKind(str, Enum):
    """What the oracle did on its reverse-mode move"""
    QUESTION = "QUESTION"
    GUESS = "GUESS"
    ERROR = "ERROR"


class ReverseResult(BaseModel):
    """Response from a reverse-mode move"""
    result: ReverseResultKind
    question: str | None = None
    guess: str | None = None
    reasoning: str | None = None
    message: str | None = None

    @classmethod
    def error(cls, reasoning: str) -> "ReverseResult":
        return cls(
            result=ReverseResultKind.ERROR,
            reasoning=reasoning,
            message=APOLOGY_MESSAGE,
        )


class ReverseContext(BaseModel):
    """Snapshot of reverse-mode knowledge handed to a question strategy"""
    running_summary: str = ""
    history: list[Turn] = Field(default_factory=list)  # Unsummarized tail, oldest first
    turn_count: int = 0  # Answers this game: summarized ones included, retracted ones not
