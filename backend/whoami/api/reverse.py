"""
Reverse mode API endpoints - The oracle asks, the player answers
"""

from enum import Enum

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from whoami.engine.reverse.session import ReverseGameSession
from whoami.engine.reverse.strategies import AskOnlyStrategy, GuessingStrategy
from whoami.llm.oracle import get_oracle
from whoami.llm.session_logger import SessionLogger
from whoami.models.game import GameStatus, ReverseAnswer, ReverseResult, Turn

router = APIRouter()

# In-memory game sessions (no persistence across restarts)
reverse_sessions: dict[str, ReverseGameSession] = {}


class StrategyName(str, Enum):
    """Selectable reverse-mode strategies

    Attributes:
        ASK_ONLY: Raw reply is the question, the oracle never guesses
        GUESSING: Tagged grammar, the oracle guesses when confident
    """

    ASK_ONLY = "ask_only"
    GUESSING = "guessing"


class NewReverseGameRequest(BaseModel):
    """Request to start a new reverse game"""

    strategy: StrategyName = StrategyName.ASK_ONLY
    debug: bool = False  # Write oracle interactions to a session log


class MoveResponse(BaseModel):
    """The oracle's move plus the session status"""

    session_id: str
    move: ReverseResult | None = None
    status: GameStatus


class AnswerRequest(BaseModel):
    """The player's answer to the pending question"""

    session_id: str
    answer: ReverseAnswer


class RemoveAnswerRequest(BaseModel):
    """Retract the answer given to a question"""

    session_id: str
    question: str


class ConfirmGuessRequest(BaseModel):
    """Whether the oracle's guess was right"""

    session_id: str
    correct: bool


class ReverseStateResponse(BaseModel):
    """Current state of a reverse session"""

    session_id: str
    started: bool
    status: GameStatus
    epoch: int
    history: list[Turn]
    running_summary: str
    pending_question: str
    turn_count: int


def _get_session(session_id: str) -> ReverseGameSession:
    if session_id not in reverse_sessions:
        raise HTTPException(status_code=404, detail="Game session not found")
    return reverse_sessions[session_id]


def _move(session: ReverseGameSession, move: ReverseResult | None) -> MoveResponse:
    return MoveResponse(session_id=session.session_id, move=move, status=session.status)


def _state(session: ReverseGameSession) -> ReverseStateResponse:
    return ReverseStateResponse(
        session_id=session.session_id,
        started=session.started,
        status=session.status,
        epoch=session.epoch,
        history=session.history,
        running_summary=session.running_summary,
        pending_question=session.pending_question,
        turn_count=session.turn_count,
    )


@router.post("/new", response_model=MoveResponse)
async def new_game(request: NewReverseGameRequest):
    """Start a new reverse game and return the first question"""
    if request.strategy == StrategyName.GUESSING:
        strategy = GuessingStrategy()
    else:
        strategy = AskOnlyStrategy()

    session = ReverseGameSession(get_oracle(), strategy=strategy)
    if request.debug:
        session.session_logger = SessionLogger(session.session_id, session.mode)

    first = await session.start()
    reverse_sessions[session.session_id] = session
    return _move(session, first)


@router.post("/answer", response_model=MoveResponse)
async def answer_question(request: AnswerRequest):
    """Answer the pending question and get the oracle's next move"""
    session = _get_session(request.session_id)
    move = await session.answer_question(request.answer)
    return _move(session, move)


@router.post("/question/{session_id}", response_model=MoveResponse)
async def next_question(session_id: str):
    """Ask the oracle for a new question (e.g. retry after an error)"""
    session = _get_session(session_id)
    move = await session.generate_question()
    return _move(session, move)


@router.post("/remove", response_model=ReverseStateResponse)
async def remove_answer(request: RemoveAnswerRequest):
    """Retract an answered question from the history"""
    session = _get_session(request.session_id)
    session.remove_answer(request.question)
    return _state(session)


@router.post("/confirm", response_model=MoveResponse)
async def confirm_guess(request: ConfirmGuessRequest):
    """Confirm or reject the oracle's guess"""
    session = _get_session(request.session_id)
    move = await session.confirm_guess(request.correct)
    return _move(session, move)


@router.post("/restart/{session_id}", response_model=MoveResponse)
async def restart_game(session_id: str):
    """Start a new game in an existing session"""
    session = _get_session(session_id)
    first = await session.start()
    return _move(session, first)


@router.post("/reset/{session_id}", response_model=ReverseStateResponse)
async def reset_game(session_id: str):
    """Stop the current game of a session"""
    session = _get_session(session_id)
    session.reset()
    return _state(session)


@router.get("/state/{session_id}", response_model=ReverseStateResponse)
async def get_state(session_id: str):
    """Get current session state"""
    return _state(_get_session(session_id))
