"""
Classic mode API endpoints - The player asks, the oracle answers
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from whoami.engine.characters import get_pool
from whoami.engine.classic.session import ClassicGameSession
from whoami.llm.oracle import get_oracle
from whoami.llm.session_logger import SessionLogger
from whoami.models.game import ClassicResult, GameStatus

router = APIRouter()

# In-memory game sessions (no persistence across restarts)
classic_sessions: dict[str, ClassicGameSession] = {}


class NewClassicGameRequest(BaseModel):
    """Request to start a new classic game"""

    theme: str | None = None
    debug: bool = False  # Write oracle interactions to a session log


class ClassicStateResponse(BaseModel):
    """Public state of a classic session (never the secret character)"""

    session_id: str
    started: bool
    status: GameStatus
    theme: str
    epoch: int


class AskRequest(BaseModel):
    """A yes/no question from the player"""

    session_id: str
    question: str


class AskResponse(BaseModel):
    """The oracle's answer plus the session status after win checks"""

    answer: ClassicResult
    status: GameStatus


def _get_session(session_id: str) -> ClassicGameSession:
    if session_id not in classic_sessions:
        raise HTTPException(status_code=404, detail="Game session not found")
    return classic_sessions[session_id]


def _state(session: ClassicGameSession) -> ClassicStateResponse:
    return ClassicStateResponse(
        session_id=session.session_id,
        started=session.started,
        status=session.status,
        theme=session.theme,
        epoch=session.epoch,
    )


@router.get("/themes")
async def list_themes():
    """List the character themes available for classic games"""
    return {"themes": get_pool().themes}


@router.post("/new", response_model=ClassicStateResponse)
async def new_game(request: NewClassicGameRequest):
    """Start a new classic game session"""
    if request.theme and request.theme not in get_pool().themes:
        raise HTTPException(status_code=404, detail=f"Theme '{request.theme}' not found")

    session = ClassicGameSession(get_oracle(), theme=request.theme)
    if request.debug:
        session.session_logger = SessionLogger(session.session_id, session.mode)

    await session.start()
    classic_sessions[session.session_id] = session
    return _state(session)


@router.post("/ask", response_model=AskResponse)
async def ask_question(request: AskRequest):
    """Ask a yes/no question about the secret character"""
    session = _get_session(request.session_id)
    answer = await session.ask_question(request.question)
    await session.flush_win_checks()

    answer.win = answer.win or session.won_with(request.question)
    return AskResponse(answer=answer, status=session.status)


@router.post("/restart/{session_id}", response_model=ClassicStateResponse)
async def restart_game(session_id: str):
    """Start a new game in an existing session (new character, new epoch)"""
    session = _get_session(session_id)
    await session.start()
    return _state(session)


@router.post("/reset/{session_id}", response_model=ClassicStateResponse)
async def reset_game(session_id: str):
    """Stop the current game of a session"""
    session = _get_session(session_id)
    session.reset()
    return _state(session)


@router.get("/state/{session_id}", response_model=ClassicStateResponse)
async def get_state(session_id: str):
    """Get current session state"""
    return _state(_get_session(session_id))
