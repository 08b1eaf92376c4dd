"""
Error taxonomy for the game session engine.

Only precondition violations (NotReadyError, NotStartedError) propagate to
callers. Everything else is resolved inside the sessions into a typed
result value so the UI never needs exception handling for oracle flakiness:

    ParseError        -> NOT_VALID / IRRELEVANT sentinel
    StaleEpochError   -> STALE / "Game was reset" result
    OracleError       -> ERROR result
"""


class GameEngineError(Exception):
    """Base class for all engine errors."""


class NotReadyError(GameEngineError):
    """The oracle is not initialized yet."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Inference service is not ready. Please wait for the model to load."
        )


class NotStartedError(GameEngineError):
    """A play operation was called before start()."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Game not started")


class NoPendingQuestionError(NotStartedError):
    """An answer was given while no oracle question is waiting for one."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Game not started or no current question")


class OracleError(GameEngineError):
    """Transport or model failure while talking to the oracle."""


class OracleUnavailableError(OracleError):
    """The backing model is not loaded."""


class ParseError(GameEngineError):
    """An oracle reply did not match the expected grammar."""


class StaleEpochError(GameEngineError):
    """A completion belongs to a session epoch that has since been reset."""

    def __init__(self, captured: int, current: int):
        self.captured = captured
        self.current = current
        super().__init__(
            f"Completion from epoch {captured} discarded (session is at epoch {current})"
        )
