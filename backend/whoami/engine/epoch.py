"""
Session epoch guard.

Every session-resetting operation advances the epoch before any oracle
call is issued. Asynchronous work captures the epoch when it starts and
checks it again when it completes; a mismatch means the session was reset
in the meantime and the completion must be discarded.
"""

from whoami.engine.errors import StaleEpochError


class EpochGuard:
    """Monotonic generation counter for one session.

    Example:
        >>> guard = EpochGuard()
        >>> token = guard.advance()
        >>> guard.is_current(token)
        True
        >>> _ = guard.advance()
        >>> guard.is_current(token)
        False
    """

    def __init__(self) -> None:
        self._epoch = 0

    @property
    def current(self) -> int:
        return self._epoch

    def advance(self) -> int:
        """Start a new generation and return its token."""
        self._epoch += 1
        return self._epoch

    def capture(self) -> int:
        """Token to carry alongside an in-flight request."""
        return self._epoch

    def is_current(self, token: int) -> bool:
        return token == self._epoch

    def ensure_current(self, token: int) -> None:
        """
        Raises:
            StaleEpochError: If the session moved on since ``token`` was captured
        """
        if token != self._epoch:
            raise StaleEpochError(token, self._epoch)
