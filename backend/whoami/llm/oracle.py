"""
LiteLLM-backed oracle.

Wraps the shared LLM client behind the Oracle protocol and tracks the
model's initialization status, so sessions can refuse to start before the
model is usable.
"""

from __future__ import annotations

import logging

from whoami.engine.errors import OracleError, OracleUnavailableError
from whoami.llm import client
from whoami.models.game import ChatMessage, CompletionOptions, OracleStatus

logger = logging.getLogger(__name__)


class LiteLLMOracle:
    """Production oracle.

    Attributes:
        model: Optional LiteLLM model string override
        status: Current OracleStatus

    Example:
        >>> oracle = LiteLLMOracle()
        >>> await oracle.initialize()
        >>> oracle.is_ready()
        True
        >>> await oracle.complete([ChatMessage(role="user", content="Hi")], CompletionOptions())
        'Hello!'
    """

    def __init__(self, model: str | None = None):
        self.model = model
        self.status = OracleStatus.NOT_INITIALIZED
        self.error: str | None = None

    async def initialize(self) -> OracleStatus:
        """Configure provider credentials and mark the oracle ready.

        Calling this while already ready or initializing is a no-op.

        Returns:
            The resulting status (READY or FAILED)
        """
        if self.status in (OracleStatus.READY, OracleStatus.INITIALIZING):
            return self.status

        self.status = OracleStatus.INITIALIZING
        self.error = None
        try:
            configured = client.configure_api_keys()
        except Exception as e:
            logger.error(f"Failed to initialize oracle: {type(e).__name__}: {e}")
            self.status = OracleStatus.FAILED
            self.error = str(e)
            return self.status

        if not configured:
            self.status = OracleStatus.FAILED
            self.error = f"Provider '{client.get_provider()}' is not configured"
            logger.error(self.error)
            return self.status

        self.status = OracleStatus.READY
        logger.info(f"Oracle ready: model={self.model or client.get_model_string()}")
        return self.status

    def is_ready(self) -> bool:
        return self.status == OracleStatus.READY

    async def complete(
        self,
        messages: list[ChatMessage],
        options: CompletionOptions,
    ) -> str:
        if not self.is_ready():
            raise OracleUnavailableError("Engine not initialized")

        payload = [
            {"role": message.role.value, "content": message.content}
            for message in messages
        ]
        try:
            return await client.get_completion(
                payload,
                model=self.model,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
            )
        except Exception as e:
            raise OracleError(f"{type(e).__name__}: {e}") from e

    async def cleanup(self) -> None:
        """Release the oracle; sessions will refuse to start until re-initialized."""
        if self.status != OracleStatus.NOT_INITIALIZED:
            self.status = OracleStatus.NOT_INITIALIZED
            logger.info("Oracle cleaned up")


# Shared oracle for the API
_oracle: LiteLLMOracle | None = None


def get_oracle() -> LiteLLMOracle:
    """Get the process-wide oracle instance."""
    global _oracle
    if _oracle is None:
        _oracle = LiteLLMOracle()
    return _oracle
