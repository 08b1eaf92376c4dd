"""LLM integration components.

- `client.py`: LiteLLM client wrapper
- `oracle.py`: Oracle implementation on top of the client
- `prompt_loader.py`: Prompt template loading utility
- `session_logger.py`: Per-session oracle interaction logs
"""

from whoami.llm.client import get_completion, get_model_string
from whoami.llm.prompt_loader import get_loader

__all__ = [
    "get_completion",
    "get_model_string",
    "get_loader",
]
