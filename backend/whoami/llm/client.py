"""
LLM client - Provider-agnostic completions for the oracle, using LiteLLM

Provider and model come from the environment (a ``.env`` file is honored):

    LLM_PROVIDER   gemini | openai | anthropic | ollama   (default: gemini)
    LLM_MODEL      provider model name                    (default: gemini-2.5-flash)
"""

import os
import logging
from typing import Any

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_OLLAMA_URL = "http://localhost:11434"

# provider -> (LiteLLM model prefix, environment variable holding the API key)
PROVIDERS: dict[str, tuple[str, str | None]] = {
    "gemini": ("gemini/", "GEMINI_API_KEY"),
    "anthropic": ("anthropic/", "ANTHROPIC_API_KEY"),
    "openai": ("", "OPENAI_API_KEY"),
    "ollama": ("ollama/", None),
}


def get_provider() -> str:
    """Get configured LLM provider"""
    return os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER)


def get_model() -> str:
    """Get configured model name"""
    return os.getenv("LLM_MODEL", DEFAULT_MODEL)


def get_model_string() -> str:
    """Get the full model string for LiteLLM"""
    prefix, _ = PROVIDERS.get(get_provider(), ("", None))
    return f"{prefix}{get_model()}"


async def get_completion(
    messages: list[dict[str, str]],
    model: str | None = None,
    temperature: float = 0.7,
    max_tokens: int = 100,
) -> str:
    """
    Get one non-streaming completion from the configured provider.

    Args:
        messages: List of message dicts with 'role' and 'content'
        model: Optional LiteLLM model string override
        temperature: Sampling temperature (0-1)
        max_tokens: Maximum response length

    Returns:
        The reply text, or an empty string if the model returned none
    """
    import litellm

    model_string = model or get_model_string()
    kwargs: dict[str, Any] = {
        "model": model_string,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "stream": False,
    }
    logger.info(
        f"LLM Request: model={model_string}, messages={len(messages)}, "
        f"temperature={temperature}, max_tokens={max_tokens}"
    )

    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as e:
        logger.error(f"LLM Error: {type(e).__name__}: {e}")
        raise

    choice = response.choices[0]
    content = choice.message.content or ""
    finish_reason = getattr(choice, "finish_reason", "unknown")
    logger.info(f"LLM Response: finish_reason={finish_reason}, length={len(content)}")

    if finish_reason == "length":
        logger.warning(f"Response truncated at max_tokens={max_tokens}")
    if not content:
        logger.warning("LLM returned empty content")
    else:
        logger.debug(f"Response preview: {content[:200]}")

    return content


def configure_api_keys() -> bool:
    """
    Make the configured provider's credentials visible to LiteLLM.

    Returns:
        True if the provider has what it needs to be called
    """
    import litellm

    provider = get_provider()
    if provider not in PROVIDERS:
        logger.warning(f"Unknown LLM provider: {provider}")
        return False

    _, key_name = PROVIDERS[provider]
    if key_name is None:
        base_url = os.getenv("OLLAMA_BASE_URL", DEFAULT_OLLAMA_URL)
        os.environ["OLLAMA_API_BASE"] = base_url
        logger.debug(f"OLLAMA_API_BASE configured: {base_url}")
        return True

    api_key = os.getenv(key_name)
    if not api_key:
        logger.warning(f"{key_name} not found in environment")
        return False

    if provider == "openai":
        litellm.api_key = api_key
    logger.debug(f"{key_name} configured (length: {len(api_key)})")
    return True
