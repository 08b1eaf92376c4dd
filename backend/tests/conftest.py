"""
Shared pytest fixtures for the Who Am I? backend tests.

This module provides:
- mock_oracle: Scripted oracle with classic-mode answers
- character_pool: Small deterministic CharacterPool
- classic_session / reverse_session: Sessions wired to the mocks
- Custom markers for test categorization
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from whoami.engine.characters import CharacterPool  # noqa: E402
from whoami.engine.classic.session import ClassicGameSession  # noqa: E402
from whoami.engine.reverse.session import ReverseGameSession  # noqa: E402
from tests.mocks.oracle import MockOracle, create_reverse_oracle  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line(
        "markers", "e2e: marks tests as end-to-end tests requiring real LLM"
    )


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def sample_catalog() -> dict[str, list[str]]:
    """A small two-theme catalog."""
    return {
        "disney": ["Simba", "Ariel", "Mickey Mouse", "Elsa", "Goofy"],
        "pixar": ["Woody", "Nemo"],
    }


@pytest.fixture
def character_pool(sample_catalog) -> CharacterPool:
    """Deterministic pool over the sample catalog."""
    return CharacterPool(sample_catalog, rng=random.Random(42))


@pytest.fixture
def simba_pool() -> CharacterPool:
    """Pool whose only character is Simba."""
    return CharacterPool({"disney": ["Simba"]})


# =============================================================================
# Oracle Fixtures
# =============================================================================


@pytest.fixture
def mock_oracle() -> MockOracle:
    """Oracle answering NO about Mickey Mouse and YES otherwise."""
    return MockOracle(
        responses={
            "is it mickey mouse?": (
                "<response><reasoning>Not Mickey</reasoning>"
                "<answer>NO</answer></response>"
            ),
            "default": (
                "<response><reasoning>Fits the character</reasoning>"
                "<answer>YES</answer></response>"
            ),
        }
    )


@pytest.fixture
def reverse_oracle() -> MockOracle:
    """Oracle asking numbered questions and summarizing on request."""
    return create_reverse_oracle()


# =============================================================================
# Session Fixtures
# =============================================================================


@pytest.fixture
def classic_session(mock_oracle, simba_pool) -> ClassicGameSession:
    """Classic session whose secret character will be Simba."""
    return ClassicGameSession(mock_oracle, pool=simba_pool, theme="disney")


@pytest.fixture
def reverse_session(reverse_oracle) -> ReverseGameSession:
    """Reverse session using the default ask-only strategy."""
    return ReverseGameSession(reverse_oracle)
