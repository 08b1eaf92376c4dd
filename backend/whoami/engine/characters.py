"""
Character pool - secret characters for classic mode, loaded from YAML

Characters are never repeated within a process lifetime: the ``used`` set
only grows. When every character of a theme has been drawn the theme wraps
around (its characters become available again, except the one drawn last).
"""

import logging
import os
import random
import threading
from collections.abc import Iterable
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "characters.yaml"
DEFAULT_THEME = "disney"


def get_default_theme() -> str:
    """Get configured default theme"""
    return os.getenv("WHOAMI_THEME", DEFAULT_THEME)


def load_catalog(path: str | Path | None = None) -> dict[str, list[str]]:
    """
    Load the theme -> characters catalog from a YAML file.

    Args:
        path: Catalog file. Defaults to the bundled characters.yaml

    Returns:
        Mapping of theme name to its characters (duplicates removed, order kept)

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        ValueError: If the file is not a mapping of lists of names
    """
    catalog_path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    if not catalog_path.exists():
        raise FileNotFoundError(f"Character catalog not found: {catalog_path}")

    with open(catalog_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Character catalog must be a mapping of themes: {catalog_path}")

    catalog: dict[str, list[str]] = {}
    for theme, names in data.items():
        if not isinstance(names, list):
            raise ValueError(f"Theme '{theme}' must be a list of character names")
        cleaned = [str(name).strip() for name in names if str(name).strip()]
        catalog[str(theme)] = list(dict.fromkeys(cleaned))

    logger.debug(f"Loaded {len(catalog)} theme(s) from {catalog_path}")
    return catalog


class CharacterPool:
    """Draws characters without repetition.

    Attributes:
        catalog: Theme name -> available characters
        used: Characters drawn so far (across all themes)

    Example:
        >>> pool = CharacterPool({"disney": ["Simba", "Ariel"]})
        >>> first = pool.draw("disney")
        >>> second = pool.draw("disney")
        >>> first != second
        True
    """

    def __init__(
        self,
        catalog: dict[str, Iterable[str]] | Iterable[str],
        rng: random.Random | None = None,
    ):
        """
        Args:
            catalog: Theme mapping, or a plain list of names for a single
                     default theme
            rng: Random source (inject a seeded one for deterministic tests)
        """
        if isinstance(catalog, dict):
            self.catalog = {theme: list(names) for theme, names in catalog.items()}
        else:
            self.catalog = {DEFAULT_THEME: list(catalog)}
        self.used: set[str] = set()
        self._rng = rng or random.Random()
        self._last_drawn: str | None = None
        self._lock = threading.Lock()

    @property
    def themes(self) -> list[str]:
        return list(self.catalog)

    def available(self, theme: str) -> list[str]:
        """Characters of a theme that have not been drawn yet."""
        names = self._names(theme)
        return [name for name in names if name not in self.used]

    def draw(self, theme: str | None = None) -> str:
        """
        Draw one unused character.

        Args:
            theme: Theme to draw from (defaults to the configured theme)

        Returns:
            The character's name

        Raises:
            KeyError: If the theme is unknown
            ValueError: If the theme has no characters at all
        """
        theme = theme or get_default_theme()
        with self._lock:
            names = self._names(theme)
            if not names:
                raise ValueError(f"Theme '{theme}' has no characters")

            remaining = [name for name in names if name not in self.used]
            if not remaining:
                remaining = self._wrap_around(theme, names)

            character = self._rng.choice(remaining)
            self.used.add(character)
            self._last_drawn = character

        logger.info(
            f"Drew character for theme '{theme}' ({len(remaining) - 1} left)"
        )
        return character

    def _wrap_around(self, theme: str, names: list[str]) -> list[str]:
        """Release a fully used theme, keeping the last draw out of reach."""
        logger.info(f"All characters of theme '{theme}' used, starting over")
        self.used.difference_update(names)
        if len(names) > 1 and self._last_drawn in names:
            self.used.add(self._last_drawn)
        return [name for name in names if name not in self.used]

    def _names(self, theme: str) -> list[str]:
        if theme not in self.catalog:
            raise KeyError(f"Unknown theme '{theme}'. Available: {', '.join(self.catalog)}")
        return self.catalog[theme]


# Global pool - the used set lives for the whole process
_pool: CharacterPool | None = None


def get_pool() -> CharacterPool:
    """Get the process-wide character pool."""
    global _pool
    if _pool is None:
        _pool = CharacterPool(load_catalog())
    return _pool
