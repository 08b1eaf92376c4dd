"""
Prompt Loader - Oracle prompt templates kept as text files, with hot reloading.

Templates live in one subdirectory per game mode:
- classic/ - The oracle answers the player's questions about a secret character
- reverse/ - The oracle asks questions, keeps notes and guesses

Placeholders use ``str.format`` syntax (``{character}``, ``{history}``, ...).
Every template is read when the loader is created; a template edited on disk
is picked up on its next use.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_DIR = Path(__file__).parent / "prompts"

_Key = Tuple[str, str]


class PromptLoader:
    """Caches prompt templates and renders them for the sessions.

    Example:
        >>> loader = PromptLoader()
        >>> loader.render("classic", "answer_user.txt", question="Are you a lion?")
        '<question>Are you a lion?</question>'
    """

    def __init__(self, prompts_dir: Optional[Path] = None):
        """
        Args:
            prompts_dir: Root directory of the templates. Defaults to the
                         prompts/ directory shipped with this package.
        """
        self.prompts_dir = Path(prompts_dir) if prompts_dir is not None else DEFAULT_PROMPTS_DIR
        self._templates: Dict[_Key, str] = {}
        self._mtimes: Dict[_Key, float] = {}

        self.reload_all()

    def _path(self, key: _Key) -> Path:
        category, filename = key
        return self.prompts_dir / category / filename

    def _load(self, key: _Key) -> str:
        path = self._path(key)
        self._templates[key] = path.read_text(encoding="utf-8")
        self._mtimes[key] = path.stat().st_mtime
        return self._templates[key]

    def _is_modified(self, key: _Key, path: Path) -> bool:
        return path.stat().st_mtime > self._mtimes.get(key, 0)

    def get_prompt(self, category: str, filename: str, reload: bool = False) -> str:
        """
        Get a raw template.

        Args:
            category: Game mode subdirectory ('classic' or 'reverse')
            filename: Template file name (e.g. 'answer_system.txt')
            reload: Read the file even if a cached copy exists

        Returns:
            The unrendered template text

        Raises:
            FileNotFoundError: If the template was never loaded and does not exist
        """
        key = (category, filename)
        path = self._path(key)

        if not path.exists():
            if key in self._templates:
                logger.warning(f"Prompt {category}/{filename} deleted, using cached copy")
                return self._templates[key]
            raise FileNotFoundError(f"Prompt template not found: {path}")

        if reload or key not in self._templates:
            return self._load(key)

        if self._is_modified(key, path):
            logger.info(f"Hot reloading modified prompt: {category}/{filename}")
            return self._load(key)

        return self._templates[key]

    def render(self, category: str, filename: str, **values: str) -> str:
        """Fill a template's placeholders and trim surrounding whitespace."""
        return self.get_prompt(category, filename).format(**values).strip()

    def reload_all(self) -> None:
        """Drop the cache and read every template again."""
        self._templates.clear()
        self._mtimes.clear()

        if not self.prompts_dir.is_dir():
            logger.warning(f"Prompts directory does not exist: {self.prompts_dir}")
            return

        for path in sorted(self.prompts_dir.glob("*/*.txt")):
            key = (path.parent.name, path.name)
            try:
                self._load(key)
            except OSError as e:
                logger.error(f"Failed to load prompt {key[0]}/{key[1]}: {e}")

        logger.info(f"Loaded {len(self._templates)} prompt template(s) from {self.prompts_dir}")


# Global instance - created on first use
_loader: Optional[PromptLoader] = None


def get_loader() -> PromptLoader:
    """Get the shared prompt loader."""
    global _loader
    if _loader is None:
        _loader = PromptLoader()
    return _loader
