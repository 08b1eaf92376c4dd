"""
Session-based oracle interaction logger.

Creates human-readable log files for each game session with clearly
separated oracle interactions. Enabled per session (debug mode); regular
application logging goes through the ``logging`` module.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from whoami.models.game import ChatMessage


PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def get_logs_dir() -> Path:
    """Get configured logs directory"""
    return Path(os.getenv("WHOAMI_LOGS_DIR", str(PROJECT_ROOT / "logs")))


class SessionLogger:
    """Logs oracle interactions for a game session to a dedicated file."""

    def __init__(self, session_id: str, mode: str, logs_dir: Path | None = None):
        self.session_id = session_id
        self.mode = mode
        self.logs_dir = Path(logs_dir) if logs_dir is not None else get_logs_dir()
        self.interaction_count = 0
        self.log_file: Path | None = None

    def _ensure_log_file(self) -> Path:
        """Create the log file on first write."""
        if self.log_file is None:
            mode_dir = self.logs_dir / self.mode
            mode_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_file = mode_dir / f"{timestamp}_{self.session_id}.log"

            with open(self.log_file, "w", encoding="utf-8") as f:
                f.write("Who Am I? Session Log\n")
                f.write("=====================\n")
                f.write(f"Session ID: {self.session_id}\n")
                f.write(f"Mode: {self.mode}\n")
                f.write(f"Started: {datetime.now().isoformat()}\n")
                f.write("\n")

        return self.log_file

    def log_interaction(
        self,
        purpose: str,
        epoch: int,
        messages: list["ChatMessage"],
        raw_response: str | None,
    ) -> None:
        """Log one oracle round trip."""
        log_file = self._ensure_log_file()
        self.interaction_count += 1

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        with open(log_file, "a", encoding="utf-8") as f:
            f.write("═" * 70 + "\n")
            f.write(
                f"ORACLE INTERACTION #{self.interaction_count} | {timestamp} | "
                f"{purpose} | epoch {epoch}\n"
            )
            f.write("═" * 70 + "\n\n")

            for message in messages:
                f.write(f"─── {message.role.value.upper()} ───\n")
                f.write(message.content)
                f.write("\n\n")

            f.write("─── RAW RESPONSE ───\n")
            f.write(raw_response or "(empty)")
            f.write("\n\n")

    def log_event(self, message: str) -> None:
        """Log a session lifecycle event (start, reset, win, summary)."""
        log_file = self._ensure_log_file()
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(f"[{timestamp}] {message}\n\n")
