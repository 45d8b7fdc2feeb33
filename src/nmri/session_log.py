"""
Session log sink for NMRI.

Appends timestamped lines to a plain text file while logging is enabled.
Writing is best effort: an I/O failure is reported through structlog,
turns the sink off, and never reaches the evaluation that triggered it.
"""

from datetime import datetime
from pathlib import Path

import structlog

logger = structlog.get_logger()

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class SessionLog:
    """Timestamped, append-only session log file."""

    def __init__(self, path: Path | str = "nmri.log", enabled: bool = False):
        self.path = Path(path)
        self.enabled = False
        if enabled:
            self.enable()

    def enable(self) -> bool:
        """Turn logging on and mark the session start; False if the file is unusable."""
        if self.enabled:
            return True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            logger.warning("Could not open log file", path=str(self.path), error=str(e))
            return False
        self.enabled = True
        self._append(f"\n--- SESSION START on {self._now()} ---\n")
        return True

    def disable(self) -> None:
        """Mark the session stop and turn logging off."""
        if not self.enabled:
            return
        self._append(f"--- SESSION STOP on {self._now()} ---\n\n")
        self.enabled = False

    def set_path(self, path: Path | str) -> None:
        """Switch to a new file, restarting the session there if logging is on."""
        was_enabled = self.enabled
        self.disable()
        self.path = Path(path)
        if was_enabled:
            self.enable()

    def write(self, message: str) -> None:
        """Record one event line; a no-op while logging is off."""
        if not self.enabled:
            return
        if not message.endswith("\n"):
            message += "\n"
        self._append(f"[{self._now()}] {message}")

    def tail(self, lines: int = 20) -> list[str]:
        """Return the last lines of the log file, without line endings."""
        try:
            with open(self.path, encoding="utf-8", errors="replace") as f:
                content = f.read().splitlines()
        except OSError as e:
            logger.warning("Could not read log file", path=str(self.path), error=str(e))
            return []
        return content[-lines:] if lines > 0 else []

    def _append(self, text: str) -> None:
        try:
            with open(self.path, "a", encoding="utf-8", errors="backslashreplace") as f:
                f.write(text)
        except OSError as e:
            logger.warning("Log write failed, disabling session log", path=str(self.path), error=str(e))
            self.enabled = False

    @staticmethod
    def _now() -> str:
        return datetime.now().strftime(TIMESTAMP_FORMAT)
