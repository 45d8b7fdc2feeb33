"""Bounded command history for the interactive session."""


class CommandHistory:
    """Keeps the most recent commands, oldest first."""

    def __init__(self, size: int = 20):
        self.size = size
        self._entries: list[str] = []

    def add(self, command: str) -> None:
        """Record a command, skipping blanks, 'history' itself and repeats of the last entry."""
        command = command.strip()
        if not command or command == "history":
            return
        if self._entries and self._entries[-1] == command:
            return
        if len(self._entries) >= self.size:
            self._entries.pop(0)
        self._entries.append(command)

    def entries(self) -> list[str]:
        return self._entries.copy()

    def __len__(self) -> int:
        return len(self._entries)
