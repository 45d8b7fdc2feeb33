"""
Variable store for NMRI.

A flat table of user variables keyed by exact, case-sensitive name.
Entries keep their index for the lifetime of the store.
"""

from typing import Iterator

import structlog

from nmri.errors import ErrorKind, StoreError
from nmri.models import Variable

logger = structlog.get_logger()


class VariableStore:
    """Append-only-by-name table mapping identifier to last assigned value."""

    def __init__(self, max_variables: int = 100):
        self.max_variables = max_variables
        self._variables: list[Variable] = []

    def find(self, name: str) -> int | None:
        """Return the index of a variable, or None if it is not defined."""
        for index, variable in enumerate(self._variables):
            if variable.name == name:
                return index
        return None

    def set(self, name: str, value: float) -> int:
        """Update a variable in place or append it; returns its index."""
        index = self.find(name)
        if index is not None:
            self._variables[index].value = value
            return index

        if len(self._variables) >= self.max_variables:
            raise StoreError(
                ErrorKind.VARIABLE_STORE_FULL,
                f"Maximum number of variables ({self.max_variables}) reached",
            )

        self._variables.append(Variable(name=name, value=value))
        logger.debug("Variable created", name=name, index=len(self._variables) - 1)
        return len(self._variables) - 1

    def get(self, name: str) -> float | None:
        index = self.find(name)
        return None if index is None else self._variables[index].value

    def snapshot(self) -> dict[str, float]:
        """Copy of the current name -> value table, in creation order."""
        return {variable.name: variable.value for variable in self._variables}

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._variables))

    def __len__(self) -> int:
        return len(self._variables)
