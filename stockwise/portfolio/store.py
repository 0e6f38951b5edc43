"""Holding and savings record storage seam."""

from __future__ import annotations

import copy
from threading import Lock
from typing import Any, Callable, Protocol


class PortfolioStore(Protocol):
    def load_holdings(self) -> list[Any]: ...

    def save_holdings(self, records: list[Any]) -> None: ...

    def update_holdings(self, transform: Callable[[list[Any]], list[Any]]) -> list[Any]: ...

    def load_savings_goals(self) -> list[Any]: ...

    def save_savings_goals(self, rows: list[Any]) -> None: ...


class InMemoryPortfolioStore:
    """Thread-safe process-local store. Callers always receive copies."""

    def __init__(self, holdings: list[Any] | None = None, savings_goals: list[Any] | None = None) -> None:
        self._holdings: list[Any] = copy.deepcopy(holdings or [])
        self._savings_goals: list[Any] = copy.deepcopy(savings_goals or [])
        self._lock = Lock()

    def load_holdings(self) -> list[Any]:
        with self._lock:
            return copy.deepcopy(self._holdings)

    def save_holdings(self, records: list[Any]) -> None:
        with self._lock:
            self._holdings = copy.deepcopy(list(records))

    def update_holdings(self, transform: Callable[[list[Any]], list[Any]]) -> list[Any]:
        """Replace the stored holdings with `transform(current)` in one locked step."""
        with self._lock:
            self._holdings = copy.deepcopy(list(transform(copy.deepcopy(self._holdings))))
            return copy.deepcopy(self._holdings)

    def load_savings_goals(self) -> list[Any]:
        with self._lock:
            return copy.deepcopy(self._savings_goals)

    def save_savings_goals(self, rows: list[Any]) -> None:
        with self._lock:
            self._savings_goals = copy.deepcopy(list(rows))
