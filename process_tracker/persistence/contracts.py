"""Persistence contracts shared by the storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..processes.contracts import AppState


class PersistenceError(Exception):
    """A durable read or write failed."""


class ConfigurationError(PersistenceError):
    """Storage credentials or settings are missing."""


class PersistenceAdapter(ABC):
    """Reads and writes the whole AppState. No business logic."""

    @abstractmethod
    def load(self) -> AppState:
        """Return the stored state, or an empty one on first run."""

    @abstractmethod
    def save(self, state: AppState) -> None:
        """Overwrite the stored state."""
