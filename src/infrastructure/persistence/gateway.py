from __future__ import annotations

from abc import ABC, abstractmethod

from domain.schemas import Snapshot


class PersistenceError(RuntimeError):
    pass


class PersistenceGateway(ABC):
    """Load/save contract for the whole snapshot document."""

    name: str = "gateway"

    @abstractmethod
    def load(self) -> Snapshot | None:
        """Return the stored snapshot, or None when nothing has been stored yet."""
        raise NotImplementedError

    @abstractmethod
    def save(self, snapshot: Snapshot) -> None:
        """Write the full snapshot in one step; raise PersistenceError on failure."""
        raise NotImplementedError
