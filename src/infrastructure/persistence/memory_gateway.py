from __future__ import annotations

from pydantic import ValidationError

from domain.schemas import Snapshot
from infrastructure.persistence.gateway import PersistenceError, PersistenceGateway


class InMemoryGateway(PersistenceGateway):
    """Keeps serialized snapshots in a dict; every load returns an independent copy."""

    name = "memory"

    def __init__(self, key: str = "financial-tracker-data"):
        self._key = key
        self._store: dict[str, str] = {}

    def load(self) -> Snapshot | None:
        raw = self._store.get(self._key)
        if raw is None:
            return None
        try:
            return Snapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise PersistenceError(f"Stored snapshot is invalid: {exc}") from exc

    def save(self, snapshot: Snapshot) -> None:
        self._store[self._key] = snapshot.model_dump_json(by_alias=True)

    def clear(self) -> None:
        self._store.pop(self._key, None)
