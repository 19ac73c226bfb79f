from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from domain.schemas import Snapshot
from infrastructure.persistence.gateway import PersistenceError, PersistenceGateway

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path("data") / "financial-tracker-data.json"


class JsonFileGateway(PersistenceGateway):
    """Stores the snapshot as one JSON document, replaced atomically on save."""

    name = "json_file"

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or os.getenv("FINTRACK_DATA_PATH", str(DEFAULT_DATA_PATH)))

    def load(self) -> Snapshot | None:
        if not self.path.exists():
            logger.info("JsonFileGateway no stored snapshot path=%s", self.path)
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Failed to read {self.path}: {exc}") from exc
        try:
            snapshot = Snapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise PersistenceError(f"Stored snapshot at {self.path} is invalid: {exc}") from exc
        logger.info("JsonFileGateway loaded snapshot path=%s transactions=%d", self.path, len(snapshot.transactions))
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        payload = snapshot.model_dump_json(by_alias=True, indent=2)
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Failed to write {self.path}: {exc}") from exc
        logger.info("JsonFileGateway saved snapshot path=%s bytes=%d", self.path, len(payload))
