from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from domain.schemas import Snapshot

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("profile", "transactions", "budgets", "goals")


class SnapshotImportError(ValueError):
    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = list(missing or [])


def export_snapshot(snapshot: Snapshot) -> str:
    return snapshot.model_dump_json(by_alias=True, indent=2)


def import_snapshot(document: str | bytes | dict[str, Any]) -> Snapshot:
    """
    Validate an exported document and build a Snapshot from it.

    Accepts the JSON text or an already-decoded dict. The document must carry
    profile, transactions, budgets and goals; other sections fall back to
    empty values.
    """
    if isinstance(document, (str, bytes)):
        try:
            payload = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SnapshotImportError(f"Document is not valid JSON: {exc}") from exc
    else:
        payload = document

    if not isinstance(payload, dict):
        raise SnapshotImportError(f"Document must be a JSON object, got {type(payload).__name__}")

    missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
    if missing:
        raise SnapshotImportError(f"Document is missing required field(s): {', '.join(missing)}", missing=missing)

    try:
        snapshot = Snapshot.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotImportError(f"Document failed validation: {exc}") from exc

    logger.info(
        "Snapshot import accepted transactions=%d budgets=%d goals=%d",
        len(snapshot.transactions),
        len(snapshot.budgets),
        len(snapshot.goals),
    )
    return snapshot
