from __future__ import annotations

import asyncio
import logging
import os
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from pydantic import ValidationError

from domain.models import InsightsResult, InsightType
from domain.schemas import InsightEntry, InsightsContext, Snapshot
from llm.insights_llm import AdvisoryGenerator, InsightsGenerationError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600

FALLBACK_INSIGHTS: dict[InsightType, InsightEntry] = {
    InsightType.SPENDING: InsightEntry(
        type=InsightType.SPENDING.value,
        title="Spending Pattern",
        message="Unable to analyze spending patterns at this time.",
    ),
    InsightType.SAVING: InsightEntry(
        type=InsightType.SAVING.value,
        title="Saving Opportunity",
        message="Unable to identify saving opportunities at this time.",
    ),
    InsightType.UPCOMING: InsightEntry(
        type=InsightType.UPCOMING.value,
        title="Financial Tip",
        message="Unable to provide financial tips at this time.",
    ),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_insights(raw: Any) -> list[InsightEntry]:
    """
    Coerce generator output into exactly one entry per required type.

    Missing types are filled from FALLBACK_INSIGHTS. Output that is not a list,
    or that carries none of the required types, is rejected.
    """
    if not isinstance(raw, (list, tuple)):
        raise InsightsGenerationError(f"Generator returned {type(raw).__name__}, expected a list")
    try:
        entries = [item if isinstance(item, InsightEntry) else InsightEntry.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise InsightsGenerationError(f"Generator returned malformed entries: {exc}") from exc

    by_type: dict[str, InsightEntry] = {}
    for entry in entries:
        by_type.setdefault(entry.type, entry)
    if not any(kind.value in by_type for kind in InsightType):
        raise InsightsGenerationError("Generator output contains none of the required insight types")

    result: list[InsightEntry] = []
    for kind in InsightType:
        entry = by_type.get(kind.value)
        if entry is None:
            logger.info("InsightsCache filling missing insight type=%s with fallback", kind.value)
            entry = FALLBACK_INSIGHTS[kind].model_copy()
        result.append(entry)
    return result


class InsightsCache:
    """Serves the snapshot's cached insights and refreshes them once per TTL window."""

    def __init__(
        self,
        generator: AdvisoryGenerator,
        ttl_seconds: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._generator = generator
        self.ttl = timedelta(
            seconds=ttl_seconds if ttl_seconds is not None else float(os.getenv("FINTRACK_INSIGHTS_TTL_SECONDS", DEFAULT_TTL_SECONDS))
        )
        self._clock = clock or _utcnow

    def is_stale(self, snapshot: Snapshot, now: datetime | None = None) -> bool:
        last = snapshot.insights_refreshed_at
        if last is None:
            return True
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        return ((now or self._clock()) - last) > self.ttl

    def get(self, snapshot: Snapshot, force_refresh: bool = False) -> InsightsResult:
        if not force_refresh and not self.is_stale(snapshot):
            return InsightsResult(entries=list(snapshot.insights))

        context = InsightsContext.from_snapshot(snapshot)
        logger.info("InsightsCache refresh start forced=%s", force_refresh)
        t = time.perf_counter()
        try:
            entries = normalize_insights(self._generator.generate(context))
        except Exception as exc:
            return self._failed(snapshot, exc, time.perf_counter() - t)
        return self._store(snapshot, entries, time.perf_counter() - t)

    async def get_async(self, snapshot: Snapshot, force_refresh: bool = False) -> InsightsResult:
        """Same as get(), with the generator call run off the event loop."""
        if not force_refresh and not self.is_stale(snapshot):
            return InsightsResult(entries=list(snapshot.insights))

        context = InsightsContext.from_snapshot(snapshot)
        logger.info("InsightsCache async refresh start forced=%s", force_refresh)
        t = time.perf_counter()
        try:
            raw = await asyncio.to_thread(self._generator.generate, context)
            entries = normalize_insights(raw)
        except Exception as exc:
            return self._failed(snapshot, exc, time.perf_counter() - t)
        return self._store(snapshot, entries, time.perf_counter() - t)

    def _store(self, snapshot: Snapshot, entries: list[InsightEntry], elapsed: float) -> InsightsResult:
        snapshot.insights = entries
        snapshot.insights_refreshed_at = self._clock()
        logger.info("InsightsCache refresh complete in %.2fs entries=%d", elapsed, len(entries))
        return InsightsResult(entries=list(entries), refreshed=True)

    def _failed(self, snapshot: Snapshot, exc: Exception, elapsed: float) -> InsightsResult:
        if isinstance(exc, InsightsGenerationError):
            logger.warning("InsightsCache refresh failed after %.2fs: %s", elapsed, exc)
        else:
            logger.exception("InsightsCache generator raised after %.2fs", elapsed)
        return InsightsResult(
            entries=list(snapshot.insights),
            ok=False,
            errors=[str(exc) or exc.__class__.__name__],
        )
