from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from application.insights_cache import FALLBACK_INSIGHTS, InsightsCache, normalize_insights
from domain.defaults import default_snapshot
from domain.models import InsightType
from domain.schemas import InsightEntry, InsightsContext
from llm.insights_llm import AdvisoryGenerator, InsightsGenerationError

FRESH = [
    InsightEntry(type="spending", title="Dining up", message="Dining spend rose this week."),
    InsightEntry(type="saving", title="Trim streaming", message="Drop one streaming plan."),
    InsightEntry(type="upcoming", title="Car goal", message="Add $50 to New Car."),
]


class _StubGenerator(AdvisoryGenerator):
    def __init__(self, response=None, error: Exception | None = None):
        self.response = FRESH if response is None else response
        self.error = error
        self.calls: list[InsightsContext] = []

    def generate(self, context: InsightsContext):
        self.calls.append(context)
        if self.error is not None:
            raise self.error
        return self.response


class _Clock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class InsightsCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.snapshot = default_snapshot()
        self.clock = _Clock(datetime(2026, 4, 20, 12, 0, tzinfo=timezone.utc))

    def _cache(self, generator: AdvisoryGenerator) -> InsightsCache:
        return InsightsCache(generator, ttl_seconds=3600, clock=self.clock)

    def test_generator_called_at_most_once_within_ttl(self) -> None:
        generator = _StubGenerator()
        cache = self._cache(generator)

        first = cache.get(self.snapshot)
        self.clock.advance(minutes=59)
        second = cache.get(self.snapshot)

        self.assertEqual(len(generator.calls), 1)
        self.assertTrue(first.refreshed)
        self.assertFalse(second.refreshed)
        self.assertEqual(second.entries, FRESH)
        self.assertEqual(self.snapshot.insights_refreshed_at, datetime(2026, 4, 20, 12, 0, tzinfo=timezone.utc))

    def test_force_refresh_always_calls_generator(self) -> None:
        generator = _StubGenerator()
        cache = self._cache(generator)

        cache.get(self.snapshot, force_refresh=True)
        cache.get(self.snapshot, force_refresh=True)

        self.assertEqual(len(generator.calls), 2)

    def test_refreshes_again_after_ttl(self) -> None:
        generator = _StubGenerator()
        cache = self._cache(generator)

        cache.get(self.snapshot)
        self.clock.advance(hours=1, seconds=1)
        result = cache.get(self.snapshot)

        self.assertTrue(result.refreshed)
        self.assertEqual(len(generator.calls), 2)

    def test_generator_receives_recent_summary(self) -> None:
        generator = _StubGenerator()

        self._cache(generator).get(self.snapshot)

        context = generator.calls[0]
        self.assertEqual(context.profile, self.snapshot.profile)
        self.assertEqual(context.recent_transactions, self.snapshot.transactions[:10])
        self.assertEqual(len(context.budgets), 4)
        self.assertEqual(len(context.goals), 2)

    def test_failure_keeps_previous_entries(self) -> None:
        previous = list(self.snapshot.insights)
        generator = _StubGenerator(error=ConnectionError("network down"))

        result = self._cache(generator).get(self.snapshot, force_refresh=True)

        self.assertFalse(result.ok)
        self.assertFalse(result.refreshed)
        self.assertIn("network down", result.errors[0])
        self.assertEqual(result.entries, previous)
        self.assertEqual(self.snapshot.insights, previous)
        self.assertIsNone(self.snapshot.insights_refreshed_at)

    def test_malformed_output_keeps_previous_entries(self) -> None:
        previous = list(self.snapshot.insights)

        result = self._cache(_StubGenerator(response="not a list")).get(self.snapshot)

        self.assertFalse(result.ok)
        self.assertEqual(self.snapshot.insights, previous)

    def test_missing_types_are_filled_with_fallbacks(self) -> None:
        generator = _StubGenerator(response=[FRESH[1]])

        result = self._cache(generator).get(self.snapshot)

        self.assertTrue(result.ok)
        self.assertEqual([e.type for e in result.entries], ["spending", "saving", "upcoming"])
        self.assertEqual(result.entries[0], FALLBACK_INSIGHTS[InsightType.SPENDING])
        self.assertEqual(result.entries[1], FRESH[1])
        self.assertEqual(result.entries[2], FALLBACK_INSIGHTS[InsightType.UPCOMING])

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        self.snapshot.insights_refreshed_at = datetime(2026, 4, 20, 11, 30)

        self.assertFalse(self._cache(_StubGenerator()).is_stale(self.snapshot))


class NormalizeInsightsTests(unittest.TestCase):
    def test_accepts_dicts_and_orders_by_type(self) -> None:
        entries = normalize_insights(
            [
                {"type": "upcoming", "title": "Tip", "message": "m3"},
                {"type": "spending", "title": "Spend", "message": "m1"},
                {"type": "saving", "title": "Save", "message": "m2"},
                {"type": "spending", "title": "Dup", "message": "ignored"},
            ]
        )

        self.assertEqual([e.title for e in entries], ["Spend", "Save", "Tip"])

    def test_rejects_output_without_required_types(self) -> None:
        with self.assertRaises(InsightsGenerationError):
            normalize_insights([{"type": "other", "title": "t", "message": "m"}])
        with self.assertRaises(InsightsGenerationError):
            normalize_insights([])

    def test_rejects_entries_missing_fields(self) -> None:
        with self.assertRaises(InsightsGenerationError):
            normalize_insights([{"type": "spending"}])


class InsightsCacheAsyncTests(unittest.IsolatedAsyncioTestCase):
    async def test_async_refresh_updates_snapshot(self) -> None:
        snapshot = default_snapshot()
        generator = _StubGenerator()
        cache = InsightsCache(generator, ttl_seconds=3600)

        result = await cache.get_async(snapshot)

        self.assertTrue(result.refreshed)
        self.assertEqual(snapshot.insights, FRESH)
        self.assertIsNotNone(snapshot.insights_refreshed_at)

    async def test_async_failure_is_reported(self) -> None:
        snapshot = default_snapshot()
        cache = InsightsCache(_StubGenerator(error=RuntimeError("boom")), ttl_seconds=3600)

        result = await cache.get_async(snapshot, force_refresh=True)

        self.assertFalse(result.ok)
        self.assertEqual(result.errors, ["boom"])
        self.assertEqual(len(snapshot.insights), 3)


if __name__ == "__main__":
    unittest.main()
