from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable

from application.budget_allocator import BudgetAllocator
from application.category_map import CategoryMap
from application.chart_bucketer import ChartBucketer
from application.goal_tracker import GoalTracker, band_crossed, find_goal
from application.insights_cache import InsightsCache
from application.profile_aggregator import ProfileAggregator
from application.snapshot_io import export_snapshot, import_snapshot
from domain.date_labels import month_label
from domain.defaults import default_snapshot
from domain.models import ChartPeriod, InsightsResult, MutationResult, percent_of
from domain.schemas import BudgetItem, ChartDataPoint, Goal, Snapshot, Transaction, TransactionCategory
from infrastructure.persistence.gateway import PersistenceError, PersistenceGateway

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _to_decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")


class FinanceEngine:
    """
    Owns the in-memory snapshot and keeps its derived figures consistent.

    Calls are expected to be serialized by the host; nothing here locks.
    Every mutation is persisted as one whole-snapshot write. A failed write
    leaves the in-memory update in place and is reported on the result, so the
    next successful write carries the pending changes.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        insights_cache: InsightsCache | None = None,
        snapshot: Snapshot | None = None,
        clock: Callable[[], datetime] | None = None,
        profile_aggregator: ProfileAggregator | None = None,
        budget_allocator: BudgetAllocator | None = None,
        goal_tracker: GoalTracker | None = None,
        chart_bucketer: ChartBucketer | None = None,
    ):
        self._gateway = gateway
        self._insights_cache = insights_cache
        self._snapshot = snapshot
        self._clock = clock or _local_now
        self._profile_aggregator = profile_aggregator or ProfileAggregator()
        self._budget_allocator = budget_allocator or BudgetAllocator()
        self._goal_tracker = goal_tracker or GoalTracker()
        self._chart_bucketer = chart_bucketer or ChartBucketer()

    @property
    def snapshot(self) -> Snapshot:
        if self._snapshot is None:
            return self.load()
        return self._snapshot

    def load(self) -> Snapshot:
        """Load the stored snapshot, seeding and persisting defaults when there is none."""
        try:
            snapshot = self._gateway.load()
        except PersistenceError as exc:
            logger.warning("Engine load failed, using default data: %s", exc)
            snapshot = None

        if snapshot is None:
            logger.info("Engine seeding default snapshot gateway=%s", self._gateway.name)
            snapshot = default_snapshot()
            self._snapshot = snapshot
            self._persist()
        else:
            self._snapshot = snapshot
        return snapshot

    # ---- transactions ----
    def record_transaction(self, transaction: Transaction | dict[str, Any]) -> MutationResult:
        if not isinstance(transaction, Transaction):
            transaction = Transaction.model_validate(transaction)
        if transaction.custom_category and transaction.category.lower() == "other":
            transaction = transaction.model_copy(update={"category": transaction.custom_category})
        snapshot = self.snapshot
        current_month = month_label(self._clock())
        logger.info(
            "Engine record_transaction start txn_id=%s date=%s category=%s amount=%s current_month=%s",
            transaction.id,
            transaction.date,
            transaction.category,
            transaction.amount,
            current_month,
        )
        t0 = time.perf_counter()

        snapshot.transactions.insert(0, transaction)
        self._profile_aggregator.apply(snapshot.profile, transaction, current_month)

        milestone = False
        if transaction.amount < 0:
            category_map = CategoryMap.from_categories(snapshot.categories)
            self._budget_allocator.apply(snapshot.budgets, transaction, category_map)
        else:
            _, milestone = self._goal_tracker.apply(snapshot.goals, transaction)

        self._chart_bucketer.apply(snapshot.chart_data, transaction, current_month)
        logger.info("Engine derived state updated in %.3fs milestone=%s", time.perf_counter() - t0, milestone)

        errors = self._persist()
        logger.info("Engine record_transaction complete in %.3fs persisted=%s", time.perf_counter() - t0, not errors)
        return MutationResult(snapshot=snapshot, milestone_crossed=milestone, ok=not errors, errors=errors)

    def get_chart_data(self, period: ChartPeriod | str) -> list[ChartDataPoint]:
        period = ChartPeriod(period)
        chart_data = self.snapshot.chart_data
        if period is ChartPeriod.THIS_MONTH:
            return chart_data.this_month
        if period is ChartPeriod.LAST_3_MONTHS:
            return chart_data.last_3_months
        return chart_data.this_year

    # ---- budgets ----
    def update_budget(self, category: str, budget: Decimal | int | str) -> MutationResult:
        item = next((b for b in self.snapshot.budgets if b.category == category), None)
        if item is None:
            raise KeyError(f"Budget not found: {category}")
        amount = _to_decimal(budget)
        if amount <= 0:
            raise ValueError("Budget amount must be positive")

        item.budget = amount
        item.percent = percent_of(item.spent, item.budget)
        logger.info("Engine update_budget category=%s budget=%s percent=%d", category, amount, item.percent)
        return self._result()

    def add_budget_category(self, name: str, budget: Decimal | int | str) -> MutationResult:
        name = name.strip()
        amount = _to_decimal(budget)
        if not name or amount <= 0:
            raise ValueError("A budget category needs a name and a positive budget amount")
        snapshot = self.snapshot
        if any(b.category == name for b in snapshot.budgets):
            raise ValueError(f"Budget category already exists: {name}")

        snapshot.budgets.append(BudgetItem(category=name, spent=Decimal("0"), budget=amount, percent=0))
        if not any(c.name == name for c in snapshot.categories.budget_categories):
            snapshot.categories.budget_categories.append(TransactionCategory(id=_slug(name) or name, name=name))
        logger.info("Engine add_budget_category category=%s budget=%s", name, amount)
        return self._result()

    # ---- goals ----
    def add_goal(self, name: str, target: Decimal | int | str, saved: Decimal | int | str = 0) -> MutationResult:
        name = name.strip()
        target_amount = _to_decimal(target)
        if not name or target_amount <= 0:
            raise ValueError("A goal needs a name and a positive target")
        snapshot = self.snapshot
        if find_goal(snapshot.goals, name) is not None:
            raise ValueError(f"Goal already exists: {name}")

        saved_amount = _to_decimal(saved)
        goal = Goal(name=name, saved=saved_amount, target=target_amount, percent=percent_of(saved_amount, target_amount))
        snapshot.goals.append(goal)
        logger.info("Engine add_goal goal=%s target=%s percent=%d", name, target_amount, goal.percent)
        return self._result(milestone_crossed=goal.percent >= 100)

    def update_goal(
        self,
        name: str,
        saved: Decimal | int | str | None = None,
        target: Decimal | int | str | None = None,
    ) -> MutationResult:
        goal = find_goal(self.snapshot.goals, name)
        if goal is None:
            raise KeyError(f"Goal not found: {name}")
        target_amount = _to_decimal(target) if target is not None else None
        if target_amount is not None and target_amount <= 0:
            raise ValueError("Goal target must be positive")

        progress = self._goal_tracker.set_progress(
            goal,
            saved=_to_decimal(saved) if saved is not None else None,
            target=target_amount,
        )
        # Manual edits only celebrate entering a new band, not every edit of a completed goal.
        return self._result(milestone_crossed=band_crossed(progress.old_percent, progress.new_percent))

    def delete_goal(self, name: str) -> MutationResult:
        snapshot = self.snapshot
        goal = find_goal(snapshot.goals, name)
        if goal is None:
            raise KeyError(f"Goal not found: {name}")
        snapshot.goals.remove(goal)
        logger.info("Engine delete_goal goal=%s", goal.name)
        return self._result()

    # ---- whole-snapshot operations ----
    def export_data(self) -> str:
        return export_snapshot(self.snapshot)

    def import_data(self, document: str | bytes | dict[str, Any]) -> MutationResult:
        """Replace the snapshot with an imported document; invalid documents leave it untouched."""
        snapshot = import_snapshot(document)
        self._snapshot = snapshot
        return self._result()

    def reset(self) -> MutationResult:
        logger.info("Engine reset to default data")
        self._snapshot = default_snapshot()
        return self._result()

    # ---- insights ----
    def get_insights(self, force_refresh: bool = False) -> InsightsResult:
        snapshot = self.snapshot
        if self._insights_cache is None:
            return InsightsResult(entries=list(snapshot.insights))
        result = self._insights_cache.get(snapshot, force_refresh=force_refresh)
        return self._after_refresh(result)

    async def refresh_insights_async(self, force_refresh: bool = False) -> InsightsResult:
        snapshot = self.snapshot
        if self._insights_cache is None:
            return InsightsResult(entries=list(snapshot.insights))
        result = await self._insights_cache.get_async(snapshot, force_refresh=force_refresh)
        if result.refreshed:
            errors = await self._persist_async()
            if errors:
                result.ok = False
                result.errors.extend(errors)
        return result

    def schedule_insights_refresh(self, force_refresh: bool = False) -> asyncio.Task:
        """Start a refresh on the running event loop and return its task."""
        return asyncio.get_running_loop().create_task(self.refresh_insights_async(force_refresh=force_refresh))

    def _after_refresh(self, result: InsightsResult) -> InsightsResult:
        if result.refreshed:
            errors = self._persist()
            if errors:
                result.ok = False
                result.errors.extend(errors)
        return result

    # ---- persistence ----
    def _result(self, milestone_crossed: bool = False) -> MutationResult:
        errors = self._persist()
        return MutationResult(snapshot=self.snapshot, milestone_crossed=milestone_crossed, ok=not errors, errors=errors)

    def _persist(self) -> list[str]:
        t = time.perf_counter()
        try:
            self._gateway.save(self.snapshot)
        except PersistenceError as exc:
            logger.warning("Engine persist failed after %.3fs; in-memory state kept: %s", time.perf_counter() - t, exc)
            return [str(exc) or exc.__class__.__name__]
        logger.info("Engine persisted snapshot in %.3fs gateway=%s", time.perf_counter() - t, self._gateway.name)
        return []

    async def _persist_async(self) -> list[str]:
        """Write a copy of the snapshot from a worker thread, leaving the loop free."""
        # Copy on the loop so mutations recorded during the write cannot tear it.
        snapshot = self.snapshot.model_copy(deep=True)
        t = time.perf_counter()
        try:
            await asyncio.to_thread(self._gateway.save, snapshot)
        except PersistenceError as exc:
            logger.warning("Engine async persist failed after %.3fs; in-memory state kept: %s", time.perf_counter() - t, exc)
            return [str(exc) or exc.__class__.__name__]
        logger.info("Engine persisted snapshot off-loop in %.3fs gateway=%s", time.perf_counter() - t, self._gateway.name)
        return []
