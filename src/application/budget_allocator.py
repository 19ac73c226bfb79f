from __future__ import annotations

import logging

from application.category_map import CategoryMap
from domain.models import percent_of
from domain.schemas import BudgetItem, Transaction

logger = logging.getLogger(__name__)


class BudgetAllocator:
    """Charges expenses against the budget bucket of their canonical category."""

    def apply(self, budgets: list[BudgetItem], transaction: Transaction, category_map: CategoryMap) -> list[BudgetItem]:
        if transaction.amount >= 0:
            return budgets

        canonical = category_map.resolve(transaction.category)
        item = next((b for b in budgets if b.category == canonical), None)
        if item is None:
            logger.debug("BudgetAllocator no budget for category=%s txn_id=%s", canonical, transaction.id)
            return budgets

        item.spent += abs(transaction.amount)
        item.percent = percent_of(item.spent, item.budget)
        logger.info(
            "BudgetAllocator charged category=%s spent=%s budget=%s percent=%d",
            item.category,
            item.spent,
            item.budget,
            item.percent,
        )
        return budgets
