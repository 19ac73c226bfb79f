from __future__ import annotations

import logging

from domain.date_labels import DateLabel
from domain.schemas import ProfileData, Transaction

logger = logging.getLogger(__name__)


class ProfileAggregator:
    """Keeps the running balance and current-month totals in step with the ledger."""

    def apply(self, profile: ProfileData, transaction: Transaction, current_month_label: str) -> ProfileData:
        amount = transaction.amount
        previous_balance = profile.balance
        profile.balance = previous_balance + amount

        if DateLabel.parse(transaction.date).in_month(current_month_label):
            if amount > 0:
                profile.monthly_income += amount
                profile.income_change += amount
            else:
                profile.monthly_expenses += abs(amount)
                profile.expenses_change -= abs(amount)
            profile.monthly_savings = profile.monthly_income - profile.monthly_expenses
        else:
            logger.debug(
                "ProfileAggregator skipping monthly totals txn_id=%s date=%s current_month=%s",
                transaction.id,
                transaction.date,
                current_month_label,
            )

        # Running sum of per-transaction balance changes, not a true month-over-month figure.
        if previous_balance != 0:
            profile.monthly_change += amount / previous_balance * 100
        return profile
