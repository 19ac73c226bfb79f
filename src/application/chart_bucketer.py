from __future__ import annotations

import logging
from decimal import Decimal

from domain.date_labels import DateLabel, WeekRange
from domain.schemas import ChartData, ChartDataPoint, Transaction

logger = logging.getLogger(__name__)


def _add_amount(point: ChartDataPoint, amount: Decimal) -> None:
    if amount > 0:
        point.income += amount
    else:
        point.expenses += abs(amount)


class ChartBucketer:
    """
    Routes a transaction's amount into the chart series buckets that cover its date.

    - thisMonth: weekly buckets named "Apr 1 - Apr 7"; only updated for
      transactions dated in the current month.
    - last3Months / thisYear: monthly buckets named by month label.

    A series with no matching bucket is left unchanged.
    """

    def apply(self, chart_data: ChartData, transaction: Transaction, current_month_label: str) -> ChartData:
        label = DateLabel.parse(transaction.date)

        if label.in_month(current_month_label):
            self.update_weekly(chart_data.this_month, label, transaction.amount)
        else:
            logger.debug(
                "ChartBucketer skipping weekly series txn_id=%s month=%s current_month=%s",
                transaction.id,
                label.month,
                current_month_label,
            )

        self.update_monthly(chart_data.last_3_months, label, transaction.amount)
        self.update_monthly(chart_data.this_year, label, transaction.amount)
        return chart_data

    def update_weekly(self, series: list[ChartDataPoint], label: DateLabel, amount: Decimal) -> bool:
        if label.day is None:
            logger.debug("ChartBucketer transaction date has no day month=%s", label.month)
            return False
        for point in series:
            week = WeekRange.parse(point.name)
            if week is not None and week.contains(label.day):
                _add_amount(point, amount)
                return True
        logger.debug("ChartBucketer no weekly bucket for day=%s", label.day)
        return False

    def update_monthly(self, series: list[ChartDataPoint], label: DateLabel, amount: Decimal) -> bool:
        for point in series:
            if point.name == label.month:
                _add_amount(point, amount)
                return True
        logger.debug("ChartBucketer no monthly bucket for month=%s", label.month)
        return False
