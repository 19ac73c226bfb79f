from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snapshot documents use camelCase keys on the wire and snake_case in code."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class Transaction(CamelModel):
    id: int
    date: str = Field(description="Display label, e.g. 'Apr 15'.")
    payee: str = ""
    category: str
    amount: Decimal = Field(description="Positive for income/credit, negative for expense/debit.")
    custom_category: Optional[str] = None


class ProfileData(CamelModel):
    balance: Decimal = Decimal("0")
    monthly_income: Decimal = Decimal("0")
    monthly_expenses: Decimal = Decimal("0")
    monthly_savings: Decimal = Decimal("0")
    monthly_change: Decimal = Decimal("0")
    income_change: Decimal = Decimal("0")
    expenses_change: Decimal = Decimal("0")


class BudgetItem(CamelModel):
    category: str
    spent: Decimal = Decimal("0")
    budget: Decimal
    percent: int = 0


class Goal(CamelModel):
    name: str
    saved: Decimal = Decimal("0")
    target: Decimal
    percent: int = 0


class ChartDataPoint(CamelModel):
    name: str
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")


class ChartData(CamelModel):
    this_month: List[ChartDataPoint] = Field(default_factory=list)
    last_3_months: List[ChartDataPoint] = Field(default_factory=list, alias="last3Months")
    this_year: List[ChartDataPoint] = Field(default_factory=list)


class TransactionCategory(CamelModel):
    id: str
    name: str


class CategoriesData(CamelModel):
    budget_categories: List[TransactionCategory] = Field(default_factory=list)
    expense_categories: List[TransactionCategory] = Field(default_factory=list)
    income_categories: List[TransactionCategory] = Field(default_factory=list)
    category_mappings: Dict[str, str] = Field(default_factory=dict)


class InsightEntry(CamelModel):
    type: str
    title: str
    message: str


class Snapshot(CamelModel):
    """
    Aggregate root for all dashboard state.

    The ledger (`transactions`) is ordered newest-first. `insights` plus
    `insights_refreshed_at` form the insights cache slice.
    """

    profile: ProfileData
    transactions: List[Transaction] = Field(default_factory=list)
    budgets: List[BudgetItem] = Field(default_factory=list)
    goals: List[Goal] = Field(default_factory=list)
    categories: CategoriesData = Field(default_factory=CategoriesData)
    chart_data: ChartData = Field(default_factory=ChartData)
    insights: List[InsightEntry] = Field(default_factory=list)
    insights_refreshed_at: Optional[datetime] = None


class InsightsContext(BaseModel):
    """Summary handed to the advisory generator."""

    profile: ProfileData
    recent_transactions: List[Transaction] = Field(default_factory=list)
    budgets: List[BudgetItem] = Field(default_factory=list)
    goals: List[Goal] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, recent: int = 10) -> "InsightsContext":
        return cls.model_validate(
            {
                "profile": snapshot.profile.model_dump(),
                "recent_transactions": [t.model_dump() for t in snapshot.transactions[:recent]],
                "budgets": [b.model_dump() for b in snapshot.budgets],
                "goals": [g.model_dump() for g in snapshot.goals],
            }
        )
