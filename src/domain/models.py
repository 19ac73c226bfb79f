from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.schemas import InsightEntry, Snapshot


class InsightType(str, Enum):
    SPENDING = "spending"
    SAVING = "saving"
    UPCOMING = "upcoming"


class ChartPeriod(str, Enum):
    THIS_MONTH = "thisMonth"
    LAST_3_MONTHS = "last3Months"
    THIS_YEAR = "thisYear"


@dataclass
class GoalProgress:
    name: str
    old_percent: int
    new_percent: int
    milestone_crossed: bool = False


@dataclass
class MutationResult:
    snapshot: "Snapshot"
    milestone_crossed: bool = False
    ok: bool = True
    errors: list[str] = field(default_factory=list)


@dataclass
class InsightsResult:
    entries: list["InsightEntry"]
    refreshed: bool = False
    ok: bool = True
    errors: list[str] = field(default_factory=list)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return int((value + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def percent_of(part: Decimal, whole: Decimal) -> int:
    # A zero or negative denominator has no meaningful percentage.
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)
