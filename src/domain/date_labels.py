from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

# Fixed English abbreviations so matching does not depend on the process locale.
MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_LEADING_INT_RE = re.compile(r"^\s*(-?\d+)")


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None


def month_label(moment: datetime) -> str:
    return MONTH_ABBREVIATIONS[moment.month - 1]


@dataclass(frozen=True)
class DateLabel:
    """
    A transaction display date such as "Apr 15".

    Only the month abbreviation and day number are known; there is no year,
    so two "Apr" labels a year apart compare equal.
    """

    month: str
    day: int | None

    @classmethod
    def parse(cls, text: str) -> "DateLabel":
        month, _, rest = text.partition(" ")
        return cls(month=month, day=_leading_int(rest) if rest else None)

    def in_month(self, label: str) -> bool:
        return self.month == label


@dataclass(frozen=True)
class WeekRange:
    """A weekly chart bucket name of the form "Apr 1 - Apr 7"."""

    start_day: int
    end_day: int

    @classmethod
    def parse(cls, name: str) -> "WeekRange | None":
        parts = name.split(" - ")
        if len(parts) != 2:
            return None
        start = DateLabel.parse(parts[0]).day
        end = DateLabel.parse(parts[1]).day
        if start is None or end is None:
            return None
        return cls(start_day=start, end_day=end)

    def contains(self, day: int) -> bool:
        return self.start_day <= day <= self.end_day
