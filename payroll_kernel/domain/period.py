"""
PayPeriod -- the calendar month a payroll is computed for.

Responsibility:
    Month arithmetic shared by every calculator: the half-open date window
    ``[start, end)``, the number of days used to derive a daily rate, and the
    Friday count used to pre-fill attendance.

Invariants enforced:
    - ``1 <= month <= 12``.
    - ``end`` is the first day of the following month (exclusive bound), so
      advance windows never double-count the boundary day.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date

FRIDAY = calendar.FRIDAY


@dataclass(frozen=True, order=True)
class PayPeriod:
    """A payroll month."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if self.year < 1:
            raise ValueError(f"year must be positive, got {self.year}")

    @classmethod
    def containing(cls, day: date) -> PayPeriod:
        """Period that contains ``day``."""
        return cls(day.year, day.month)

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        """First day of the next month (exclusive bound)."""
        if self.month == 12:
            return date(self.year + 1, 1, 1)
        return date(self.year, self.month + 1, 1)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def fridays(self) -> int:
        """Number of Fridays in the month."""
        return sum(
            1
            for week in calendar.monthcalendar(self.year, self.month)
            if week[FRIDAY] != 0
        )

    def days(self) -> list[date]:
        """Every calendar day of the month, in order."""
        return [date(self.year, self.month, d) for d in range(1, self.days_in_month + 1)]


def is_friday(day: date) -> bool:
    """Friday is derived from the date only, never from a day label."""
    return day.weekday() == FRIDAY
