"""
AttendanceLedger -- one employee's attendance counts for one month.

Holidays are carved out of the normal (non-Friday) days and paid at the
Friday rate; Friday leaves come out of the Friday days.
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.exceptions import InvalidAttendanceError

_COUNT_FIELDS = (
    "working_days",
    "friday_days",
    "normal_leaves",
    "friday_leaves",
    "holidays",
)


@dataclass(frozen=True)
class AttendanceLedger:
    """
    Validated attendance counts.

    Guarantees:
        - every count >= 0
        - friday_days <= working_days
        - normal_leaves + holidays <= working_days - friday_days
        - friday_leaves <= friday_days
    """

    working_days: int
    friday_days: int = 0
    normal_leaves: int = 0
    friday_leaves: int = 0
    holidays: int = 0

    def __post_init__(self) -> None:
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidAttendanceError(name, value, "must be a whole number")
            if value < 0:
                raise InvalidAttendanceError(name, value, "cannot be negative")

        if self.friday_days > self.working_days:
            raise InvalidAttendanceError(
                "friday_days",
                self.friday_days,
                f"exceeds working_days ({self.working_days})",
            )

        available = self.working_days - self.friday_days
        if self.normal_leaves > available:
            raise InvalidAttendanceError(
                "normal_leaves",
                self.normal_leaves,
                f"exceeds normal working days ({available})",
            )
        if self.normal_leaves + self.holidays > available:
            raise InvalidAttendanceError(
                "holidays",
                self.holidays,
                f"normal_leaves + holidays exceed normal working days ({available})",
            )

        if self.friday_leaves > self.friday_days:
            raise InvalidAttendanceError(
                "friday_leaves",
                self.friday_leaves,
                f"exceeds friday_days ({self.friday_days})",
            )

    @classmethod
    def for_period(
        cls,
        period: PayPeriod,
        *,
        normal_leaves: int = 0,
        friday_leaves: int = 0,
        holidays: int = 0,
    ) -> AttendanceLedger:
        """Full-month attendance: every calendar day worked, Fridays counted."""
        return cls(
            working_days=period.days_in_month,
            friday_days=period.fridays(),
            normal_leaves=normal_leaves,
            friday_leaves=friday_leaves,
            holidays=holidays,
        )

    @property
    def base_normal_days(self) -> int:
        return max(0, self.working_days - self.friday_days)

    @property
    def normal_days_after_leaves(self) -> int:
        return max(0, self.base_normal_days - self.normal_leaves - self.holidays)

    @property
    def paid_fridays(self) -> int:
        return max(0, self.friday_days - self.friday_leaves)
