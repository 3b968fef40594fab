"""
Module: payroll_engines.fixed_salary
Responsibility:
    Monthly pay for fixed-salary employees from an attendance ledger, the
    employee's monthly salary and the advances taken in the month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only employees with a fixed-pay designation and a fixed monthly
      salary are accepted.
    - Holidays replace a normal day and are paid at the Friday rate.
    - ``net_pay = max(0, gross_salary - advances_total)``; every
      intermediate is kept on the breakdown.
    - Full precision internally; rounding happens only in ``to_response``.

Failure modes:
    - NotFixedSalaryEmployeeError for variable-pay employees or a missing
      salary.
    - InvalidAttendanceError is raised earlier, when the ledger is built.

Usage:
    calc = FixedSalaryCalculator(friday_multiplier=Decimal("1.5"))
    breakdown = calc.calculate(
        employee=emp,
        period=PayPeriod(2024, 6),
        attendance=AttendanceLedger(working_days=26, friday_days=4),
        advances=ledger,
    )
    breakdown.net_pay
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

from payroll_engines.advances import AdvanceLedger
from payroll_engines.attendance import AttendanceLedger
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import ZERO, Employee
from payroll_kernel.exceptions import NotFixedSalaryEmployeeError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.fixed_salary")

MONEY_PLACES = Decimal("0.01")


def round_money(value: Decimal, places: Decimal = MONEY_PLACES) -> Decimal:
    return value.quantize(places, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FixedSalaryBreakdown:
    """
    Every step of a fixed-salary calculation.

    Contract:
        Values are unrounded Decimals; ``to_response`` is the only place
        where money is rounded.
    """

    employee_id: UUID
    period: PayPeriod
    attendance: AttendanceLedger
    base_salary: Decimal
    friday_multiplier: Decimal
    per_day: Decimal
    friday_rate: Decimal
    normal_pay: Decimal
    friday_pay: Decimal
    holiday_pay: Decimal
    bonus: Decimal
    gross_salary: Decimal
    advances_total: Decimal
    net_pay: Decimal

    @property
    def base_normal_days(self) -> int:
        return self.attendance.base_normal_days

    @property
    def normal_days_after_leaves(self) -> int:
        return self.attendance.normal_days_after_leaves

    @property
    def paid_fridays(self) -> int:
        return self.attendance.paid_fridays

    def to_response(self, places: Decimal = MONEY_PLACES) -> dict[str, Any]:
        """Caller-facing shape with money rounded half-up to ``places``."""
        a = self.attendance
        return {
            "base_salary": round_money(self.base_salary, places),
            "working_days": a.working_days,
            "friday_days": a.friday_days,
            "normal_leaves": a.normal_leaves,
            "friday_leaves": a.friday_leaves,
            "holidays": a.holidays,
            "total_salary": round_money(self.gross_salary, places),
            "advance_deduction": round_money(self.advances_total, places),
            "bonus": round_money(self.bonus, places),
            "final_salary": round_money(self.net_pay, places),
            "per_day": round_money(self.per_day, places),
            "friday_rate": round_money(self.friday_rate, places),
            "friday_multiplier": self.friday_multiplier,
        }


class FixedSalaryCalculator:
    """
    Fixed monthly salary calculator.

    Contract:
        Deterministic: identical inputs give identical breakdowns.
    Non-goals:
        - Does not allocate advances against specific advance rows; the
          breakdown only reports the window total.  Allocation is done by
          ``AdvanceLedger.allocate`` when a payslip is issued.
    """

    def __init__(self, friday_multiplier: Decimal):
        if friday_multiplier <= 0:
            raise ValueError(f"friday_multiplier must be positive, got {friday_multiplier}")
        self.friday_multiplier = friday_multiplier

    @staticmethod
    def require_fixed_salary(employee: Employee) -> Decimal:
        """Return the employee's monthly salary or raise."""
        designation = employee.designation
        if designation.is_variable_pay:
            raise NotFixedSalaryEmployeeError(
                employee.id, designation.name, "designation is variable-pay"
            )
        if employee.fixed_monthly_salary is None:
            raise NotFixedSalaryEmployeeError(
                employee.id, designation.name, "fixed monthly salary is not set"
            )
        return employee.fixed_monthly_salary

    @traced_engine(
        "fixed_salary",
        "1.0",
        fingerprint_fields=("employee", "period", "attendance", "bonus"),
    )
    def calculate(
        self,
        employee: Employee,
        period: PayPeriod,
        attendance: AttendanceLedger,
        advances: AdvanceLedger | None = None,
        bonus: Decimal = ZERO,
    ) -> FixedSalaryBreakdown:
        monthly = self.require_fixed_salary(employee)
        if bonus < 0:
            raise ValueError(f"bonus cannot be negative, got {bonus}")

        per_day = monthly / period.days_in_month
        friday_rate = per_day * self.friday_multiplier

        normal_pay = attendance.normal_days_after_leaves * per_day
        friday_pay = attendance.paid_fridays * friday_rate
        holiday_pay = attendance.holidays * friday_rate
        gross = normal_pay + friday_pay + holiday_pay + bonus

        advances_total = ZERO
        if advances is not None:
            advances_total = advances.outstanding_total(
                employee.id, period.start, period.end
            )
        net = max(ZERO, gross - advances_total)

        logger.info(
            "fixed_salary_calculated",
            extra={
                "employee_id": str(employee.id),
                "period": period.label,
                "gross_salary": str(gross),
                "advances_total": str(advances_total),
                "net_pay": str(net),
            },
        )

        return FixedSalaryBreakdown(
            employee_id=employee.id,
            period=period,
            attendance=attendance,
            base_salary=monthly,
            friday_multiplier=self.friday_multiplier,
            per_day=per_day,
            friday_rate=friday_rate,
            normal_pay=normal_pay,
            friday_pay=friday_pay,
            holiday_pay=holiday_pay,
            bonus=bonus,
            gross_salary=gross,
            advances_total=advances_total,
            net_pay=net,
        )
