"""
Module: payroll_engines.production_pay
Responsibility:
    Salary and bonus for production (variable-pay) workers on one machine
    over a month, from one production entry per day with up to two
    assigned workers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The roster and rate
    table are snapshots handed in by ``PayrollRunService``.

Invariants enforced:
    - Friday is derived from the entry date only.
    - Every resolved assigned worker earns the day's salary
      (``daily_rate * friday_multiplier`` on Fridays), whatever the stitch
      count.
    - The day's bonus is the flat tier amount for the bonus kind, paid only
      when stitches were recorded, and split by eligibility: two eligible
      workers get half each, one eligible worker gets all of it, otherwise
      it is forfeited.
    - At most one entry per calendar day, all inside the period.

Failure modes:
    - RateNotConfiguredError propagates from the rate table.
    - InvalidAttendanceError for entries outside the period, duplicate
      days, or the same worker in both slots.
    - An assignment that does not resolve against the roster is NOT an
      error: an ``UnknownEmployeeWarning`` is recorded on the result and the
      slot counts as bonus-ineligible.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID

from payroll_engines.fixed_salary import MONEY_PLACES, round_money
from payroll_engines.rate_table import RateTable
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.period import PayPeriod, is_friday
from payroll_kernel.domain.values import (
    ZERO,
    BonusKind,
    Employee,
    MachineType,
    ProductionEntry,
    designation_key,
)
from payroll_kernel.exceptions import InvalidAttendanceError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.production_pay")

TWO = Decimal("2")
DEFAULT_BONUS_ELIGIBLE = frozenset({"operator", "karigar"})


@dataclass(frozen=True)
class UnknownEmployeeWarning:
    """An assignment that references an employee missing from the roster."""

    code: ClassVar[str] = "UNKNOWN_EMPLOYEE"

    work_date: date
    slot: str
    employee_id: UUID
    machine_id: UUID | None = None

    @property
    def message(self) -> str:
        return (
            f"Employee {self.employee_id} assigned to slot {self.slot} "
            f"on {self.work_date.isoformat()} was not found"
        )


@dataclass(frozen=True)
class WorkerDayPay:
    """One worker's earnings for one production day."""

    employee_id: UUID
    slot: str
    designation_name: str
    bonus_eligible: bool
    salary: Decimal
    bonus: Decimal

    @property
    def total(self) -> Decimal:
        return self.salary + self.bonus


@dataclass(frozen=True)
class DayResult:
    """Computed pay for one production entry."""

    work_date: date
    is_friday: bool
    bonus_kind: BonusKind
    stitch_count: int
    day_bonus_total: Decimal
    forfeited_bonus: Decimal
    workers: tuple[WorkerDayPay, ...]
    warnings: tuple[UnknownEmployeeWarning, ...] = ()

    @property
    def total_salary(self) -> Decimal:
        return sum((w.salary for w in self.workers), ZERO)

    @property
    def total_bonus(self) -> Decimal:
        return sum((w.bonus for w in self.workers), ZERO)


@dataclass(frozen=True)
class WorkerSummary:
    """Per-employee totals over the period."""

    employee_id: UUID
    employee_name: str
    designation_name: str
    total_salary: Decimal
    total_bonus: Decimal
    working_days_count: int

    @property
    def final_amount(self) -> Decimal:
        return self.total_salary + self.total_bonus

    def to_response(self, places: Decimal = MONEY_PLACES) -> dict[str, Any]:
        return {
            "employee_id": str(self.employee_id),
            "employee_name": self.employee_name,
            "designation": self.designation_name,
            "total_salary": round_money(self.total_salary, places),
            "total_bonus": round_money(self.total_bonus, places),
            "working_days_count": self.working_days_count,
            "final_amount": round_money(self.final_amount, places),
        }


@dataclass(frozen=True)
class ProductionPayResult:
    machine_type: MachineType
    period: PayPeriod
    days: tuple[DayResult, ...]
    summaries: tuple[WorkerSummary, ...]
    warnings: tuple[UnknownEmployeeWarning, ...]
    machine_id: UUID | None = None

    def summary_for(self, employee_id: UUID) -> WorkerSummary | None:
        for summary in self.summaries:
            if summary.employee_id == employee_id:
                return summary
        return None

    def to_response(self, places: Decimal = MONEY_PLACES) -> list[dict[str, Any]]:
        return [s.to_response(places) for s in self.summaries]


class _Accumulator:
    __slots__ = ("employee", "salary", "bonus", "days")

    def __init__(self, employee: Employee):
        self.employee = employee
        self.salary = ZERO
        self.bonus = ZERO
        self.days = 0


class ProductionPayCalculator:
    """
    Production pay for one machine and one month.

    Contract:
        Deterministic for a given roster, rate table and entry list.
        Summaries are ordered by each worker's first appearance.
    Non-goals:
        - Does not deduct advances; see ``AdvanceLedger``.
        - Does not merge workers across machines; see ``PayrollRunService``.
    """

    def __init__(
        self,
        friday_multiplier: Decimal,
        bonus_eligible_designations: frozenset[str] = DEFAULT_BONUS_ELIGIBLE,
    ):
        if friday_multiplier <= 0:
            raise ValueError(f"friday_multiplier must be positive, got {friday_multiplier}")
        self.friday_multiplier = friday_multiplier
        self.bonus_eligible_designations = frozenset(
            designation_key(n) for n in bonus_eligible_designations
        )

    def is_bonus_eligible(self, employee: Employee) -> bool:
        return employee.designation.key in self.bonus_eligible_designations

    @traced_engine(
        "production_pay",
        "1.0",
        fingerprint_fields=("machine_type", "period", "entries"),
    )
    def calculate(
        self,
        machine_type: MachineType,
        period: PayPeriod,
        entries: Sequence[ProductionEntry],
        roster: Mapping[UUID, Employee],
        rates: RateTable,
        machine_id: UUID | None = None,
    ) -> ProductionPayResult:
        self._validate_entries(period, entries)

        totals: dict[UUID, _Accumulator] = {}
        days: list[DayResult] = []
        warnings: list[UnknownEmployeeWarning] = []

        for entry in sorted(entries, key=lambda e: e.work_date):
            day = self.calculate_day(machine_type, entry, roster, rates, machine_id)
            days.append(day)
            warnings.extend(day.warnings)
            for worker in day.workers:
                acc = totals.get(worker.employee_id)
                if acc is None:
                    acc = totals[worker.employee_id] = _Accumulator(
                        roster[worker.employee_id]
                    )
                acc.salary += worker.salary
                acc.bonus += worker.bonus
                acc.days += 1

        summaries = tuple(
            WorkerSummary(
                employee_id=emp_id,
                employee_name=acc.employee.name,
                designation_name=acc.employee.designation.name,
                total_salary=acc.salary,
                total_bonus=acc.bonus,
                working_days_count=acc.days,
            )
            for emp_id, acc in totals.items()
        )

        logger.info(
            "production_pay_calculated",
            extra={
                "machine_type": machine_type.value,
                "machine_id": str(machine_id) if machine_id else None,
                "period": period.label,
                "day_count": len(days),
                "employee_count": len(summaries),
                "warning_count": len(warnings),
            },
        )
        for warning in warnings:
            logger.warning(
                "unknown_employee_assignment",
                extra={
                    "code": warning.code,
                    "work_date": warning.work_date,
                    "slot": warning.slot,
                    "employee_id": str(warning.employee_id),
                },
            )

        return ProductionPayResult(
            machine_type=machine_type,
            period=period,
            days=tuple(days),
            summaries=summaries,
            warnings=tuple(warnings),
            machine_id=machine_id,
        )

    def calculate_day(
        self,
        machine_type: MachineType,
        entry: ProductionEntry,
        roster: Mapping[UUID, Employee],
        rates: RateTable,
        machine_id: UUID | None = None,
    ) -> DayResult:
        """Pay for a single production day."""
        friday = is_friday(entry.work_date)
        factor = self.friday_multiplier if friday else Decimal("1")
        d = entry.work_date

        resolved: list[tuple[str, Employee, Decimal]] = []
        warnings: list[UnknownEmployeeWarning] = []
        for slot, employee_id in entry.assignments:
            employee = roster.get(employee_id)
            if employee is None:
                warnings.append(
                    UnknownEmployeeWarning(
                        work_date=d,
                        slot=slot,
                        employee_id=employee_id,
                        machine_id=machine_id,
                    )
                )
                continue
            daily = rates.daily_rate(machine_type, employee.designation, d.year, d.month)
            resolved.append((slot, employee, daily * factor))

        day_bonus = ZERO
        if entry.stitch_count > 0:
            day_bonus = rates.bonus_rate(machine_type, entry.bonus_kind, entry.stitch_count)

        eligible = [emp.id for _, emp, _ in resolved if self.is_bonus_eligible(emp)]
        if len(eligible) == 2:
            share = day_bonus / TWO
        elif len(eligible) == 1:
            share = day_bonus
        else:
            share = ZERO
        forfeited = day_bonus if not eligible else ZERO

        workers = tuple(
            WorkerDayPay(
                employee_id=emp.id,
                slot=slot,
                designation_name=emp.designation.name,
                bonus_eligible=emp.id in eligible,
                salary=salary,
                bonus=share if emp.id in eligible else ZERO,
            )
            for slot, emp, salary in resolved
        )

        return DayResult(
            work_date=d,
            is_friday=friday,
            bonus_kind=entry.bonus_kind,
            stitch_count=entry.stitch_count,
            day_bonus_total=day_bonus,
            forfeited_bonus=forfeited,
            workers=workers,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _validate_entries(period: PayPeriod, entries: Sequence[ProductionEntry]) -> None:
        seen: set[date] = set()
        for entry in entries:
            if not period.contains(entry.work_date):
                raise InvalidAttendanceError(
                    "work_date", entry.work_date, f"outside period {period.label}"
                )
            if entry.work_date in seen:
                raise InvalidAttendanceError(
                    "work_date", entry.work_date, "more than one entry for the day"
                )
            seen.add(entry.work_date)
            if (
                entry.employee_a_id is not None
                and entry.employee_a_id == entry.employee_b_id
            ):
                raise InvalidAttendanceError(
                    "employee_b_id",
                    entry.employee_b_id,
                    "same employee assigned to both slots",
                )
