"""
SalaryService -- fixed-salary calculation and payslip issuance.

Responsibility:
    Accept the caller-facing request shape, resolve the employee and the
    month's advances, run ``FixedSalaryCalculator`` and return the rounded
    response.  ``issue_payslips`` turns a batch of requests into stored
    payslips with advance allocations.

Architecture position:
    Services -- imperative shell around the pure engines.  Flushes through
    the repositories; the caller commits.

Invariants enforced:
    - Money is rounded half-up to ``money_places`` only in the response and
      on the stored payslip.
    - ``calculate`` reports the advances taken within the month.
    - Issuing a payslip deducts every unsettled advance taken before the
      period end, oldest-first, never more than gross pay, under a
      per-employee lock.  The part of an advance that does not fit is
      offered again to later payslips.
    - Re-issuing a payslip for the same (period, employee) first releases
      its earlier allocations.
    - A failing employee never aborts the rest of a batch.

Failure modes:
    - ``calculate`` raises EmployeeNotFoundError, NotFixedSalaryEmployeeError,
      InvalidAttendanceError.
    - ``issue_payslips`` reports those as ``BatchFailure`` entries.
    - InvalidPayrollRequestError from ``FixedSalaryRequest.from_dict`` for a
      malformed request; inside ``issue_payslips`` it becomes a
      ``BatchFailure`` like any other per-employee error.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from payroll_config import PayrollConfig
from payroll_engines.advances import AdvanceLedger
from payroll_engines.attendance import AttendanceLedger
from payroll_engines.fixed_salary import FixedSalaryBreakdown, FixedSalaryCalculator, round_money
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import ZERO, Payslip, PayslipItem, PayslipItemKind
from payroll_kernel.exceptions import (
    InvalidAttendanceError,
    InvalidPayrollRequestError,
    PayrollError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.locks import employee_allocation_locks
from payroll_services.repositories import (
    AdvanceRepository,
    EmployeeRepository,
    PayslipRepository,
)
from payroll_services.results import BatchFailure, PayslipBatchResult

logger = get_logger("services.salary")

# Accepted spellings for each request field
_ALIASES = {
    "employee_id": ("employee_id", "employeeId"),
    "year": ("year",),
    "month": ("month",),
    "working_days": ("working_days", "workingDays"),
    "friday_days": ("friday_days", "fridayDays"),
    "normal_leaves": ("normal_leaves", "normalLeaves"),
    "friday_leaves": ("friday_leaves", "fridayLeaves"),
    "holidays": ("holidays",),
    "bonus": ("bonus",),
}


@dataclass(frozen=True)
class FixedSalaryRequest:
    employee_id: UUID
    year: int
    month: int
    working_days: int
    friday_days: int = 0
    normal_leaves: int = 0
    friday_leaves: int = 0
    holidays: int = 0
    bonus: Decimal = ZERO

    @property
    def period(self) -> PayPeriod:
        return PayPeriod(self.year, self.month)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], period: PayPeriod | None = None
    ) -> FixedSalaryRequest:
        """Build from snake_case or camelCase keys; ``period`` fills year/month."""
        values: dict[str, Any] = {}
        for field, keys in _ALIASES.items():
            for key in keys:
                if key in data and data[key] is not None:
                    values[field] = data[key]
                    break
        if period is not None:
            values.setdefault("year", period.year)
            values.setdefault("month", period.month)

        missing = [f for f in ("employee_id", "year", "month", "working_days") if f not in values]
        if missing:
            raise InvalidPayrollRequestError(
                missing[0], None, f"missing required salary request fields: {missing}"
            )

        employee_id = values.pop("employee_id")
        if not isinstance(employee_id, UUID):
            try:
                employee_id = UUID(str(employee_id))
            except ValueError:
                raise InvalidPayrollRequestError(
                    "employee_id", employee_id, "not a valid UUID"
                ) from None

        bonus = values.pop("bonus", ZERO)
        try:
            bonus = Decimal(str(bonus))
        except ArithmeticError:
            raise InvalidPayrollRequestError("bonus", bonus, "not a number") from None
        if not bonus.is_finite():
            raise InvalidPayrollRequestError("bonus", bonus, "not a finite number")

        counts: dict[str, int] = {}
        for field, value in values.items():
            try:
                counts[field] = int(value)
            except (TypeError, ValueError):
                raise InvalidPayrollRequestError(field, value, "not an integer") from None
        try:
            PayPeriod(counts["year"], counts["month"])
        except ValueError as exc:
            raise InvalidPayrollRequestError("month", counts["month"], str(exc)) from None

        return cls(employee_id=employee_id, bonus=bonus, **counts)

    @staticmethod
    def subject_of(data: FixedSalaryRequest | Mapping[str, Any]) -> str:
        """Best-effort employee id of a possibly malformed request, for reporting."""
        if isinstance(data, FixedSalaryRequest):
            return str(data.employee_id)
        for key in _ALIASES["employee_id"]:
            if data.get(key) is not None:
                return str(data[key])
        return "unknown"

    def attendance(self) -> AttendanceLedger:
        return AttendanceLedger(
            working_days=self.working_days,
            friday_days=self.friday_days,
            normal_leaves=self.normal_leaves,
            friday_leaves=self.friday_leaves,
            holidays=self.holidays,
        )


class SalaryService:
    def __init__(
        self,
        employees: EmployeeRepository,
        advances: AdvanceRepository,
        payslips: PayslipRepository,
        config: PayrollConfig | None = None,
    ):
        self._employees = employees
        self._advances = advances
        self._payslips = payslips
        self._config = config or PayrollConfig.with_defaults()
        self._calculator = FixedSalaryCalculator(self._config.friday_multiplier)

    @staticmethod
    def _request(
        request: FixedSalaryRequest | Mapping[str, Any],
        period: PayPeriod | None = None,
    ) -> FixedSalaryRequest:
        if isinstance(request, FixedSalaryRequest):
            return request
        return FixedSalaryRequest.from_dict(request, period)

    def breakdown(self, request: FixedSalaryRequest | Mapping[str, Any]) -> FixedSalaryBreakdown:
        """Unrounded breakdown with every intermediate value."""
        req = self._request(request)
        employee = self._employees.get(req.employee_id)
        period = req.period
        attendance = req.attendance()
        advances = self._advances.find_by_employee_and_window(
            employee.id, period.start, period.end
        )
        return self._calculator.calculate(
            employee=employee,
            period=period,
            attendance=attendance,
            advances=AdvanceLedger(advances),
            bonus=req.bonus,
        )

    def calculate(self, request: FixedSalaryRequest | Mapping[str, Any]) -> dict[str, Any]:
        """Response dict for one fixed-salary request, money rounded."""
        return self.breakdown(request).to_response(self._config.money_places)

    def issue_payslips(
        self,
        period: PayPeriod,
        requests: Iterable[FixedSalaryRequest | Mapping[str, Any]],
    ) -> PayslipBatchResult:
        """Compute and store a payslip per request; failures are isolated."""
        issued: list[Payslip] = []
        failures: list[BatchFailure] = []

        logger.info("fixed_payslip_batch_started", extra={"period": period.label})
        for raw in requests:
            subject = FixedSalaryRequest.subject_of(raw)
            with LogContext.bind(employee_id=subject):
                try:
                    req = self._request(raw, period)
                    if req.period != period:
                        raise InvalidAttendanceError(
                            "month",
                            req.period.label,
                            f"request is not for batch period {period.label}",
                        )
                    issued.append(self._issue_one(period, req))
                except PayrollError as exc:
                    logger.warning("fixed_payslip_failed", exc_info=True)
                    failures.append(BatchFailure.from_error(subject, exc))

        logger.info(
            "fixed_payslip_batch_completed",
            extra={
                "period": period.label,
                "issued": len(issued),
                "failed": len(failures),
            },
        )
        return PayslipBatchResult(payslips=tuple(issued), failures=tuple(failures))

    def _issue_one(self, period: PayPeriod, req: FixedSalaryRequest) -> Payslip:
        employee = self._employees.get(req.employee_id)
        breakdown = self._calculator.calculate(
            employee=employee,
            period=period,
            attendance=req.attendance(),
            bonus=req.bonus,
        )
        places = self._config.money_places
        gross_salary = round_money(breakdown.gross_salary - breakdown.bonus, places)
        gross_bonus = round_money(breakdown.bonus, places)

        with employee_allocation_locks.hold(employee.id):
            existing = self._payslips.get(period, employee.id)
            payslip_id = existing.id if existing else uuid4()
            if existing is not None:
                released = self._advances.release_payslip(existing.id)
                logger.info(
                    "payslip_allocations_released",
                    extra={"payslip_id": str(existing.id), "released": released},
                )

            # Unsettled remainders of earlier months carry forward
            advances = self._advances.find_by_employee_and_window(
                employee.id, None, period.end, for_update=True
            )
            ledger = AdvanceLedger(
                advances, self._advances.allocations_for(a.id for a in advances)
            )
            allocation = ledger.allocate(
                employee.id,
                gross_salary + gross_bonus,
                end=period.end,
                payslip_id=payslip_id,
            )

            items = [
                PayslipItem(
                    kind=PayslipItemKind.SALARY,
                    amount=gross_salary,
                    description=f"Fixed salary {period.label}",
                )
            ]
            if gross_bonus > 0:
                items.append(
                    PayslipItem(
                        kind=PayslipItemKind.BONUS,
                        amount=gross_bonus,
                        description=f"Bonus {period.label}",
                    )
                )

            payslip = Payslip.build(
                id=payslip_id,
                period=period,
                employee_id=employee.id,
                employee_name=employee.name,
                designation_name=employee.designation.name,
                gross_salary=gross_salary,
                gross_bonus=gross_bonus,
                advances_deducted=allocation.total_deducted,
                working_days=req.working_days,
                items=tuple(items),
            )
            self._payslips.upsert(payslip)
            for a in allocation.allocations:
                self._advances.record_allocation(a.advance_id, payslip_id, a.amount)

        logger.info(
            "fixed_payslip_issued",
            extra={
                "payslip_id": str(payslip_id),
                "period": period.label,
                "gross_pay": str(payslip.gross_pay),
                "advances_deducted": str(payslip.advances_deducted),
                "net_pay": str(payslip.net_pay),
            },
        )
        return self._payslips.get(period, employee.id)
