"""
EmployeeService -- employee records and their cash advances.

Invariants enforced:
    - An employee has a fixed monthly salary if and only if the designation
      is fixed-pay, and that salary is positive.
    - Employee codes are ``<prefix><n>`` where ``n`` is one more than the
      largest number issued so far.
    - Advances are positive and, once recorded, never edited.

Failure modes:
    - EmployeeNotFoundError, DesignationNotFoundError.
    - InvalidEmployeeError for a broken salary/designation pairing or an
      empty name.
    - NotFixedSalaryEmployeeError when setting a salary on a variable-pay
      employee.
    - InvalidAdvanceError for a non-positive advance.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from payroll_config import PayrollConfig
from payroll_engines.advances import AdvanceLedger
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import Designation, Employee, EmployeeAdvance
from payroll_kernel.exceptions import (
    InvalidAdvanceError,
    InvalidEmployeeError,
    NotFixedSalaryEmployeeError,
)
from payroll_kernel.logging_config import get_logger
from payroll_services.repositories import (
    AdvanceRepository,
    DesignationRepository,
    EmployeeRepository,
)

logger = get_logger("services.employee")


@dataclass(frozen=True)
class AdvanceSummary:
    employee_id: UUID
    period: PayPeriod
    total: Decimal
    advance_count: int
    unallocated: Decimal


def _check_salary(designation: Designation, salary: Decimal | None) -> Decimal | None:
    if designation.is_variable_pay:
        if salary is not None:
            raise InvalidEmployeeError(
                "fixed_monthly_salary",
                f"not allowed for variable-pay designation '{designation.name}'",
            )
        return None
    if salary is None:
        raise InvalidEmployeeError(
            "fixed_monthly_salary",
            f"required for fixed-pay designation '{designation.name}'",
        )
    if salary <= 0:
        raise InvalidEmployeeError("fixed_monthly_salary", "must be positive")
    return salary


class EmployeeService:
    def __init__(
        self,
        employees: EmployeeRepository,
        designations: DesignationRepository,
        advances: AdvanceRepository,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ):
        self._employees = employees
        self._designations = designations
        self._advances = advances
        self._config = config or PayrollConfig.with_defaults()
        self._clock = clock or SystemClock()

    def create(
        self,
        name: str,
        designation_id: UUID,
        fixed_monthly_salary: Decimal | None = None,
        *,
        father_name: str | None = None,
        cnic: str | None = None,
        phone: str | None = None,
        city: str | None = None,
    ) -> Employee:
        clean = (name or "").strip()
        if not clean:
            raise InvalidEmployeeError("name", "cannot be empty")
        designation = self._designations.get(designation_id)
        salary = _check_salary(designation, fixed_monthly_salary)

        emp_number = self._employees.max_emp_number() + 1
        employee = self._employees.add(
            emp_number=emp_number,
            emp_code=f"{self._config.employee_code_prefix}{emp_number}",
            name=clean,
            designation_id=designation.id,
            fixed_monthly_salary=salary,
            father_name=father_name,
            cnic=cnic,
            phone=phone,
            city=city,
        )
        logger.info(
            "employee_created",
            extra={
                "employee_id": str(employee.id),
                "emp_code": employee.emp_code,
                "designation": designation.name,
            },
        )
        return employee

    def get(self, employee_id: UUID) -> Employee:
        return self._employees.get(employee_id)

    def list(self) -> list[Employee]:
        return self._employees.list()

    def list_by_designations(self, designation_ids: Iterable[UUID]) -> list[Employee]:
        return self._employees.list_by_designations(designation_ids)

    def change_designation(
        self,
        employee_id: UUID,
        designation_id: UUID,
        fixed_monthly_salary: Decimal | None = None,
    ) -> Employee:
        """
        Move an employee to another designation.

        Moving to a variable-pay designation clears the fixed salary.  Moving
        to a fixed-pay designation keeps the current salary unless a new one
        is given; either way a positive salary must result.
        """
        employee = self._employees.get(employee_id)
        designation = self._designations.get(designation_id)

        if designation.is_variable_pay:
            salary = None
        else:
            salary = _check_salary(
                designation,
                fixed_monthly_salary
                if fixed_monthly_salary is not None
                else employee.fixed_monthly_salary,
            )

        updated = self._employees.set_designation(employee.id, designation.id, salary)
        logger.info(
            "employee_designation_changed",
            extra={
                "employee_id": str(employee.id),
                "from_designation": employee.designation.name,
                "to_designation": designation.name,
                "salary_cleared": salary is None and employee.fixed_monthly_salary is not None,
            },
        )
        return updated

    def update_fixed_salary(self, employee_id: UUID, amount: Decimal) -> Employee:
        employee = self._employees.get(employee_id)
        if employee.designation.is_variable_pay:
            raise NotFixedSalaryEmployeeError(
                employee.id, employee.designation.name, "designation is variable-pay"
            )
        salary = _check_salary(employee.designation, amount)
        updated = self._employees.set_designation(employee.id, employee.designation.id, salary)
        logger.info(
            "employee_salary_updated",
            extra={"employee_id": str(employee.id), "fixed_monthly_salary": str(salary)},
        )
        return updated

    def record_advance(
        self,
        employee_id: UUID,
        amount: Decimal,
        taken_on: date | None = None,
        note: str | None = None,
    ) -> EmployeeAdvance:
        employee = self._employees.get(employee_id)
        if amount <= 0:
            raise InvalidAdvanceError(employee.id, str(amount))
        advance = self._advances.add(
            employee.id, amount, taken_on or self._clock.today(), note
        )
        logger.info(
            "advance_recorded",
            extra={
                "employee_id": str(employee.id),
                "advance_id": str(advance.id),
                "amount": str(amount),
                "taken_on": advance.taken_on,
            },
        )
        return advance

    def advances_for(
        self,
        employee_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> list[EmployeeAdvance]:
        employee = self._employees.get(employee_id)
        return self._advances.find_by_employee_and_window(employee.id, start, end)

    def advance_summary(self, employee_id: UUID, year: int, month: int) -> AdvanceSummary:
        """Advances taken in the month: total, count and what is still unallocated."""
        period = PayPeriod(year, month)
        advances = self.advances_for(employee_id, period.start, period.end)
        ledger = AdvanceLedger(
            advances, self._advances.allocations_for(a.id for a in advances)
        )
        return AdvanceSummary(
            employee_id=employee_id,
            period=period,
            total=ledger.outstanding_total(employee_id, period.start, period.end),
            advance_count=len(advances),
            unallocated=ledger.unallocated_total(employee_id, period.start, period.end),
        )
