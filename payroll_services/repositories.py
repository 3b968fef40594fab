"""
Repository interfaces consumed by the payroll services.

Services depend only on these protocols; ``payroll_services.sql_repositories``
provides the SQLAlchemy implementations.  Implementations flush but never
commit: the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import (
    AdvanceAllocation,
    BonusTier,
    Designation,
    Employee,
    EmployeeAdvance,
    Machine,
    MachineType,
    Payslip,
    SalaryRateEntry,
)


class DesignationRepository(Protocol):
    def get(self, designation_id: UUID) -> Designation:
        """Raises DesignationNotFoundError."""
        ...

    def find_by_name(self, name: str) -> Designation | None: ...

    def list(self) -> list[Designation]: ...

    def add(self, name: str, is_variable_pay: bool, notes: str | None = None) -> Designation: ...

    def update(self, designation: Designation) -> Designation: ...

    def delete(self, designation_id: UUID) -> None: ...


class EmployeeRepository(Protocol):
    def get(self, employee_id: UUID) -> Employee:
        """Raises EmployeeNotFoundError."""
        ...

    def list(self) -> list[Employee]: ...

    def list_by_designations(self, designation_ids: Iterable[UUID]) -> list[Employee]: ...

    def count_by_designation(self, designation_id: UUID) -> int: ...

    def max_emp_number(self) -> int: ...

    def add(
        self,
        *,
        emp_number: int,
        emp_code: str,
        name: str,
        designation_id: UUID,
        fixed_monthly_salary: Decimal | None = None,
        father_name: str | None = None,
        cnic: str | None = None,
        phone: str | None = None,
        city: str | None = None,
    ) -> Employee: ...

    def set_designation(
        self,
        employee_id: UUID,
        designation_id: UUID,
        fixed_monthly_salary: Decimal | None,
    ) -> Employee: ...


class MachineRepository(Protocol):
    def get(self, machine_id: UUID) -> Machine:
        """Raises MachineNotFoundError."""
        ...

    def list(self) -> list[Machine]: ...

    def add(self, name: str, company_name: str, machine_type: MachineType) -> Machine: ...


class RateRepository(Protocol):
    def get_salary_rates(self, machine_type: MachineType) -> list[SalaryRateEntry]: ...

    def get_bonus_tiers(self, machine_type: MachineType) -> list[BonusTier]: ...

    def replace_salary_rates(
        self, machine_type: MachineType, entries: Sequence[SalaryRateEntry]
    ) -> None: ...

    def replace_bonus_tiers(
        self, machine_type: MachineType, tiers: Sequence[BonusTier]
    ) -> None: ...


class AdvanceRepository(Protocol):
    def add(
        self, employee_id: UUID, amount: Decimal, taken_on: date, note: str | None = None
    ) -> EmployeeAdvance: ...

    def find_by_employee_and_window(
        self,
        employee_id: UUID,
        start: date | None,
        end: date | None,
        for_update: bool = False,
    ) -> list[EmployeeAdvance]:
        """Advances with ``start <= taken_on < end``, oldest first."""
        ...

    def allocations_for(self, advance_ids: Iterable[UUID]) -> list[AdvanceAllocation]: ...

    def record_allocation(self, advance_id: UUID, payslip_id: UUID, amount: Decimal) -> None: ...

    def release_payslip(self, payslip_id: UUID) -> int:
        """Delete every allocation made by ``payslip_id``; returns the count."""
        ...


class PayslipRepository(Protocol):
    def get(self, period: PayPeriod, employee_id: UUID) -> Payslip | None: ...

    def get_by_id(self, payslip_id: UUID) -> Payslip:
        """Raises PayslipNotFoundError."""
        ...

    def list_for_period(self, period: PayPeriod) -> list[Payslip]: ...

    def list_for_employee(
        self, employee_id: UUID, period: PayPeriod | None = None
    ) -> list[Payslip]:
        """Newest period first; ``period`` narrows to one month."""
        ...

    def upsert(self, payslip: Payslip) -> Payslip:
        """Insert or replace the (period, employee) payslip and its items.

        Allocations are recorded separately through ``AdvanceRepository``.
        """
        ...

    def delete(self, payslip_id: UUID) -> None:
        """Remove the payslip with its items and allocations.

        Raises PayslipNotFoundError.
        """
        ...
