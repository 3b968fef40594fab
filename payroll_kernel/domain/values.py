"""
Payroll Domain Values (``payroll_kernel.domain.values``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of the payroll:
designations, employees, machines, rate table rows, cash advances, daily
production entries and payslips.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Produced by
the persistence layer (``to_dto()``) and consumed by ``payroll_engines``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``Payslip.net_pay == max(0, gross_salary + gross_bonus - advances_deducted)``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from payroll_kernel.domain.period import PayPeriod

ZERO = Decimal("0")


class MachineType(str, Enum):
    """Machine head-count classes; rate tables are keyed by these."""

    H17 = "H17"
    H18 = "H18"
    H28 = "H28"
    H33 = "H33"
    H34 = "H34"

    @property
    def label(self) -> str:
        return f"{self.value[1:]} head"


class BonusKind(str, Enum):
    """The two flat bonus columns of a stitch tier."""

    TWO_HEAD = "TWO_HEAD"
    SHEET = "SHEET"

    @classmethod
    def parse(cls, label: str | BonusKind) -> BonusKind:
        """Accept the labels used by rate uploads ("2 head", "sheet", ...)."""
        if isinstance(label, BonusKind):
            return label
        normalized = re.sub(r"[\s_-]+", "", str(label)).lower()
        if normalized in ("2head", "twohead"):
            return cls.TWO_HEAD
        if normalized == "sheet":
            return cls.SHEET
        raise ValueError(f"Unknown bonus kind: {label!r}")


class PayslipItemKind(str, Enum):
    SALARY = "SALARY"
    BONUS = "BONUS"


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def designation_key(name: str) -> str:
    """Case-insensitive lookup key for a designation name."""
    return name.strip().lower()


@dataclass(frozen=True)
class Designation:
    """A job role; decides fixed monthly salary vs production pay."""

    id: UUID
    name: str
    is_variable_pay: bool
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Designation name cannot be empty")

    @property
    def key(self) -> str:
        return designation_key(self.name)

    @property
    def slug(self) -> str:
        return slugify(self.name)


@dataclass(frozen=True)
class Employee:
    """An employee for payroll purposes."""

    id: UUID
    emp_number: int
    emp_code: str
    name: str
    designation: Designation
    fixed_monthly_salary: Decimal | None = None
    father_name: str | None = None
    cnic: str | None = None
    phone: str | None = None
    city: str | None = None

    def __post_init__(self) -> None:
        if self.fixed_monthly_salary is not None and self.fixed_monthly_salary <= 0:
            raise ValueError("fixed_monthly_salary must be positive when set")

    @property
    def is_fixed_salary(self) -> bool:
        return (
            not self.designation.is_variable_pay
            and self.fixed_monthly_salary is not None
        )


@dataclass(frozen=True)
class Machine:
    """A physical machine; only its type matters for rates."""

    id: UUID
    name: str
    company_name: str
    machine_type: MachineType


@dataclass(frozen=True)
class SalaryRateEntry:
    """(MachineType, Designation) -> monthly salary."""

    machine_type: MachineType
    designation: str
    monthly_salary: Decimal

    def __post_init__(self) -> None:
        if self.monthly_salary < 0:
            raise ValueError("monthly_salary cannot be negative")

    @property
    def designation_key(self) -> str:
        return designation_key(self.designation)


@dataclass(frozen=True)
class BonusTier:
    """Flat bonus amounts paid once the day's stitches reach ``min_stitches``."""

    machine_type: MachineType
    min_stitches: int
    rate_two_head: Decimal = ZERO
    rate_sheet: Decimal = ZERO

    def rate_for(self, kind: BonusKind) -> Decimal:
        if kind is BonusKind.TWO_HEAD:
            return self.rate_two_head
        return self.rate_sheet


@dataclass(frozen=True)
class EmployeeAdvance:
    """A cash sum handed to an employee ahead of payroll."""

    id: UUID
    employee_id: UUID
    amount: Decimal
    taken_on: date
    note: str | None = None


@dataclass(frozen=True)
class AdvanceAllocation:
    """Part of an advance consumed by a payslip."""

    advance_id: UUID
    amount: Decimal
    payslip_id: UUID | None = None


@dataclass(frozen=True)
class ProductionEntry:
    """One machine's production facts for one calendar day."""

    work_date: date
    bonus_kind: BonusKind
    stitch_count: int = 0
    employee_a_id: UUID | None = None
    employee_b_id: UUID | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        if self.stitch_count < 0:
            raise ValueError("stitch_count cannot be negative")

    @property
    def assignments(self) -> tuple[tuple[str, UUID], ...]:
        """Assigned (slot, employee_id) pairs in slot order."""
        slots = (("A", self.employee_a_id), ("B", self.employee_b_id))
        return tuple((slot, emp) for slot, emp in slots if emp is not None)


@dataclass(frozen=True)
class PayslipItem:
    kind: PayslipItemKind
    amount: Decimal
    description: str
    work_date: date | None = None
    machine_id: UUID | None = None


@dataclass(frozen=True)
class Payslip:
    """The finalized per-employee, per-period monetary record."""

    id: UUID
    period: PayPeriod
    employee_id: UUID
    employee_name: str
    designation_name: str
    gross_salary: Decimal
    gross_bonus: Decimal
    advances_deducted: Decimal
    net_pay: Decimal
    working_days: int = 0
    machine_id: UUID | None = None
    machine_name: str | None = None
    items: tuple[PayslipItem, ...] = field(default_factory=tuple)
    allocations: tuple[AdvanceAllocation, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        expected = max(ZERO, self.gross_pay - self.advances_deducted)
        if self.net_pay != expected:
            raise ValueError(
                f"net_pay {self.net_pay} does not equal gross minus advances ({expected})"
            )
        if self.advances_deducted < 0:
            raise ValueError("advances_deducted cannot be negative")

    @property
    def gross_pay(self) -> Decimal:
        return self.gross_salary + self.gross_bonus

    @classmethod
    def build(
        cls,
        *,
        id: UUID,
        period: PayPeriod,
        employee_id: UUID,
        employee_name: str,
        designation_name: str,
        gross_salary: Decimal,
        gross_bonus: Decimal,
        advances_deducted: Decimal,
        **kwargs,
    ) -> Payslip:
        """Construct a payslip, deriving ``net_pay`` from the other totals."""
        net = max(ZERO, gross_salary + gross_bonus - advances_deducted)
        return cls(
            id=id,
            period=period,
            employee_id=employee_id,
            employee_name=employee_name,
            designation_name=designation_name,
            gross_salary=gross_salary,
            gross_bonus=gross_bonus,
            advances_deducted=advances_deducted,
            net_pay=net,
            **kwargs,
        )
