"""
Pure domain layer.

Immutable value objects and calendar helpers with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (except the injectable Clock itself)
- I/O
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.period import PayPeriod, is_friday
from payroll_kernel.domain.values import (
    ZERO,
    AdvanceAllocation,
    BonusKind,
    BonusTier,
    Designation,
    Employee,
    EmployeeAdvance,
    Machine,
    MachineType,
    Payslip,
    PayslipItem,
    PayslipItemKind,
    ProductionEntry,
    SalaryRateEntry,
    designation_key,
    slugify,
)

__all__ = [
    "ZERO",
    "AdvanceAllocation",
    "BonusKind",
    "BonusTier",
    "Clock",
    "Designation",
    "DeterministicClock",
    "Employee",
    "EmployeeAdvance",
    "Machine",
    "MachineType",
    "PayPeriod",
    "Payslip",
    "PayslipItem",
    "PayslipItemKind",
    "ProductionEntry",
    "SalaryRateEntry",
    "SystemClock",
    "designation_key",
    "is_friday",
    "slugify",
]
