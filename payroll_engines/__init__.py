"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculators.  This is the import surface for
    ``payroll_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ``payroll_kernel`` (domain, exceptions, logging).
    MUST NOT import ``payroll_services`` or ``payroll_config``.

Invariants enforced:
    - Engines never read the clock; dates and periods are passed in.
    - Decimal-only arithmetic for money.
    - Identical inputs always produce identical outputs.

Audit relevance:
    Calculator entry points are wrapped in ``@traced_engine`` and emit
    PAYROLL_ENGINE_TRACE records with an input fingerprint.
"""

from payroll_engines.advances import (
    AdvanceAllocationResult,
    AdvanceBalance,
    AdvanceLedger,
)
from payroll_engines.aggregation import (
    UNASSIGNED_MACHINE,
    PayrollAggregator,
    PayrollGroup,
    PayrollSummary,
    PayrollTotals,
)
from payroll_engines.attendance import AttendanceLedger
from payroll_engines.fixed_salary import (
    FixedSalaryBreakdown,
    FixedSalaryCalculator,
    round_money,
)
from payroll_engines.production_pay import (
    DayResult,
    ProductionPayCalculator,
    ProductionPayResult,
    UnknownEmployeeWarning,
    WorkerDayPay,
    WorkerSummary,
)
from payroll_engines.rate_table import (
    BonusSchedule,
    RateTable,
    merge_bonus_rows,
    salary_entries_from_daily_rates,
    validate_salary_entries,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "AdvanceAllocationResult",
    "AdvanceBalance",
    "AdvanceLedger",
    "AttendanceLedger",
    "BonusSchedule",
    "DayResult",
    "FixedSalaryBreakdown",
    "FixedSalaryCalculator",
    "PayrollAggregator",
    "PayrollGroup",
    "PayrollSummary",
    "PayrollTotals",
    "ProductionPayCalculator",
    "ProductionPayResult",
    "RateTable",
    "UNASSIGNED_MACHINE",
    "UnknownEmployeeWarning",
    "WorkerDayPay",
    "WorkerSummary",
    "compute_input_fingerprint",
    "merge_bonus_rows",
    "round_money",
    "salary_entries_from_daily_rates",
    "traced_engine",
    "validate_salary_entries",
]
