"""Result types for batch payroll operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from payroll_engines.production_pay import DayResult, UnknownEmployeeWarning
from payroll_kernel.domain.values import Payslip
from payroll_kernel.exceptions import PayrollError


@dataclass(frozen=True)
class BatchFailure:
    """A per-employee or per-machine failure isolated from a batch."""

    subject_id: str
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_error(cls, subject_id: object, error: PayrollError) -> BatchFailure:
        details = {
            k: v for k, v in vars(error).items() if not k.startswith("_") and k != "args"
        }
        return cls(
            subject_id=str(subject_id),
            code=error.code,
            message=str(error),
            details=details,
        )


@dataclass(frozen=True)
class PayslipBatchResult:
    payslips: tuple[Payslip, ...]
    failures: tuple[BatchFailure, ...]

    @property
    def is_complete(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class PayrollRunResult:
    """Outcome of a production payroll run for one period."""

    payslips: tuple[Payslip, ...]
    day_results: dict[str, tuple[DayResult, ...]]
    warnings: tuple[UnknownEmployeeWarning, ...]
    failures: tuple[BatchFailure, ...]

    @property
    def is_complete(self) -> bool:
        return not self.failures and not self.warnings
