"""
Module: payroll_engines.advances
Responsibility:
    Window totals over an employee's cash advances and oldest-first
    allocation of advance deductions against a period's gross pay.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The ledger is a snapshot
    built from repository rows (advances plus their allocation history);
    persisting allocations is the caller's job.

Invariants enforced:
    - ``total_deducted <= gross_pay`` for every allocation.
    - An advance's allocated amount never exceeds its principal, so an
      advance is never double-allocated across periods.
    - Advances are consumed oldest first (by date taken, ties in the order
      supplied); the last one touched may be consumed partially.
    - The ledger is immutable; ``with_allocations`` returns a new ledger.

Failure modes:
    - ValueError for negative gross pay, for allocation history that refers
      to an unknown advance, or for history that over-allocates an advance.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import ZERO, AdvanceAllocation, EmployeeAdvance
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.advances")


@dataclass(frozen=True)
class AdvanceBalance:
    """An advance together with what has already been deducted from it."""

    advance: EmployeeAdvance
    allocated: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.advance.amount - self.allocated

    @property
    def is_settled(self) -> bool:
        return self.remaining <= ZERO


@dataclass(frozen=True)
class AdvanceAllocationResult:
    """
    Outcome of one allocation pass.

    Guarantees:
        - ``total_deducted == sum(a.amount for a in allocations)``
        - ``total_deducted <= gross_pay``
    """

    employee_id: UUID
    gross_pay: Decimal
    allocations: tuple[AdvanceAllocation, ...]
    total_deducted: Decimal

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.total_deducted


class AdvanceLedger:
    """Snapshot of advances and their allocation history."""

    def __init__(
        self,
        advances: Iterable[EmployeeAdvance],
        allocations: Iterable[AdvanceAllocation] = (),
    ):
        # Stable sort keeps supply order for advances taken the same day
        self._advances: tuple[EmployeeAdvance, ...] = tuple(
            sorted(advances, key=lambda a: a.taken_on)
        )
        self._by_id = {a.id: a for a in self._advances}
        self._allocations: tuple[AdvanceAllocation, ...] = tuple(allocations)

        allocated: dict[UUID, Decimal] = {a.id: ZERO for a in self._advances}
        for allocation in self._allocations:
            if allocation.advance_id not in allocated:
                raise ValueError(
                    f"Allocation references unknown advance {allocation.advance_id}"
                )
            allocated[allocation.advance_id] += allocation.amount
        for advance_id, total in allocated.items():
            if total > self._by_id[advance_id].amount:
                raise ValueError(
                    f"Advance {advance_id} is over-allocated: "
                    f"{total} > {self._by_id[advance_id].amount}"
                )
        self._allocated = allocated

    @property
    def advances(self) -> tuple[EmployeeAdvance, ...]:
        return self._advances

    @property
    def allocations(self) -> tuple[AdvanceAllocation, ...]:
        return self._allocations

    def remaining(self, advance_id: UUID) -> Decimal:
        return self._by_id[advance_id].amount - self._allocated[advance_id]

    def balances(
        self,
        employee_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[AdvanceBalance, ...]:
        """Advances of ``employee_id`` taken in ``[start, end)``, oldest first."""
        return tuple(
            AdvanceBalance(advance=a, allocated=self._allocated[a.id])
            for a in self._advances
            if a.employee_id == employee_id
            and (start is None or a.taken_on >= start)
            and (end is None or a.taken_on < end)
        )

    def outstanding_total(self, employee_id: UUID, start: date, end: date) -> Decimal:
        """Sum of advance amounts taken in ``[start, end)``.  No side effects."""
        return sum(
            (b.advance.amount for b in self.balances(employee_id, start, end)),
            ZERO,
        )

    def unallocated_total(
        self,
        employee_id: UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> Decimal:
        return sum(
            (b.remaining for b in self.balances(employee_id, start, end)),
            ZERO,
        )

    @traced_engine(
        "advance_allocation",
        "1.0",
        fingerprint_fields=("employee_id", "gross_pay", "start", "end"),
    )
    def allocate(
        self,
        employee_id: UUID,
        gross_pay: Decimal,
        start: date | None = None,
        end: date | None = None,
        payslip_id: UUID | None = None,
    ) -> AdvanceAllocationResult:
        """
        Deduct unallocated advances from ``gross_pay``, oldest first.

        Each advance is taken whole while it fits under ``gross_pay``; the
        first one that does not fit is taken partially up to ``gross_pay``
        and the walk stops.

        Args:
            employee_id: Whose advances to consume.
            gross_pay: Ceiling for the total deduction.
            start: Optional inclusive lower bound on ``taken_on``.
            end: Optional exclusive upper bound on ``taken_on``.
            payslip_id: Stamped on each resulting allocation.
        """
        if gross_pay < 0:
            raise ValueError(f"gross_pay cannot be negative, got {gross_pay}")

        allocations: list[AdvanceAllocation] = []
        total = ZERO
        for balance in self.balances(employee_id, start, end):
            if balance.is_settled:
                continue
            if total >= gross_pay:
                break
            remaining = balance.remaining
            if total + remaining <= gross_pay:
                amount = remaining
            else:
                amount = gross_pay - total
            allocations.append(
                AdvanceAllocation(
                    advance_id=balance.advance.id,
                    amount=amount,
                    payslip_id=payslip_id,
                )
            )
            total += amount

        logger.info(
            "advance_allocation_completed",
            extra={
                "employee_id": str(employee_id),
                "gross_pay": str(gross_pay),
                "total_deducted": str(total),
                "allocation_count": len(allocations),
            },
        )
        return AdvanceAllocationResult(
            employee_id=employee_id,
            gross_pay=gross_pay,
            allocations=tuple(allocations),
            total_deducted=total,
        )

    def with_allocations(
        self, allocations: Iterable[AdvanceAllocation]
    ) -> AdvanceLedger:
        """New ledger with ``allocations`` appended to the history."""
        return AdvanceLedger(self._advances, self._allocations + tuple(allocations))

    def without_payslip(self, payslip_id: UUID) -> AdvanceLedger:
        """New ledger with every allocation made by ``payslip_id`` released."""
        return AdvanceLedger(
            self._advances,
            tuple(a for a in self._allocations if a.payslip_id != payslip_id),
        )
