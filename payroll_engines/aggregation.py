"""
Module: payroll_engines.aggregation
Responsibility:
    Roll a period's payslips up into organisation totals and per-machine /
    per-designation groups.

Architecture position:
    Engines -- pure reducer, zero I/O.  ``PayrollRunService.summary`` feeds
    it the stored payslips.

Invariants enforced:
    - Group totals sum to the overall totals.
    - ``average_net_pay = total_net_pay / employee_count`` (zero for an
      empty group).
    - Payslips without a machine (fixed-salary staff) are grouped under
      ``UNASSIGNED_MACHINE``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from payroll_engines.fixed_salary import MONEY_PLACES, round_money
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import ZERO, Payslip, designation_key
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")

UNASSIGNED_MACHINE = "unassigned"


@dataclass(frozen=True)
class PayrollTotals:
    employee_count: int = 0
    gross_salary: Decimal = ZERO
    gross_bonus: Decimal = ZERO
    advances_deducted: Decimal = ZERO
    net_pay: Decimal = ZERO

    @property
    def average_net_pay(self) -> Decimal:
        if self.employee_count == 0:
            return ZERO
        return self.net_pay / self.employee_count

    def add(self, payslip: Payslip) -> PayrollTotals:
        return PayrollTotals(
            employee_count=self.employee_count + 1,
            gross_salary=self.gross_salary + payslip.gross_salary,
            gross_bonus=self.gross_bonus + payslip.gross_bonus,
            advances_deducted=self.advances_deducted + payslip.advances_deducted,
            net_pay=self.net_pay + payslip.net_pay,
        )

    def to_response(self, places: Decimal = MONEY_PLACES) -> dict[str, Any]:
        return {
            "employee_count": self.employee_count,
            "total_gross_salary": round_money(self.gross_salary, places),
            "total_gross_bonus": round_money(self.gross_bonus, places),
            "total_advances_deducted": round_money(self.advances_deducted, places),
            "total_net_pay": round_money(self.net_pay, places),
            "average_net_pay": round_money(self.average_net_pay, places),
        }


@dataclass(frozen=True)
class PayrollGroup:
    key: str
    label: str
    totals: PayrollTotals


@dataclass(frozen=True)
class PayrollSummary:
    period: PayPeriod | None
    totals: PayrollTotals
    by_machine: tuple[PayrollGroup, ...]
    by_designation: tuple[PayrollGroup, ...]

    def machine_group(self, key: str) -> PayrollGroup | None:
        return next((g for g in self.by_machine if g.key == key), None)

    def designation_group(self, name: str) -> PayrollGroup | None:
        key = designation_key(name)
        return next((g for g in self.by_designation if g.key == key), None)

    def to_response(self, places: Decimal = MONEY_PLACES) -> dict[str, Any]:
        return {
            "period": self.period.label if self.period else None,
            **self.totals.to_response(places),
            "by_machine": [
                {"machine_id": g.key, "machine": g.label, **g.totals.to_response(places)}
                for g in self.by_machine
            ],
            "by_designation": [
                {"designation": g.label, **g.totals.to_response(places)}
                for g in self.by_designation
            ],
        }


class PayrollAggregator:
    """
    Reduce payslips into a ``PayrollSummary``.

    Contract:
        Pure and order-independent in its totals; groups are sorted by
        label so output is deterministic.
    """

    @traced_engine("payroll_aggregation", "1.0", fingerprint_fields=("period",))
    def summarize(
        self,
        payslips: Iterable[Payslip],
        period: PayPeriod | None = None,
    ) -> PayrollSummary:
        totals = PayrollTotals()
        machines: dict[str, tuple[str, PayrollTotals]] = {}
        designations: dict[str, tuple[str, PayrollTotals]] = {}

        for payslip in payslips:
            totals = totals.add(payslip)

            if payslip.machine_id is not None:
                m_key = str(payslip.machine_id)
                m_label = payslip.machine_name or m_key
            else:
                m_key = m_label = UNASSIGNED_MACHINE
            label, group = machines.get(m_key, (m_label, PayrollTotals()))
            machines[m_key] = (label, group.add(payslip))

            d_key = designation_key(payslip.designation_name)
            label, group = designations.get(
                d_key, (payslip.designation_name, PayrollTotals())
            )
            designations[d_key] = (label, group.add(payslip))

        def _groups(source: dict[str, tuple[str, PayrollTotals]]) -> tuple[PayrollGroup, ...]:
            return tuple(
                PayrollGroup(key=key, label=label, totals=group)
                for key, (label, group) in sorted(
                    source.items(), key=lambda kv: (kv[1][0], kv[0])
                )
            )

        summary = PayrollSummary(
            period=period,
            totals=totals,
            by_machine=_groups(machines),
            by_designation=_groups(designations),
        )
        logger.info(
            "payroll_summary_built",
            extra={
                "period": period.label if period else None,
                "employee_count": totals.employee_count,
                "machine_groups": len(summary.by_machine),
                "designation_groups": len(summary.by_designation),
            },
        )
        return summary
