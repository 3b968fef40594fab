"""
PayrollRunService -- monthly production payroll across machines.

Responsibility:
    Run ``ProductionPayCalculator`` for every machine's daily entries,
    merge each worker's earnings across machines, deduct outstanding
    advances and store one payslip per worker.  Also builds the period
    summary over stored payslips, the per-employee payslip history and
    payslip deletion.

Architecture position:
    Services -- imperative shell; engines do the arithmetic, repositories
    do the I/O, the caller commits.

Invariants enforced:
    - One payslip per (period, employee); the primary machine on it is the
      one the worker staffed most days, ties broken by machine name.
    - Advances taken before the period end are deducted oldest-first, at
      most up to gross pay, under a per-employee lock; a re-run releases the
      payslip's earlier allocations first.
    - A machine whose calculation fails is reported and skipped; workers
      assigned to it get no payslip in this run rather than a short one.
    - Unknown employees on production days are returned as warnings.
    - Deleting a payslip releases its advance allocations first, under the
      same per-employee lock used for allocation.

Failure modes:
    - Per machine: RateNotConfiguredError, InvalidAttendanceError,
      MachineNotFoundError -> ``BatchFailure`` with the machine id.
    - Per employee: any ``PayrollError`` while issuing -> ``BatchFailure``
      with the employee id.
    - ``delete_payslip`` raises PayslipNotFoundError.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from payroll_config import PayrollConfig
from payroll_engines.advances import AdvanceLedger
from payroll_engines.aggregation import PayrollAggregator, PayrollSummary
from payroll_engines.fixed_salary import round_money
from payroll_engines.production_pay import (
    DayResult,
    ProductionPayCalculator,
    ProductionPayResult,
    UnknownEmployeeWarning,
)
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import (
    ZERO,
    Employee,
    Machine,
    Payslip,
    PayslipItem,
    PayslipItemKind,
    ProductionEntry,
)
from payroll_kernel.exceptions import PayrollError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.locks import employee_allocation_locks
from payroll_services.rate_service import load_rate_table
from payroll_services.repositories import (
    AdvanceRepository,
    EmployeeRepository,
    MachineRepository,
    PayslipRepository,
    RateRepository,
)
from payroll_services.results import BatchFailure, PayrollRunResult

logger = get_logger("services.payroll_run")


@dataclass
class _WorkerTotals:
    employee: Employee
    days: int = 0
    days_by_machine: dict[UUID, int] = field(default_factory=dict)
    items: list[PayslipItem] = field(default_factory=list)


class PayrollRunService:
    def __init__(
        self,
        employees: EmployeeRepository,
        machines: MachineRepository,
        rates: RateRepository,
        advances: AdvanceRepository,
        payslips: PayslipRepository,
        config: PayrollConfig | None = None,
    ):
        self._employees = employees
        self._machines = machines
        self._rates = rates
        self._advances = advances
        self._payslips = payslips
        self._config = config or PayrollConfig.with_defaults()
        self._calculator = ProductionPayCalculator(
            friday_multiplier=self._config.friday_multiplier,
            bonus_eligible_designations=self._config.bonus_eligible_designations,
        )
        self._aggregator = PayrollAggregator()

    def run_production(
        self,
        period: PayPeriod,
        machine_entries: Mapping[UUID, Sequence[ProductionEntry]],
    ) -> PayrollRunResult:
        run_id = str(uuid4())
        with LogContext.bind(run_id=run_id):
            logger.info(
                "production_run_started",
                extra={"period": period.label, "machine_count": len(machine_entries)},
            )
            roster = {e.id: e for e in self._employees.list()}
            failures: list[BatchFailure] = []
            blocked: dict[UUID, BatchFailure] = {}

            def _fail_machine(machine_id: UUID, exc: PayrollError) -> None:
                failure = BatchFailure.from_error(machine_id, exc)
                failures.append(failure)
                for entry in machine_entries[machine_id]:
                    for _, employee_id in entry.assignments:
                        blocked.setdefault(employee_id, failure)

            machines: dict[UUID, Machine] = {}
            for machine_id in machine_entries:
                try:
                    machines[machine_id] = self._machines.get(machine_id)
                except PayrollError as exc:
                    _fail_machine(machine_id, exc)

            rates = load_rate_table(
                self._rates, {m.machine_type for m in machines.values()}
            )

            results: list[tuple[Machine, ProductionPayResult]] = []
            for machine_id, machine in machines.items():
                entries = machine_entries[machine_id]
                with LogContext.bind(machine_id=str(machine_id)):
                    try:
                        result = self._calculator.calculate(
                            machine_type=machine.machine_type,
                            period=period,
                            entries=entries,
                            roster=roster,
                            rates=rates,
                            machine_id=machine.id,
                        )
                    except PayrollError as exc:
                        logger.warning("production_machine_failed", exc_info=True)
                        _fail_machine(machine_id, exc)
                        continue
                results.append((machine, result))

            totals = self._merge(results, roster, blocked)
            for employee_id, failure in blocked.items():
                if employee_id in roster:
                    failures.append(
                        BatchFailure(
                            subject_id=str(employee_id),
                            code=failure.code,
                            message=f"Skipped: machine {failure.subject_id} failed",
                            details={"machine_id": failure.subject_id},
                        )
                    )

            payslips: list[Payslip] = []
            ordered = sorted(
                totals.values(), key=lambda w: (w.employee.name, str(w.employee.id))
            )
            for worker in ordered:
                with LogContext.bind(employee_id=str(worker.employee.id)):
                    try:
                        payslips.append(self._issue(period, worker, machines))
                    except PayrollError as exc:
                        logger.warning("production_payslip_failed", exc_info=True)
                        failures.append(BatchFailure.from_error(worker.employee.id, exc))

            warnings: list[UnknownEmployeeWarning] = []
            for _, result in results:
                warnings.extend(result.warnings)
            day_results: dict[str, tuple[DayResult, ...]] = {
                str(machine.id): result.days for machine, result in results
            }

            logger.info(
                "production_run_completed",
                extra={
                    "period": period.label,
                    "payslips": len(payslips),
                    "warnings": len(warnings),
                    "failures": len(failures),
                },
            )
            return PayrollRunResult(
                payslips=tuple(payslips),
                day_results=day_results,
                warnings=tuple(warnings),
                failures=tuple(failures),
            )

    @staticmethod
    def _merge(
        results: Sequence[tuple[Machine, ProductionPayResult]],
        roster: Mapping[UUID, Employee],
        blocked: Mapping[UUID, BatchFailure],
    ) -> dict[UUID, _WorkerTotals]:
        """Fold every machine's day results into per-worker totals."""
        totals: dict[UUID, _WorkerTotals] = {}
        for machine, result in results:
            for day in result.days:
                label = f"{machine.name} {day.work_date.isoformat()}"
                for worker in day.workers:
                    if worker.employee_id in blocked:
                        continue
                    acc = totals.get(worker.employee_id)
                    if acc is None:
                        acc = totals[worker.employee_id] = _WorkerTotals(
                            employee=roster[worker.employee_id]
                        )
                    acc.days += 1
                    acc.days_by_machine[machine.id] = (
                        acc.days_by_machine.get(machine.id, 0) + 1
                    )
                    suffix = " (Friday)" if day.is_friday else ""
                    acc.items.append(
                        PayslipItem(
                            kind=PayslipItemKind.SALARY,
                            amount=worker.salary,
                            description=f"Salary {label}{suffix}",
                            work_date=day.work_date,
                            machine_id=machine.id,
                        )
                    )
                    if worker.bonus > 0:
                        acc.items.append(
                            PayslipItem(
                                kind=PayslipItemKind.BONUS,
                                amount=worker.bonus,
                                description=(
                                    f"Bonus {label} {day.bonus_kind.value} "
                                    f"{day.stitch_count} stitches"
                                ),
                                work_date=day.work_date,
                                machine_id=machine.id,
                            )
                        )
        return totals

    @staticmethod
    def _primary_machine(
        worker: _WorkerTotals, machines: Mapping[UUID, Machine]
    ) -> Machine | None:
        if not worker.days_by_machine:
            return None
        machine_id = min(
            worker.days_by_machine,
            key=lambda mid: (-worker.days_by_machine[mid], machines[mid].name),
        )
        return machines[machine_id]

    def _issue(
        self,
        period: PayPeriod,
        worker: _WorkerTotals,
        machines: Mapping[UUID, Machine],
    ) -> Payslip:
        employee = worker.employee
        places = self._config.money_places
        primary = self._primary_machine(worker, machines)
        items = tuple(
            PayslipItem(
                kind=item.kind,
                amount=round_money(item.amount, places),
                description=item.description,
                work_date=item.work_date,
                machine_id=item.machine_id,
            )
            for item in worker.items
        )
        # Totals are the sum of the rounded lines so the payslip adds up
        gross_salary = sum(
            (i.amount for i in items if i.kind is PayslipItemKind.SALARY), ZERO
        )
        gross_bonus = sum(
            (i.amount for i in items if i.kind is PayslipItemKind.BONUS), ZERO
        )

        with employee_allocation_locks.hold(employee.id):
            existing = self._payslips.get(period, employee.id)
            payslip_id = existing.id if existing else uuid4()
            if existing is not None:
                released = self._advances.release_payslip(existing.id)
                logger.info(
                    "payslip_allocations_released",
                    extra={"payslip_id": str(existing.id), "released": released},
                )

            # Everything taken before the period closes is deductible
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

            payslip = Payslip.build(
                id=payslip_id,
                period=period,
                employee_id=employee.id,
                employee_name=employee.name,
                designation_name=employee.designation.name,
                gross_salary=gross_salary,
                gross_bonus=gross_bonus,
                advances_deducted=allocation.total_deducted,
                working_days=worker.days,
                machine_id=primary.id if primary else None,
                machine_name=primary.name if primary else None,
                items=items,
            )
            self._payslips.upsert(payslip)
            for a in allocation.allocations:
                self._advances.record_allocation(a.advance_id, payslip_id, a.amount)

        logger.info(
            "production_payslip_issued",
            extra={
                "payslip_id": str(payslip_id),
                "period": period.label,
                "working_days": worker.days,
                "gross_pay": str(payslip.gross_pay),
                "advances_deducted": str(payslip.advances_deducted),
                "net_pay": str(payslip.net_pay),
            },
        )
        return self._payslips.get(period, employee.id)

    def summary(self, period: PayPeriod) -> PayrollSummary:
        """Totals and machine/designation groups over the stored payslips."""
        return self._aggregator.summarize(
            payslips=self._payslips.list_for_period(period), period=period
        )

    def payslips_for(
        self, employee_id: UUID, period: PayPeriod | None = None
    ) -> list[Payslip]:
        """An employee's stored payslips, newest period first."""
        return self._payslips.list_for_employee(employee_id, period)

    def delete_payslip(self, payslip_id: UUID) -> Payslip:
        """
        Delete a stored payslip and hand its deductions back to the advances.

        The released amounts become available to the next payslip issued
        for the employee.  Returns the deleted payslip.

        Raises:
            PayslipNotFoundError: If ``payslip_id`` is not stored.
        """
        payslip = self._payslips.get_by_id(payslip_id)
        with employee_allocation_locks.hold(payslip.employee_id):
            released = self._advances.release_payslip(payslip_id)
            self._payslips.delete(payslip_id)
        logger.info(
            "payslip_deleted",
            extra={
                "payslip_id": str(payslip_id),
                "employee_id": str(payslip.employee_id),
                "period": payslip.period.label,
                "released": released,
            },
        )
        return payslip
