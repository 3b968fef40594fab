"""
RateService -- replace and load the per-machine-type rate tables.

Responsibility:
    Validate complete rate sets, write them as a total replacement for one
    machine type, and materialize ``RateTable`` snapshots for the engines.

Invariants enforced:
    - Replacement is total per machine type: delete-then-insert inside the
      caller's transaction, never a merge.
    - Replacements for the same machine type are serialized in-process;
      the last committed set wins.
    - Nothing is written unless the complete set validates.

Failure modes:
    - InvalidRateTableError for duplicate designations, duplicate or
      decreasing bonus tiers, negative amounts or unparseable rows.
    - DesignationNotFoundError when a salary entry names an unknown
      designation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from payroll_config import PayrollConfig
from payroll_engines.rate_table import (
    BonusSchedule,
    RateTable,
    merge_bonus_rows,
    salary_entries_from_daily_rates,
    validate_salary_entries,
)
from payroll_kernel.domain.values import BonusTier, MachineType, SalaryRateEntry
from payroll_kernel.logging_config import get_logger
from payroll_services.locks import rate_table_locks
from payroll_services.repositories import RateRepository

logger = get_logger("services.rate")


def load_rate_table(
    rates: RateRepository, machine_types: Iterable[MachineType | str] | None = None
) -> RateTable:
    """Snapshot of the stored rates for ``machine_types`` (default: all)."""
    types = (
        sorted({MachineType(mt) for mt in machine_types}, key=lambda mt: mt.value)
        if machine_types is not None
        else list(MachineType)
    )
    salary: list[SalaryRateEntry] = []
    tiers: list[BonusTier] = []
    for mt in types:
        salary.extend(rates.get_salary_rates(mt))
        tiers.extend(rates.get_bonus_tiers(mt))
    return RateTable(salary_entries=salary, bonus_tiers=tiers)


class RateService:
    def __init__(self, rates: RateRepository, config: PayrollConfig | None = None):
        self._rates = rates
        self._config = config or PayrollConfig.with_defaults()

    def replace_salary_rates(
        self,
        machine_type: MachineType | str,
        entries: Iterable[SalaryRateEntry] | Mapping[str, Decimal],
    ) -> tuple[SalaryRateEntry, ...]:
        """
        Replace every salary entry for ``machine_type``.

        ``entries`` is either a sequence of ``SalaryRateEntry`` or a mapping
        of designation name to monthly salary.
        """
        mt = MachineType(machine_type)
        if isinstance(entries, Mapping):
            entries = [
                SalaryRateEntry(
                    machine_type=mt,
                    designation=name,
                    monthly_salary=Decimal(str(amount)),
                )
                for name, amount in entries.items()
            ]
        validated = validate_salary_entries(mt, entries)

        with rate_table_locks.hold(mt):
            self._rates.replace_salary_rates(mt, validated)

        logger.info(
            "salary_rates_replaced",
            extra={"machine_type": mt.value, "entry_count": len(validated)},
        )
        return validated

    def replace_salary_rates_from_daily(
        self,
        machine_type: MachineType | str,
        rows: Mapping[str, object] | Iterable[tuple[str, object]],
    ) -> tuple[SalaryRateEntry, ...]:
        """Replace from daily rates, stored as ``daily * salary_rate_days_basis``."""
        entries = salary_entries_from_daily_rates(
            machine_type, rows, self._config.salary_rate_days_basis
        )
        return self.replace_salary_rates(machine_type, entries)

    def replace_bonus_tiers(
        self,
        machine_type: MachineType | str,
        rows: Sequence[BonusTier | tuple[str, int, object]],
    ) -> tuple[BonusTier, ...]:
        """
        Replace every bonus tier for ``machine_type``.

        ``rows`` may hold ready ``BonusTier`` objects and/or upload rows of
        ``(bonus kind label, stitch count, rate)``; upload rows are merged by
        threshold first.
        """
        mt = MachineType(machine_type)
        tiers = [r for r in rows if isinstance(r, BonusTier)]
        raw = [r for r in rows if not isinstance(r, BonusTier)]
        if raw:
            tiers.extend(merge_bonus_rows(mt, raw))
        schedule = BonusSchedule(machine_type=mt, tiers=tuple(tiers))

        with rate_table_locks.hold(mt):
            self._rates.replace_bonus_tiers(mt, schedule.tiers)

        logger.info(
            "bonus_tiers_replaced",
            extra={"machine_type": mt.value, "tier_count": len(schedule.tiers)},
        )
        return schedule.tiers

    def rate_table(
        self, machine_types: Iterable[MachineType | str] | None = None
    ) -> RateTable:
        return load_rate_table(self._rates, machine_types)
