"""
Module: payroll_engines.rate_table
Responsibility:
    Resolve pay rates from the configured tables: a monthly salary per
    (machine type, designation) turned into a daily rate for a given month,
    and a flat bonus amount per (machine type, bonus kind, stitch count)
    selected from stitch-threshold tiers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Tables are loaded by
    ``payroll_services.rate_service`` and handed in fully materialized.

Invariants enforced:
    - At most one salary entry per (machine type, designation key).
    - Bonus tiers per machine type have unique thresholds and per-kind rates
      that never decrease as the threshold rises, so a higher stitch count
      can never resolve to a smaller bonus.
    - Tier selection picks the largest ``min_stitches`` not exceeding the
      stitch count; below the lowest threshold the bonus is zero.
    - Bonus amounts are flat per tier, never multiplied by stitch count.

Failure modes:
    - RateNotConfiguredError when no salary entry exists for the key, or no
      bonus tiers exist for the machine type.  The error names the key.
    - InvalidRateTableError when a rate set violates the invariants above.

Usage:
    table = RateTable(salary_entries=entries, bonus_tiers=tiers)
    table.daily_rate(MachineType.H18, "operator", 2024, 6)
    table.bonus_rate(MachineType.H18, BonusKind.SHEET, 5200)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import (
    ZERO,
    BonusKind,
    BonusTier,
    Designation,
    MachineType,
    SalaryRateEntry,
    designation_key,
)
from payroll_kernel.exceptions import InvalidRateTableError, RateNotConfiguredError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.rate_table")


def _designation_name(designation: str | Designation) -> str:
    if isinstance(designation, Designation):
        return designation.name
    return designation


def _as_decimal(machine_type: MachineType, label: str, value: object) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidRateTableError(
            machine_type.value, f"{label} is not a number: {value!r}"
        ) from exc


@dataclass(frozen=True)
class BonusSchedule:
    """
    Ordered bonus tiers for one machine type.

    Contract:
        Tiers are stored sorted by ``min_stitches``.
    Guarantees:
        - Thresholds are unique and non-negative; rates are non-negative.
        - For each bonus kind, rates are non-decreasing with threshold.
    Non-goals:
        - No per-stitch pricing; every tier is a flat amount.
    """

    machine_type: MachineType
    tiers: tuple[BonusTier, ...]

    def __post_init__(self) -> None:
        mt = self.machine_type.value
        ordered = tuple(sorted(self.tiers, key=lambda t: t.min_stitches))
        object.__setattr__(self, "tiers", ordered)

        previous: BonusTier | None = None
        for tier in ordered:
            if tier.machine_type != self.machine_type:
                raise InvalidRateTableError(
                    mt, f"tier belongs to machine type {tier.machine_type.value}"
                )
            if tier.min_stitches < 0:
                raise InvalidRateTableError(
                    mt, f"negative stitch threshold {tier.min_stitches}"
                )
            for kind in BonusKind:
                if tier.rate_for(kind) < 0:
                    raise InvalidRateTableError(
                        mt,
                        f"negative {kind.value} rate at threshold {tier.min_stitches}",
                    )
            if previous is not None:
                if tier.min_stitches == previous.min_stitches:
                    raise InvalidRateTableError(
                        mt, f"duplicate stitch threshold {tier.min_stitches}"
                    )
                for kind in BonusKind:
                    if tier.rate_for(kind) < previous.rate_for(kind):
                        raise InvalidRateTableError(
                            mt,
                            f"{kind.value} rate decreases from "
                            f"{previous.rate_for(kind)} at {previous.min_stitches} "
                            f"to {tier.rate_for(kind)} at {tier.min_stitches}",
                        )
            previous = tier

    def tier_for(self, stitch_count: int) -> BonusTier | None:
        """Tier with the largest threshold not exceeding ``stitch_count``."""
        selected = None
        for tier in self.tiers:
            if tier.min_stitches > stitch_count:
                break
            selected = tier
        return selected

    def rate_for(self, kind: BonusKind, stitch_count: int) -> Decimal:
        tier = self.tier_for(stitch_count)
        if tier is None:
            return ZERO
        return tier.rate_for(kind)


def merge_bonus_rows(
    machine_type: MachineType | str,
    rows: Iterable[tuple[str | BonusKind, int, object]],
) -> tuple[BonusTier, ...]:
    """
    Merge upload rows of ``(bonus kind label, stitch count, rate)`` into tiers.

    Rows sharing a stitch count are folded into one tier carrying both kind
    rates.  A later row for the same threshold and kind overwrites an
    earlier one.  Kinds with no row at a threshold default to zero.
    """
    mt = MachineType(machine_type)
    merged: dict[int, dict[BonusKind, Decimal]] = {}
    for label, stitch_count, rate in rows:
        try:
            kind = BonusKind.parse(label)
        except ValueError as exc:
            raise InvalidRateTableError(mt.value, str(exc)) from exc
        try:
            threshold = int(stitch_count)
        except (TypeError, ValueError) as exc:
            raise InvalidRateTableError(
                mt.value, f"stitch count is not an integer: {stitch_count!r}"
            ) from exc
        merged.setdefault(threshold, {})[kind] = _as_decimal(mt, "rate", rate)

    tiers = tuple(
        BonusTier(
            machine_type=mt,
            min_stitches=threshold,
            rate_two_head=rates.get(BonusKind.TWO_HEAD, ZERO),
            rate_sheet=rates.get(BonusKind.SHEET, ZERO),
        )
        for threshold, rates in sorted(merged.items())
    )
    logger.debug(
        "bonus_rows_merged",
        extra={"machine_type": mt.value, "tier_count": len(tiers)},
    )
    return tiers


def salary_entries_from_daily_rates(
    machine_type: MachineType | str,
    rows: Mapping[str, object] | Iterable[tuple[str, object]],
    days_basis: int = 30,
) -> tuple[SalaryRateEntry, ...]:
    """Convert a daily-rate upload into monthly entries (``daily * days_basis``)."""
    mt = MachineType(machine_type)
    if days_basis <= 0:
        raise InvalidRateTableError(mt.value, f"days basis must be positive, got {days_basis}")
    pairs = rows.items() if isinstance(rows, Mapping) else rows
    entries = []
    for name, daily in pairs:
        daily_rate = _as_decimal(mt, f"daily rate for {name}", daily)
        if daily_rate < 0:
            raise InvalidRateTableError(mt.value, f"negative daily rate for {name}")
        entries.append(
            SalaryRateEntry(
                machine_type=mt,
                designation=name,
                monthly_salary=daily_rate * days_basis,
            )
        )
    return validate_salary_entries(mt, entries)


def validate_salary_entries(
    machine_type: MachineType | str,
    entries: Iterable[SalaryRateEntry],
) -> tuple[SalaryRateEntry, ...]:
    """Check a complete salary set for one machine type."""
    mt = MachineType(machine_type)
    seen: set[str] = set()
    result = []
    for entry in entries:
        if entry.machine_type != mt:
            raise InvalidRateTableError(
                mt.value,
                f"entry for {entry.designation} belongs to {entry.machine_type.value}",
            )
        if entry.designation_key in seen:
            raise InvalidRateTableError(
                mt.value, f"duplicate designation '{entry.designation}'"
            )
        seen.add(entry.designation_key)
        result.append(entry)
    return tuple(result)


class RateTable:
    """
    Read-only view over salary entries and bonus schedules.

    Contract:
        Built once from complete rate sets; lookups never mutate it.
    Guarantees:
        - ``daily_rate`` keeps full precision; rounding is left to the
          output boundary.
    Non-goals:
        - Does not persist or replace rates (see ``RateService``).
    """

    def __init__(
        self,
        salary_entries: Iterable[SalaryRateEntry] = (),
        bonus_tiers: Iterable[BonusTier] = (),
    ):
        grouped_salary: dict[MachineType, list[SalaryRateEntry]] = {}
        for entry in salary_entries:
            grouped_salary.setdefault(entry.machine_type, []).append(entry)
        self._salary: dict[MachineType, dict[str, SalaryRateEntry]] = {
            mt: {e.designation_key: e for e in validate_salary_entries(mt, group)}
            for mt, group in grouped_salary.items()
        }

        grouped_tiers: dict[MachineType, list[BonusTier]] = {}
        for tier in bonus_tiers:
            grouped_tiers.setdefault(tier.machine_type, []).append(tier)
        self._bonus: dict[MachineType, BonusSchedule] = {
            mt: BonusSchedule(machine_type=mt, tiers=tuple(group))
            for mt, group in grouped_tiers.items()
        }

    @property
    def machine_types(self) -> frozenset[MachineType]:
        return frozenset(self._salary) | frozenset(self._bonus)

    def has_salary_rate(
        self, machine_type: MachineType | str, designation: str | Designation
    ) -> bool:
        key = designation_key(_designation_name(designation))
        return key in self._salary.get(MachineType(machine_type), {})

    def monthly_rate(
        self, machine_type: MachineType | str, designation: str | Designation
    ) -> Decimal:
        mt = MachineType(machine_type)
        name = _designation_name(designation)
        entry = self._salary.get(mt, {}).get(designation_key(name))
        if entry is None:
            logger.warning(
                "salary_rate_not_configured",
                extra={"machine_type": mt.value, "designation": name},
            )
            raise RateNotConfiguredError(mt.value, designation=name)
        return entry.monthly_salary

    def daily_rate(
        self,
        machine_type: MachineType | str,
        designation: str | Designation,
        year: int,
        month: int,
    ) -> Decimal:
        """Monthly salary divided by the number of days in ``year``/``month``."""
        monthly = self.monthly_rate(machine_type, designation)
        return monthly / PayPeriod(year, month).days_in_month

    def bonus_schedule(self, machine_type: MachineType | str) -> BonusSchedule | None:
        return self._bonus.get(MachineType(machine_type))

    def bonus_rate(
        self,
        machine_type: MachineType | str,
        bonus_kind: BonusKind | str,
        stitch_count: int,
    ) -> Decimal:
        """Flat bonus for the day; zero below the lowest threshold."""
        mt = MachineType(machine_type)
        kind = BonusKind.parse(bonus_kind)
        if stitch_count < 0:
            raise ValueError(f"stitch_count cannot be negative, got {stitch_count}")
        schedule = self._bonus.get(mt)
        if schedule is None or not schedule.tiers:
            logger.warning(
                "bonus_tiers_not_configured",
                extra={"machine_type": mt.value, "bonus_kind": kind.value},
            )
            raise RateNotConfiguredError(mt.value, bonus_kind=kind.value)
        return schedule.rate_for(kind, stitch_count)

    def salary_entries(self, machine_type: MachineType | str) -> tuple[SalaryRateEntry, ...]:
        entries = self._salary.get(MachineType(machine_type), {})
        return tuple(entries[key] for key in sorted(entries))

    def bonus_tiers(self, machine_type: MachineType | str) -> tuple[BonusTier, ...]:
        schedule = self._bonus.get(MachineType(machine_type))
        return schedule.tiers if schedule is not None else ()
