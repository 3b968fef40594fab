"""Tests for RateService: total replacement and RateTable snapshots."""

from decimal import Decimal

import pytest

from payroll_kernel.domain.values import BonusKind, BonusTier, MachineType, SalaryRateEntry
from payroll_kernel.exceptions import (
    DesignationNotFoundError,
    InvalidRateTableError,
    RateNotConfiguredError,
)

H18 = MachineType.H18


class TestSalaryRateReplacement:
    def test_fixture_rates_loaded(self, h18_rates):
        assert h18_rates.daily_rate(H18, "operator", 2024, 6) == Decimal("1000")
        assert h18_rates.daily_rate(H18, "Helper", 2024, 6) == Decimal("500")

    def test_replacement_is_total(self, services, h18_rates):
        services.rates.replace_salary_rates(H18, {"operator": Decimal("33000")})

        table = services.rates.rate_table([H18])
        assert table.monthly_rate(H18, "operator") == Decimal("33000")
        with pytest.raises(RateNotConfiguredError):
            table.monthly_rate(H18, "helper")

    def test_other_machine_types_untouched(self, services, h18_rates):
        services.rates.replace_salary_rates(
            MachineType.H33,
            [SalaryRateEntry(MachineType.H33, "operator", Decimal("40000"))],
        )
        table = services.rates.rate_table()
        assert table.monthly_rate(H18, "operator") == Decimal("30000")
        assert table.monthly_rate(MachineType.H33, "operator") == Decimal("40000")

    def test_unknown_designation_rejected(self, services, designations):
        with pytest.raises(DesignationNotFoundError):
            services.rates.replace_salary_rates(H18, {"welder": Decimal("1")})

    def test_invalid_set_writes_nothing(self, services, h18_rates):
        with pytest.raises(InvalidRateTableError):
            services.rates.replace_salary_rates(
                H18,
                [
                    SalaryRateEntry(H18, "operator", Decimal("1")),
                    SalaryRateEntry(H18, "Operator", Decimal("2")),
                ],
            )
        table = services.rates.rate_table([H18])
        assert table.monthly_rate(H18, "operator") == Decimal("30000")

    def test_daily_upload_multiplied_by_basis(self, services, designations):
        entries = services.rates.replace_salary_rates_from_daily(H18, {"karigar": "800"})
        assert entries[0].monthly_salary == Decimal("24000")
        table = services.rates.rate_table([H18])
        assert table.daily_rate(H18, "karigar", 2024, 6) == Decimal("800")


class TestBonusTierReplacement:
    def test_upload_rows_merged(self, h18_rates):
        assert h18_rates.bonus_rate(H18, BonusKind.TWO_HEAD, 4999) == 0
        assert h18_rates.bonus_rate(H18, BonusKind.TWO_HEAD, 5000) == Decimal("200")
        assert h18_rates.bonus_rate(H18, BonusKind.SHEET, 7000) == Decimal("100")

    def test_ready_tiers_accepted(self, services):
        tiers = services.rates.replace_bonus_tiers(
            H18,
            [
                BonusTier(H18, 5000, Decimal("100"), Decimal("50")),
                BonusTier(H18, 0, Decimal("0"), Decimal("0")),
            ],
        )
        assert [t.min_stitches for t in tiers] == [0, 5000]

    def test_decreasing_tiers_rejected_and_nothing_written(self, services, h18_rates):
        with pytest.raises(InvalidRateTableError):
            services.rates.replace_bonus_tiers(
                H18, [("sheet", 0, "100"), ("sheet", 5000, "50")]
            )
        table = services.rates.rate_table([H18])
        assert table.bonus_rate(H18, BonusKind.SHEET, 5000) == Decimal("100")

    def test_bad_label_rejected(self, services):
        with pytest.raises(InvalidRateTableError):
            services.rates.replace_bonus_tiers(H18, [("triple", 0, "1")])

    def test_replacement_is_total(self, services, h18_rates):
        services.rates.replace_bonus_tiers(H18, [("2 head", 10000, "300")])
        table = services.rates.rate_table([H18])
        assert [t.min_stitches for t in table.bonus_tiers(H18)] == [10000]
        assert table.bonus_rate(H18, BonusKind.TWO_HEAD, 5000) == 0
