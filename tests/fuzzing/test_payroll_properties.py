"""
Property-based tests for the payroll engines.

Properties checked:
- Fixed salary: determinism, non-negative net, net = max(0, gross - advances)
- Advance allocation: never exceeds gross pay or any advance's principal
- Production bonus split: paid shares plus forfeited amount equal the tier amount
- Bonus tiers: a higher stitch count never pays less
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from payroll_engines.advances import AdvanceLedger
from payroll_engines.attendance import AttendanceLedger
from payroll_engines.fixed_salary import FixedSalaryCalculator
from payroll_engines.production_pay import ProductionPayCalculator
from payroll_engines.rate_table import RateTable
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import (
    ZERO,
    BonusKind,
    BonusTier,
    Designation,
    Employee,
    EmployeeAdvance,
    MachineType,
    ProductionEntry,
    SalaryRateEntry,
)

H18 = MachineType.H18
JUNE = PayPeriod(2024, 6)

money = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("999999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


@composite
def attendance_ledgers(draw):
    working = draw(st.integers(min_value=0, max_value=31))
    fridays = draw(st.integers(min_value=0, max_value=min(working, 5)))
    available = working - fridays
    normal_leaves = draw(st.integers(min_value=0, max_value=available))
    holidays = draw(st.integers(min_value=0, max_value=available - normal_leaves))
    friday_leaves = draw(st.integers(min_value=0, max_value=fridays))
    return AttendanceLedger(
        working_days=working,
        friday_days=fridays,
        normal_leaves=normal_leaves,
        friday_leaves=friday_leaves,
        holidays=holidays,
    )


@composite
def advance_sets(draw, employee_id):
    amounts = draw(st.lists(money, max_size=6))
    offsets = draw(
        st.lists(
            st.integers(min_value=0, max_value=29),
            min_size=len(amounts),
            max_size=len(amounts),
        )
    )
    return [
        EmployeeAdvance(
            id=uuid4(),
            employee_id=employee_id,
            amount=amount,
            taken_on=JUNE.start + timedelta(days=offset),
        )
        for amount, offset in zip(amounts, offsets)
    ]


@composite
def bonus_tier_sets(draw):
    thresholds = sorted(
        draw(st.sets(st.integers(min_value=0, max_value=1_000_000), min_size=1, max_size=6))
    )
    steps_two = draw(st.lists(money, min_size=len(thresholds), max_size=len(thresholds)))
    steps_sheet = draw(st.lists(money, min_size=len(thresholds), max_size=len(thresholds)))
    tiers = []
    two = sheet = ZERO
    for threshold, d_two, d_sheet in zip(thresholds, steps_two, steps_sheet):
        two += d_two
        sheet += d_sheet
        tiers.append(BonusTier(H18, threshold, two, sheet))
    return tiers


def _fixed_employee(salary):
    return Employee(
        id=uuid4(),
        emp_number=1,
        emp_code="EMP1",
        name="Asif",
        designation=Designation(id=uuid4(), name="Manager", is_variable_pay=False),
        fixed_monthly_salary=salary,
    )


class TestFixedSalaryProperties:
    @given(salary=money, attendance=attendance_ledgers(), data=st.data())
    @settings(max_examples=200)
    def test_net_is_clamped_difference(self, salary, attendance, data):
        employee = _fixed_employee(salary)
        advances = data.draw(advance_sets(employee.id))
        calc = FixedSalaryCalculator(friday_multiplier=Decimal("1.5"))

        result = calc.calculate(employee, JUNE, attendance, AdvanceLedger(advances))

        assert result.gross_salary >= 0
        assert result.net_pay >= 0
        assert result.net_pay == max(ZERO, result.gross_salary - result.advances_total)
        assert result.advances_total == sum((a.amount for a in advances), ZERO)

    @given(salary=money, attendance=attendance_ledgers())
    @settings(max_examples=100)
    def test_deterministic(self, salary, attendance):
        employee = _fixed_employee(salary)
        calc = FixedSalaryCalculator(friday_multiplier=Decimal("1.5"))
        first = calc.calculate(employee, JUNE, attendance).to_response()
        second = calc.calculate(employee, JUNE, attendance).to_response()
        assert first == second

    @given(salary=money, attendance=attendance_ledgers())
    @settings(max_examples=100)
    def test_larger_multiplier_never_pays_less(self, salary, attendance):
        employee = _fixed_employee(salary)
        low = FixedSalaryCalculator(Decimal("1.5")).calculate(employee, JUNE, attendance)
        high = FixedSalaryCalculator(Decimal("2.5")).calculate(employee, JUNE, attendance)
        assert high.gross_salary >= low.gross_salary


class TestAllocationProperties:
    @given(gross=money, data=st.data())
    @settings(max_examples=200)
    def test_allocation_bounded(self, gross, data):
        employee_id = uuid4()
        advances = data.draw(advance_sets(employee_id))
        ledger = AdvanceLedger(advances)

        result = ledger.allocate(employee_id, gross)

        assert result.total_deducted <= gross
        assert result.total_deducted == sum((a.amount for a in result.allocations), ZERO)
        assert result.total_deducted == min(gross, sum((a.amount for a in advances), ZERO))
        for allocation in result.allocations:
            assert allocation.amount > 0

        # Constructing the follow-up ledger re-checks no advance is over-allocated
        settled = ledger.with_allocations(result.allocations)
        assert settled.unallocated_total(employee_id) == (
            sum((a.amount for a in advances), ZERO) - result.total_deducted
        )

    @given(first=money, second=money, data=st.data())
    @settings(max_examples=100)
    def test_repeated_periods_never_exceed_principal(self, first, second, data):
        employee_id = uuid4()
        advances = data.draw(advance_sets(employee_id))
        ledger = AdvanceLedger(advances)

        june = ledger.allocate(employee_id, first)
        ledger = ledger.with_allocations(june.allocations)
        july = ledger.allocate(employee_id, second)
        ledger = ledger.with_allocations(july.allocations)

        principal = sum((a.amount for a in advances), ZERO)
        assert june.total_deducted + july.total_deducted <= principal


class TestProductionProperties:
    DESIGNATIONS = ("operator", "karigar", "helper", None)

    @given(
        first=st.sampled_from(DESIGNATIONS),
        second=st.sampled_from(DESIGNATIONS),
        stitches=st.integers(min_value=0, max_value=2_000_000),
        kind=st.sampled_from(list(BonusKind)),
        day=st.integers(min_value=1, max_value=30),
        tiers=bonus_tier_sets(),
    )
    @settings(max_examples=200)
    def test_split_conserves_bonus(self, first, second, stitches, kind, day, tiers):
        rates = RateTable(
            salary_entries=[
                SalaryRateEntry(H18, "operator", Decimal("30000")),
                SalaryRateEntry(H18, "karigar", Decimal("24000")),
                SalaryRateEntry(H18, "helper", Decimal("15000")),
            ],
            bonus_tiers=tiers,
        )
        roster = {}
        slots = []
        for number, name in enumerate((first, second), start=1):
            if name is None:
                slots.append(None)
                continue
            employee = Employee(
                id=uuid4(),
                emp_number=number,
                emp_code=f"EMP{number}",
                name=name,
                designation=Designation(id=uuid4(), name=name, is_variable_pay=True),
            )
            roster[employee.id] = employee
            slots.append(employee.id)

        entry = ProductionEntry(
            work_date=date(2024, 6, day),
            bonus_kind=kind,
            stitch_count=stitches,
            employee_a_id=slots[0],
            employee_b_id=slots[1],
        )
        calc = ProductionPayCalculator(friday_multiplier=Decimal("1.5"))

        result = calc.calculate_day(H18, entry, roster, rates)

        assert result.total_bonus + result.forfeited_bonus == result.day_bonus_total
        assert all(w.salary > 0 for w in result.workers)
        assert all(w.bonus >= 0 for w in result.workers)

    @given(tiers=bonus_tier_sets(), a=st.integers(0, 2_000_000), b=st.integers(0, 2_000_000))
    @settings(max_examples=200)
    def test_bonus_monotonic_in_stitches(self, tiers, a, b):
        rates = RateTable(bonus_tiers=tiers)
        low, high = sorted((a, b))
        for kind in BonusKind:
            assert rates.bonus_rate(H18, kind, low) <= rates.bonus_rate(H18, kind, high)
