"""
Tests for FixedSalaryCalculator.

Covers the worked June 2024 examples, holidays paid at the Friday rate,
advance windows, clamping at zero, rounding at the response boundary and
rejection of variable-pay employees.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_engines.advances import AdvanceLedger
from payroll_engines.attendance import AttendanceLedger
from payroll_engines.fixed_salary import FixedSalaryCalculator, round_money
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import Designation, Employee, EmployeeAdvance
from payroll_kernel.exceptions import NotFixedSalaryEmployeeError

JUNE = PayPeriod(2024, 6)


def _employee(salary="30000", variable=False):
    designation = Designation(id=uuid4(), name="Manager", is_variable_pay=variable)
    return Employee(
        id=uuid4(),
        emp_number=1,
        emp_code="EMP1",
        name="Asif",
        designation=designation,
        fixed_monthly_salary=Decimal(salary) if salary is not None else None,
    )


def _advances(employee, *rows):
    return AdvanceLedger(
        EmployeeAdvance(
            id=uuid4(), employee_id=employee.id, amount=Decimal(amount), taken_on=taken_on
        )
        for amount, taken_on in rows
    )


class TestFixedSalaryCalculation:
    def setup_method(self):
        self.calc = FixedSalaryCalculator(friday_multiplier=Decimal("1.5"))
        self.employee = _employee()
        self.attendance = AttendanceLedger(working_days=26, friday_days=4)

    def test_no_advances(self):
        result = self.calc.calculate(self.employee, JUNE, self.attendance)

        assert result.per_day == Decimal("1000")
        assert result.friday_rate == Decimal("1500")
        assert result.normal_pay == Decimal("22000")
        assert result.friday_pay == Decimal("6000")
        assert result.gross_salary == Decimal("28000")
        assert result.advances_total == 0
        assert result.net_pay == Decimal("28000")

    def test_advance_in_month_is_deducted(self):
        ledger = _advances(self.employee, ("5000", date(2024, 6, 10)))
        result = self.calc.calculate(self.employee, JUNE, self.attendance, ledger)

        assert result.advances_total == Decimal("5000")
        assert result.net_pay == Decimal("23000")

    def test_advances_outside_month_ignored(self):
        ledger = _advances(
            self.employee,
            ("1000", date(2024, 5, 31)),
            ("2000", date(2024, 7, 1)),
            ("500", date(2024, 6, 1)),
            ("500", date(2024, 6, 30)),
        )
        result = self.calc.calculate(self.employee, JUNE, self.attendance, ledger)
        assert result.advances_total == Decimal("1000")

    def test_net_clamped_at_zero(self):
        ledger = _advances(self.employee, ("50000", date(2024, 6, 2)))
        result = self.calc.calculate(self.employee, JUNE, self.attendance, ledger)
        assert result.net_pay == 0
        assert result.advances_total == Decimal("50000")

    def test_holidays_paid_at_friday_rate(self):
        attendance = AttendanceLedger(
            working_days=26, friday_days=4, normal_leaves=1, friday_leaves=1, holidays=2
        )
        result = self.calc.calculate(self.employee, JUNE, attendance)

        assert result.normal_days_after_leaves == 19
        assert result.paid_fridays == 3
        assert result.normal_pay == Decimal("19000")
        assert result.friday_pay == Decimal("4500")
        assert result.holiday_pay == Decimal("3000")
        assert result.gross_salary == Decimal("26500")

    def test_bonus_added_to_gross(self):
        result = self.calc.calculate(
            self.employee, JUNE, self.attendance, bonus=Decimal("750")
        )
        assert result.gross_salary == Decimal("28750")

    def test_negative_bonus_rejected(self):
        with pytest.raises(ValueError):
            self.calc.calculate(self.employee, JUNE, self.attendance, bonus=Decimal("-1"))

    def test_multiplier_is_configurable(self):
        calc = FixedSalaryCalculator(friday_multiplier=Decimal("2.5"))
        result = calc.calculate(self.employee, JUNE, self.attendance)
        assert result.friday_rate == Decimal("2500")
        assert result.gross_salary == Decimal("32000")

    def test_non_positive_multiplier_rejected(self):
        with pytest.raises(ValueError):
            FixedSalaryCalculator(friday_multiplier=Decimal("0"))

    def test_month_length_changes_per_day(self):
        feb = PayPeriod(2024, 2)
        attendance = AttendanceLedger(working_days=29, friday_days=4)
        result = self.calc.calculate(_employee("29000"), feb, attendance)
        assert result.per_day == Decimal("1000")
        assert result.gross_salary == Decimal("31000")

    def test_deterministic(self):
        first = self.calc.calculate(self.employee, JUNE, self.attendance)
        second = self.calc.calculate(self.employee, JUNE, self.attendance)
        assert first == second

    def test_logs_calculation(self, captured_logs):
        self.calc.calculate(self.employee, JUNE, self.attendance)
        records = [r for r in captured_logs() if r["message"] == "fixed_salary_calculated"]
        assert len(records) == 1
        assert Decimal(records[0]["net_pay"]) == Decimal("28000")
        assert records[0]["period"] == "2024-06"


class TestResponseRounding:
    def test_rounded_half_up_at_boundary(self):
        calc = FixedSalaryCalculator(friday_multiplier=Decimal("1.5"))
        result = calc.calculate(
            _employee("31000"), JUNE, AttendanceLedger(working_days=26, friday_days=4)
        )
        response = result.to_response()

        assert result.per_day != round_money(result.per_day)
        assert response["per_day"] == Decimal("1033.33")
        assert response["friday_rate"] == Decimal("1550.00")
        assert response["total_salary"] == Decimal("28933.33")
        assert response["final_salary"] == Decimal("28933.33")
        assert response["working_days"] == 26
        assert response["friday_days"] == 4

    def test_round_money_half_up(self):
        assert round_money(Decimal("0.005")) == Decimal("0.01")
        assert round_money(Decimal("2.675")) == Decimal("2.68")


class TestFixedSalaryEligibility:
    def setup_method(self):
        self.calc = FixedSalaryCalculator(friday_multiplier=Decimal("1.5"))
        self.attendance = AttendanceLedger(working_days=26, friday_days=4)

    def test_variable_pay_designation_rejected(self):
        employee = _employee(salary=None, variable=True)
        with pytest.raises(NotFixedSalaryEmployeeError) as exc_info:
            self.calc.calculate(employee, JUNE, self.attendance)
        assert exc_info.value.code == "NOT_FIXED_SALARY_EMPLOYEE"
        assert "variable-pay" in exc_info.value.reason

    def test_missing_salary_rejected(self):
        employee = _employee(salary=None)
        with pytest.raises(NotFixedSalaryEmployeeError) as exc_info:
            self.calc.calculate(employee, JUNE, self.attendance)
        assert "not set" in exc_info.value.reason
