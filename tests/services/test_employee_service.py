"""Tests for EmployeeService: salary pairing, codes and advances."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_kernel.exceptions import (
    DesignationNotFoundError,
    EmployeeNotFoundError,
    InvalidAdvanceError,
    InvalidEmployeeError,
    NotFixedSalaryEmployeeError,
)


class TestCreateEmployee:
    def test_codes_are_sequential(self, make_employee):
        first = make_employee("Asif", "manager", "30000")
        second = make_employee("Bilal", "operator")
        assert (first.emp_number, first.emp_code) == (1, "EMP1")
        assert (second.emp_number, second.emp_code) == (2, "EMP2")

    def test_personal_details_stored(self, make_employee):
        employee = make_employee("Asif", "manager", "30000", father_name="Aslam", city="Lahore")
        assert employee.father_name == "Aslam"
        assert employee.city == "Lahore"
        assert employee.is_fixed_salary

    def test_variable_pay_with_salary_rejected(self, make_employee):
        with pytest.raises(InvalidEmployeeError) as exc_info:
            make_employee("Bilal", "operator", "30000")
        assert exc_info.value.field == "fixed_monthly_salary"

    def test_fixed_pay_without_salary_rejected(self, make_employee):
        with pytest.raises(InvalidEmployeeError):
            make_employee("Asif", "manager")

    def test_non_positive_salary_rejected(self, make_employee):
        with pytest.raises(InvalidEmployeeError):
            make_employee("Asif", "manager", "0")

    def test_empty_name_rejected(self, make_employee):
        with pytest.raises(InvalidEmployeeError):
            make_employee("  ", "operator")

    def test_unknown_designation(self, services):
        with pytest.raises(DesignationNotFoundError):
            services.employees.create("Asif", uuid4())

    def test_unknown_employee(self, services):
        with pytest.raises(EmployeeNotFoundError):
            services.employees.get(uuid4())

    def test_list_by_designations(self, services, designations, make_employee):
        make_employee("Asif", "manager", "30000")
        op = make_employee("Bilal", "operator")
        found = services.employees.list_by_designations([designations["operator"].id])
        assert [e.id for e in found] == [op.id]


class TestDesignationChange:
    def test_to_variable_pay_clears_salary(self, services, designations, make_employee):
        employee = make_employee("Asif", "manager", "30000")
        moved = services.employees.change_designation(employee.id, designations["operator"].id)
        assert moved.designation.key == "operator"
        assert moved.fixed_monthly_salary is None

    def test_to_fixed_pay_requires_salary(self, services, designations, make_employee):
        employee = make_employee("Bilal", "operator")
        with pytest.raises(InvalidEmployeeError):
            services.employees.change_designation(employee.id, designations["manager"].id)

        moved = services.employees.change_designation(
            employee.id, designations["manager"].id, Decimal("27000")
        )
        assert moved.fixed_monthly_salary == Decimal("27000")

    def test_between_fixed_designations_keeps_salary(self, services, designations, make_employee):
        employee = make_employee("Asif", "manager", "30000")
        moved = services.employees.change_designation(employee.id, designations["supervisor"].id)
        assert moved.fixed_monthly_salary == Decimal("30000")

    def test_update_fixed_salary(self, services, make_employee):
        employee = make_employee("Asif", "manager", "30000")
        assert services.employees.update_fixed_salary(
            employee.id, Decimal("32000")
        ).fixed_monthly_salary == Decimal("32000")

    def test_update_salary_on_variable_pay_rejected(self, services, make_employee):
        employee = make_employee("Bilal", "operator")
        with pytest.raises(NotFixedSalaryEmployeeError):
            services.employees.update_fixed_salary(employee.id, Decimal("1000"))


class TestAdvances:
    def test_defaults_to_today(self, services, make_employee):
        employee = make_employee("Asif", "manager", "30000")
        advance = services.employees.record_advance(employee.id, Decimal("500"))
        assert advance.taken_on == date(2024, 6, 15)

    @pytest.mark.parametrize("amount", ["0", "-10"])
    def test_non_positive_rejected(self, services, make_employee, amount):
        employee = make_employee("Asif", "manager", "30000")
        with pytest.raises(InvalidAdvanceError):
            services.employees.record_advance(employee.id, Decimal(amount))

    def test_window_query_is_half_open(self, services, make_employee):
        employee = make_employee("Asif", "manager", "30000")
        rows = ((date(2024, 5, 31), "1"), (date(2024, 6, 1), "2"), (date(2024, 7, 1), "3"))
        for day, amount in rows:
            services.employees.record_advance(employee.id, Decimal(amount), day)

        june = services.employees.advances_for(employee.id, date(2024, 6, 1), date(2024, 7, 1))
        assert [a.amount for a in june] == [Decimal("2")]

    def test_summary(self, services, make_employee):
        employee = make_employee("Asif", "manager", "30000")
        services.employees.record_advance(employee.id, Decimal("5000"), date(2024, 6, 3))
        services.employees.record_advance(employee.id, Decimal("1500"), date(2024, 6, 20))

        summary = services.employees.advance_summary(employee.id, 2024, 6)
        assert summary.total == Decimal("6500")
        assert summary.advance_count == 2
        assert summary.unallocated == Decimal("6500")
