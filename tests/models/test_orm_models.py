"""
ORM round-trip tests for the payroll tables.

Run against the per-test session from conftest (rolled back at teardown).
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import MachineType, PayslipItemKind
from payroll_kernel.models import (
    AdvanceAllocationModel,
    BonusTierModel,
    DesignationModel,
    EmployeeAdvanceModel,
    EmployeeModel,
    MachineCompanyModel,
    MachineModel,
    PayslipItemModel,
    PayslipModel,
    SalaryRateModel,
)


def _designation(session, name="Operator", variable=True):
    model = DesignationModel(is_variable_pay=variable)
    model.set_name(name)
    session.add(model)
    session.flush()
    return model


def _employee(session, designation, number=1, salary=None):
    model = EmployeeModel(
        emp_number=number,
        emp_code=f"EMP{number}",
        name=f"Worker {number}",
        designation_id=designation.id,
        fixed_monthly_salary=salary,
    )
    session.add(model)
    session.flush()
    session.refresh(model)
    return model


class TestDesignationModel:
    def test_round_trip(self, session):
        model = _designation(session, "  Senior Karigar ", variable=True)
        dto = model.to_dto()
        assert dto.name == "Senior Karigar"
        assert dto.key == "senior karigar"
        assert model.slug == "senior-karigar"
        assert model.created_at is not None

    def test_name_unique_case_insensitively(self, session):
        _designation(session, "Operator")
        session.add(
            DesignationModel(
                name="OPERATOR", name_key="operator", slug="operator", is_variable_pay=True
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()


class TestEmployeeModel:
    def test_round_trip(self, session):
        designation = _designation(session, "Manager", variable=False)
        model = _employee(session, designation, salary=Decimal("30000"))

        dto = model.to_dto()
        assert dto.designation.name == "Manager"
        assert dto.fixed_monthly_salary == Decimal("30000")
        assert dto.is_fixed_salary

    def test_employee_number_unique(self, session):
        designation = _designation(session)
        _employee(session, designation, number=7)
        session.add(
            EmployeeModel(
                emp_number=7, emp_code="EMP7b", name="Dup", designation_id=designation.id
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()

    def test_advance_round_trip(self, session):
        employee = _employee(session, _designation(session))
        advance = EmployeeAdvanceModel(
            employee_id=employee.id, amount=Decimal("5000"), taken_on=date(2024, 6, 10)
        )
        session.add(advance)
        session.flush()

        dto = advance.to_dto()
        assert dto.employee_id == employee.id
        assert dto.amount == Decimal("5000")
        assert dto.taken_on == date(2024, 6, 10)


class TestRateModels:
    def test_salary_rate_round_trip(self, session):
        designation = _designation(session, "Karigar")
        rate = SalaryRateModel(
            machine_type=MachineType.H18.value,
            designation_id=designation.id,
            monthly_salary=Decimal("24000"),
        )
        session.add(rate)
        session.flush()
        session.refresh(rate)

        dto = rate.to_dto()
        assert dto.machine_type is MachineType.H18
        assert dto.designation_key == "karigar"

    def test_bonus_threshold_unique_per_type(self, session):
        session.add_all(
            [
                BonusTierModel(
                    machine_type="H18",
                    min_stitches=5000,
                    rate_two_head=Decimal("1"),
                    rate_sheet=Decimal("1"),
                ),
                BonusTierModel(
                    machine_type="H18",
                    min_stitches=5000,
                    rate_two_head=Decimal("2"),
                    rate_sheet=Decimal("2"),
                ),
            ]
        )
        with pytest.raises(IntegrityError):
            session.flush()


class TestPayslipModel:
    def _machine(self, session):
        company = MachineCompanyModel(name="Acme")
        session.add(company)
        session.flush()
        machine = MachineModel(name="M-01", company_id=company.id, machine_type="H18")
        session.add(machine)
        session.flush()
        session.refresh(machine)
        return machine

    def test_round_trip_with_items_and_allocations(self, session):
        employee = _employee(session, _designation(session))
        machine = self._machine(session)
        advance = EmployeeAdvanceModel(
            employee_id=employee.id, amount=Decimal("500"), taken_on=date(2024, 6, 2)
        )
        session.add(advance)
        session.flush()

        payslip = PayslipModel(
            period_year=2024,
            period_month=6,
            employee_id=employee.id,
            employee_name=employee.name,
            designation_name="Operator",
            machine_id=machine.id,
            machine_name=machine.name,
            gross_salary=Decimal("1000.00"),
            gross_bonus=Decimal("200.00"),
            advances_deducted=Decimal("500.00"),
            net_pay=Decimal("700.00"),
            working_days=1,
        )
        payslip.items.append(
            PayslipItemModel(
                position=1,
                kind=PayslipItemKind.BONUS.value,
                amount=Decimal("200.00"),
                description="Bonus",
                work_date=date(2024, 6, 3),
            )
        )
        payslip.items.append(
            PayslipItemModel(
                position=0,
                kind=PayslipItemKind.SALARY.value,
                amount=Decimal("1000.00"),
                description="Salary",
                work_date=date(2024, 6, 3),
            )
        )
        payslip.allocations.append(
            AdvanceAllocationModel(advance_id=advance.id, amount=Decimal("500.00"))
        )
        session.add(payslip)
        session.flush()
        session.expire(payslip)

        dto = payslip.to_dto()
        assert dto.period == PayPeriod(2024, 6)
        assert dto.net_pay == Decimal("700")
        assert [i.kind for i in dto.items] == [PayslipItemKind.SALARY, PayslipItemKind.BONUS]
        assert dto.allocations[0].advance_id == advance.id
        assert dto.allocations[0].payslip_id == payslip.id
        assert dto.machine_name == "M-01"

    def test_one_payslip_per_employee_and_period(self, session):
        employee = _employee(session, _designation(session))

        def _payslip():
            return PayslipModel(
                period_year=2024,
                period_month=6,
                employee_id=employee.id,
                employee_name=employee.name,
                designation_name="Operator",
                gross_salary=Decimal("0"),
                gross_bonus=Decimal("0"),
                advances_deducted=Decimal("0"),
                net_pay=Decimal("0"),
            )

        session.add_all([_payslip(), _payslip()])
        with pytest.raises(IntegrityError):
            session.flush()

    def test_removing_item_deletes_orphan(self, session):
        employee = _employee(session, _designation(session))
        payslip = PayslipModel(
            period_year=2024,
            period_month=6,
            employee_id=employee.id,
            employee_name=employee.name,
            designation_name="Operator",
            gross_salary=Decimal("10"),
            gross_bonus=Decimal("0"),
            advances_deducted=Decimal("0"),
            net_pay=Decimal("10"),
        )
        payslip.items.append(
            PayslipItemModel(position=0, kind="SALARY", amount=Decimal("10"), description="x")
        )
        session.add(payslip)
        session.flush()

        payslip.items.clear()
        session.flush()

        remaining = session.scalars(
            select(PayslipItemModel).where(PayslipItemModel.payslip_id == payslip.id)
        ).all()
        assert remaining == []
