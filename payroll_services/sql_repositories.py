"""
SQLAlchemy implementations of the repository protocols.

Responsibility:
    Translate between ORM rows (``payroll_kernel.models``) and the frozen
    domain DTOs the engines consume.

Invariants enforced:
    - Flush, never commit: every write happens in the caller's transaction.
    - Rate replacement is delete-then-insert for one machine type.
    - Advance rows can be read ``FOR UPDATE`` (PostgreSQL); SQLite ignores
      the clause.

Failure modes:
    - EmployeeNotFoundError / DesignationNotFoundError / MachineNotFoundError
      / PayslipNotFoundError when a lookup by id misses.
    - DesignationNotFoundError when a salary entry names an unknown
      designation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import (
    AdvanceAllocation,
    BonusTier,
    Designation,
    Employee,
    EmployeeAdvance,
    Machine,
    MachineType,
    Payslip,
    SalaryRateEntry,
    designation_key,
)
from payroll_kernel.exceptions import (
    DesignationNotFoundError,
    EmployeeNotFoundError,
    MachineNotFoundError,
    PayslipNotFoundError,
)
from payroll_kernel.logging_config import get_logger
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

logger = get_logger("services.sql_repositories")


class SqlDesignationRepository:
    def __init__(self, session: Session):
        self._session = session

    def _model(self, designation_id: UUID) -> DesignationModel:
        model = self._session.get(DesignationModel, designation_id)
        if model is None:
            raise DesignationNotFoundError(str(designation_id))
        return model

    def get(self, designation_id: UUID) -> Designation:
        return self._model(designation_id).to_dto()

    def find_by_name(self, name: str) -> Designation | None:
        model = self._session.execute(
            select(DesignationModel).where(
                DesignationModel.name_key == designation_key(name)
            )
        ).scalar_one_or_none()
        return model.to_dto() if model else None

    def list(self) -> list[Designation]:
        rows = self._session.execute(
            select(DesignationModel).order_by(DesignationModel.name_key)
        ).scalars()
        return [m.to_dto() for m in rows]

    def add(self, name: str, is_variable_pay: bool, notes: str | None = None) -> Designation:
        model = DesignationModel(is_variable_pay=is_variable_pay, notes=notes)
        model.set_name(name)
        self._session.add(model)
        self._session.flush()
        return model.to_dto()

    def update(self, designation: Designation) -> Designation:
        model = self._model(designation.id)
        model.set_name(designation.name)
        model.is_variable_pay = designation.is_variable_pay
        model.notes = designation.notes
        self._session.flush()
        return model.to_dto()

    def delete(self, designation_id: UUID) -> None:
        self._session.delete(self._model(designation_id))
        self._session.flush()


class SqlEmployeeRepository:
    def __init__(self, session: Session):
        self._session = session

    def _model(self, employee_id: UUID) -> EmployeeModel:
        model = self._session.get(EmployeeModel, employee_id)
        if model is None:
            raise EmployeeNotFoundError(str(employee_id))
        return model

    def get(self, employee_id: UUID) -> Employee:
        return self._model(employee_id).to_dto()

    def list(self) -> list[Employee]:
        rows = self._session.execute(
            select(EmployeeModel).order_by(EmployeeModel.emp_number)
        ).scalars()
        return [m.to_dto() for m in rows]

    def list_by_designations(self, designation_ids: Iterable[UUID]) -> list[Employee]:
        ids = list(designation_ids)
        if not ids:
            return []
        rows = self._session.execute(
            select(EmployeeModel)
            .where(EmployeeModel.designation_id.in_(ids))
            .order_by(EmployeeModel.emp_number)
        ).scalars()
        return [m.to_dto() for m in rows]

    def count_by_designation(self, designation_id: UUID) -> int:
        return self._session.execute(
            select(func.count(EmployeeModel.id)).where(
                EmployeeModel.designation_id == designation_id
            )
        ).scalar_one()

    def max_emp_number(self) -> int:
        value = self._session.execute(select(func.max(EmployeeModel.emp_number))).scalar()
        return value or 0

    def add(
        self,
        *,
        emp_number: int,
        emp_code: str,
        name: str,
        designation_id: UUID,
        fixed_monthly_salary: Decimal | None = None,
        father_name: str | None = None,
        cnic: str | None = None,
        phone: str | None = None,
        city: str | None = None,
    ) -> Employee:
        model = EmployeeModel(
            emp_number=emp_number,
            emp_code=emp_code,
            name=name,
            designation_id=designation_id,
            fixed_monthly_salary=fixed_monthly_salary,
            father_name=father_name,
            cnic=cnic,
            phone=phone,
            city=city,
        )
        self._session.add(model)
        self._session.flush()
        # Load the joined designation for to_dto()
        self._session.refresh(model)
        return model.to_dto()

    def set_designation(
        self,
        employee_id: UUID,
        designation_id: UUID,
        fixed_monthly_salary: Decimal | None,
    ) -> Employee:
        model = self._model(employee_id)
        model.designation_id = designation_id
        model.fixed_monthly_salary = fixed_monthly_salary
        self._session.flush()
        self._session.refresh(model)
        return model.to_dto()


class SqlMachineRepository:
    def __init__(self, session: Session):
        self._session = session

    def get(self, machine_id: UUID) -> Machine:
        model = self._session.get(MachineModel, machine_id)
        if model is None:
            raise MachineNotFoundError(str(machine_id))
        return model.to_dto()

    def list(self) -> list[Machine]:
        rows = self._session.execute(
            select(MachineModel).order_by(MachineModel.name)
        ).scalars()
        return [m.to_dto() for m in rows]

    def add(self, name: str, company_name: str, machine_type: MachineType) -> Machine:
        company = self._session.execute(
            select(MachineCompanyModel).where(MachineCompanyModel.name == company_name)
        ).scalar_one_or_none()
        if company is None:
            company = MachineCompanyModel(name=company_name)
            self._session.add(company)
            logger.info("machine_company_created", extra={"company_name": company_name})

        model = MachineModel(
            name=name,
            company=company,
            machine_type=MachineType(machine_type).value,
        )
        self._session.add(model)
        self._session.flush()
        return model.to_dto()


class SqlRateRepository:
    def __init__(self, session: Session):
        self._session = session

    def get_salary_rates(self, machine_type: MachineType) -> list[SalaryRateEntry]:
        rows = self._session.execute(
            select(SalaryRateModel).where(
                SalaryRateModel.machine_type == MachineType(machine_type).value
            )
        ).scalars()
        return [m.to_dto() for m in rows]

    def get_bonus_tiers(self, machine_type: MachineType) -> list[BonusTier]:
        rows = self._session.execute(
            select(BonusTierModel)
            .where(BonusTierModel.machine_type == MachineType(machine_type).value)
            .order_by(BonusTierModel.min_stitches)
        ).scalars()
        return [m.to_dto() for m in rows]

    def replace_salary_rates(
        self, machine_type: MachineType, entries: Sequence[SalaryRateEntry]
    ) -> None:
        mt = MachineType(machine_type).value
        designations = {}
        for entry in entries:
            model = self._session.execute(
                select(DesignationModel).where(
                    DesignationModel.name_key == entry.designation_key
                )
            ).scalar_one_or_none()
            if model is None:
                raise DesignationNotFoundError(entry.designation)
            designations[entry.designation_key] = model

        self._session.execute(
            delete(SalaryRateModel).where(SalaryRateModel.machine_type == mt)
        )
        for entry in entries:
            self._session.add(
                SalaryRateModel(
                    machine_type=mt,
                    designation=designations[entry.designation_key],
                    monthly_salary=entry.monthly_salary,
                )
            )
        self._session.flush()

    def replace_bonus_tiers(
        self, machine_type: MachineType, tiers: Sequence[BonusTier]
    ) -> None:
        mt = MachineType(machine_type).value
        self._session.execute(delete(BonusTierModel).where(BonusTierModel.machine_type == mt))
        for tier in tiers:
            self._session.add(
                BonusTierModel(
                    machine_type=mt,
                    min_stitches=tier.min_stitches,
                    rate_two_head=tier.rate_two_head,
                    rate_sheet=tier.rate_sheet,
                )
            )
        self._session.flush()


class SqlAdvanceRepository:
    def __init__(self, session: Session):
        self._session = session

    def add(
        self, employee_id: UUID, amount: Decimal, taken_on: date, note: str | None = None
    ) -> EmployeeAdvance:
        model = EmployeeAdvanceModel(
            employee_id=employee_id, amount=amount, taken_on=taken_on, note=note
        )
        self._session.add(model)
        self._session.flush()
        return model.to_dto()

    def find_by_employee_and_window(
        self,
        employee_id: UUID,
        start: date | None,
        end: date | None,
        for_update: bool = False,
    ) -> list[EmployeeAdvance]:
        stmt = select(EmployeeAdvanceModel).where(
            EmployeeAdvanceModel.employee_id == employee_id
        )
        if start is not None:
            stmt = stmt.where(EmployeeAdvanceModel.taken_on >= start)
        if end is not None:
            stmt = stmt.where(EmployeeAdvanceModel.taken_on < end)
        stmt = stmt.order_by(EmployeeAdvanceModel.taken_on, EmployeeAdvanceModel.created_at)
        if for_update:
            stmt = stmt.with_for_update()
        return [m.to_dto() for m in self._session.execute(stmt).scalars()]

    def allocations_for(self, advance_ids: Iterable[UUID]) -> list[AdvanceAllocation]:
        ids = list(advance_ids)
        if not ids:
            return []
        rows = self._session.execute(
            select(AdvanceAllocationModel).where(AdvanceAllocationModel.advance_id.in_(ids))
        ).scalars()
        return [m.to_dto() for m in rows]

    def record_allocation(self, advance_id: UUID, payslip_id: UUID, amount: Decimal) -> None:
        payslip = self._session.get(PayslipModel, payslip_id)
        if payslip is None:
            raise ValueError(f"Payslip {payslip_id} must be stored before its allocations")
        payslip.allocations.append(
            AdvanceAllocationModel(advance_id=advance_id, amount=amount)
        )
        self._session.flush()

    def release_payslip(self, payslip_id: UUID) -> int:
        payslip = self._session.get(PayslipModel, payslip_id)
        if payslip is None:
            return 0
        count = len(payslip.allocations)
        payslip.allocations.clear()
        self._session.flush()
        return count


class SqlPayslipRepository:
    def __init__(self, session: Session):
        self._session = session

    def _find(self, period: PayPeriod, employee_id: UUID) -> PayslipModel | None:
        return self._session.execute(
            select(PayslipModel).where(
                PayslipModel.period_year == period.year,
                PayslipModel.period_month == period.month,
                PayslipModel.employee_id == employee_id,
            )
        ).scalar_one_or_none()

    def _model(self, payslip_id: UUID) -> PayslipModel:
        model = self._session.get(PayslipModel, payslip_id)
        if model is None:
            raise PayslipNotFoundError(str(payslip_id))
        return model

    def get(self, period: PayPeriod, employee_id: UUID) -> Payslip | None:
        model = self._find(period, employee_id)
        return model.to_dto() if model else None

    def get_by_id(self, payslip_id: UUID) -> Payslip:
        return self._model(payslip_id).to_dto()

    def list_for_period(self, period: PayPeriod) -> list[Payslip]:
        rows = self._session.execute(
            select(PayslipModel)
            .where(
                PayslipModel.period_year == period.year,
                PayslipModel.period_month == period.month,
            )
            .order_by(PayslipModel.employee_name)
        ).scalars()
        return [m.to_dto() for m in rows]

    def list_for_employee(
        self, employee_id: UUID, period: PayPeriod | None = None
    ) -> list[Payslip]:
        stmt = select(PayslipModel).where(PayslipModel.employee_id == employee_id)
        if period is not None:
            stmt = stmt.where(
                PayslipModel.period_year == period.year,
                PayslipModel.period_month == period.month,
            )
        stmt = stmt.order_by(
            PayslipModel.period_year.desc(), PayslipModel.period_month.desc()
        )
        return [m.to_dto() for m in self._session.execute(stmt).scalars()]

    def upsert(self, payslip: Payslip) -> Payslip:
        model = self._find(payslip.period, payslip.employee_id)
        if model is None:
            model = PayslipModel(
                id=payslip.id,
                period_year=payslip.period.year,
                period_month=payslip.period.month,
                employee_id=payslip.employee_id,
            )
            self._session.add(model)
        model.employee_name = payslip.employee_name
        model.designation_name = payslip.designation_name
        model.machine_id = payslip.machine_id
        model.machine_name = payslip.machine_name
        model.gross_salary = payslip.gross_salary
        model.gross_bonus = payslip.gross_bonus
        model.advances_deducted = payslip.advances_deducted
        model.net_pay = payslip.net_pay
        model.working_days = payslip.working_days
        model.items = [
            PayslipItemModel(
                position=position,
                kind=item.kind.value,
                amount=item.amount,
                description=item.description,
                work_date=item.work_date,
                machine_id=item.machine_id,
            )
            for position, item in enumerate(payslip.items)
        ]
        self._session.flush()
        return model.to_dto()

    def delete(self, payslip_id: UUID) -> None:
        # Items and allocations go with the payslip (delete-orphan cascade)
        self._session.delete(self._model(payslip_id))
        self._session.flush()
