"""
Employee and cash-advance ORM models.

Advances are read-only ledger rows once written; what has been consumed is
tracked by ``AdvanceAllocationModel`` rows pointing at them.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.values import Employee, EmployeeAdvance
from payroll_kernel.models.designation import DesignationModel


class EmployeeModel(TrackedBase):
    """
    ORM model for ``Employee``.

    Guarantees:
        - ``emp_number`` and ``emp_code`` are unique.
        - ``fixed_monthly_salary`` is only meaningful for fixed-pay
          designations; the service layer clears it on conversion.
    """

    __tablename__ = "employees"

    emp_number: Mapped[int] = mapped_column(Integer, nullable=False)
    emp_code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    designation_id: Mapped[UUID] = mapped_column(
        ForeignKey("designations.id"), nullable=False
    )
    fixed_monthly_salary: Mapped[Decimal | None] = mapped_column(nullable=True)
    father_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    cnic: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

    designation: Mapped[DesignationModel] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("emp_number", name="uq_employee_number"),
        UniqueConstraint("emp_code", name="uq_employee_code"),
        Index("idx_employee_designation", "designation_id"),
    )

    def to_dto(self) -> Employee:
        return Employee(
            id=self.id,
            emp_number=self.emp_number,
            emp_code=self.emp_code,
            name=self.name,
            designation=self.designation.to_dto(),
            fixed_monthly_salary=self.fixed_monthly_salary,
            father_name=self.father_name,
            cnic=self.cnic,
            phone=self.phone,
            city=self.city,
        )

    def __repr__(self) -> str:
        return f"<EmployeeModel {self.emp_code}: {self.name}>"


class EmployeeAdvanceModel(TrackedBase):
    """ORM model for ``EmployeeAdvance``."""

    __tablename__ = "employee_advances"

    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employees.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    taken_on: Mapped[date] = mapped_column(Date, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_advance_employee_taken_on", "employee_id", "taken_on"),
    )

    def to_dto(self) -> EmployeeAdvance:
        return EmployeeAdvance(
            id=self.id,
            employee_id=self.employee_id,
            amount=self.amount,
            taken_on=self.taken_on,
            note=self.note,
        )

    def __repr__(self) -> str:
        return f"<EmployeeAdvanceModel {self.employee_id} {self.amount} on {self.taken_on}>"
