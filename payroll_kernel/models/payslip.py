"""
Payslip ORM models.

One payslip per (period, employee).  Items and allocations belong to the
payslip and are deleted with it; re-issuing a payslip replaces both.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.period import PayPeriod
from payroll_kernel.domain.values import (
    AdvanceAllocation,
    Payslip,
    PayslipItem,
    PayslipItemKind,
)


class PayslipModel(TrackedBase):
    """ORM model for ``Payslip``."""

    __tablename__ = "payslips"

    period_year: Mapped[int] = mapped_column(Integer, nullable=False)
    period_month: Mapped[int] = mapped_column(Integer, nullable=False)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employees.id"), nullable=False
    )
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    designation_name: Mapped[str] = mapped_column(String(100), nullable=False)
    machine_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("machines.id"), nullable=True
    )
    machine_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gross_salary: Mapped[Decimal] = mapped_column(nullable=False)
    gross_bonus: Mapped[Decimal] = mapped_column(nullable=False)
    advances_deducted: Mapped[Decimal] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)
    working_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    items: Mapped[list["PayslipItemModel"]] = relationship(
        back_populates="payslip",
        cascade="all, delete-orphan",
        order_by="PayslipItemModel.position",
    )
    allocations: Mapped[list["AdvanceAllocationModel"]] = relationship(
        back_populates="payslip",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint(
            "period_year", "period_month", "employee_id", name="uq_payslip_period_employee"
        ),
        Index("idx_payslip_period", "period_year", "period_month"),
    )

    def to_dto(self) -> Payslip:
        return Payslip(
            id=self.id,
            period=PayPeriod(self.period_year, self.period_month),
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            designation_name=self.designation_name,
            gross_salary=self.gross_salary,
            gross_bonus=self.gross_bonus,
            advances_deducted=self.advances_deducted,
            net_pay=self.net_pay,
            working_days=self.working_days,
            machine_id=self.machine_id,
            machine_name=self.machine_name,
            items=tuple(item.to_dto() for item in self.items),
            allocations=tuple(a.to_dto() for a in self.allocations),
        )

    def __repr__(self) -> str:
        return (
            f"<PayslipModel {self.period_year}-{self.period_month:02d} "
            f"{self.employee_name} net={self.net_pay}>"
        )


class PayslipItemModel(TrackedBase):
    __tablename__ = "payslip_items"

    payslip_id: Mapped[UUID] = mapped_column(
        ForeignKey("payslips.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    work_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    machine_id: Mapped[UUID | None] = mapped_column(nullable=True)

    payslip: Mapped[PayslipModel] = relationship(back_populates="items")

    def to_dto(self) -> PayslipItem:
        return PayslipItem(
            kind=PayslipItemKind(self.kind),
            amount=self.amount,
            description=self.description,
            work_date=self.work_date,
            machine_id=self.machine_id,
        )


class AdvanceAllocationModel(TrackedBase):
    """How much of an advance a payslip consumed."""

    __tablename__ = "advance_allocations"

    advance_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee_advances.id"), nullable=False
    )
    payslip_id: Mapped[UUID] = mapped_column(
        ForeignKey("payslips.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)

    payslip: Mapped[PayslipModel] = relationship(back_populates="allocations")

    __table_args__ = (Index("idx_allocation_advance", "advance_id"),)

    def to_dto(self) -> AdvanceAllocation:
        return AdvanceAllocation(
            advance_id=self.advance_id,
            amount=self.amount,
            payslip_id=self.payslip_id,
        )
