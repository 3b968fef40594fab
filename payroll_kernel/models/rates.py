"""
Rate table ORM models.

Both tables are keyed by machine type, never by an individual machine, and
are replaced wholesale per machine type.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.values import BonusTier, MachineType, SalaryRateEntry
from payroll_kernel.models.designation import DesignationModel


class SalaryRateModel(TrackedBase):
    """ORM model for ``SalaryRateEntry`` (one row per machine type + designation)."""

    __tablename__ = "salary_rates"

    machine_type: Mapped[str] = mapped_column(String(10), nullable=False)
    designation_id: Mapped[UUID] = mapped_column(
        ForeignKey("designations.id"), nullable=False
    )
    monthly_salary: Mapped[Decimal] = mapped_column(nullable=False)

    designation: Mapped[DesignationModel] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "machine_type", "designation_id", name="uq_salary_rate_type_designation"
        ),
    )

    def to_dto(self) -> SalaryRateEntry:
        return SalaryRateEntry(
            machine_type=MachineType(self.machine_type),
            designation=self.designation.name,
            monthly_salary=self.monthly_salary,
        )


class BonusTierModel(TrackedBase):
    """ORM model for ``BonusTier``."""

    __tablename__ = "bonus_tiers"

    machine_type: Mapped[str] = mapped_column(String(10), nullable=False)
    min_stitches: Mapped[int] = mapped_column(Integer, nullable=False)
    rate_two_head: Mapped[Decimal] = mapped_column(nullable=False)
    rate_sheet: Mapped[Decimal] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "machine_type", "min_stitches", name="uq_bonus_tier_type_threshold"
        ),
    )

    def to_dto(self) -> BonusTier:
        return BonusTier(
            machine_type=MachineType(self.machine_type),
            min_stitches=self.min_stitches,
            rate_two_head=self.rate_two_head,
            rate_sheet=self.rate_sheet,
        )
