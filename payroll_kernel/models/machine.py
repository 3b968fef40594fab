"""Machine and owning-company ORM models (reporting grouping only)."""

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.values import Machine, MachineType


class MachineCompanyModel(TrackedBase):
    __tablename__ = "machine_companies"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (UniqueConstraint("name", name="uq_machine_company_name"),)


class MachineModel(TrackedBase):
    """ORM model for ``Machine``."""

    __tablename__ = "machines"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("machine_companies.id"), nullable=False
    )
    machine_type: Mapped[str] = mapped_column(String(10), nullable=False)

    company: Mapped[MachineCompanyModel] = relationship(lazy="joined")

    def to_dto(self) -> Machine:
        return Machine(
            id=self.id,
            name=self.name,
            company_name=self.company.name,
            machine_type=MachineType(self.machine_type),
        )

    def __repr__(self) -> str:
        return f"<MachineModel {self.name} ({self.machine_type})>"
