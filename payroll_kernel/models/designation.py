"""
Designation ORM model.

Names are unique case-insensitively; uniqueness is enforced on the
lower-cased ``name_key`` column so "Operator" and "operator" collide.
"""

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.values import Designation, designation_key, slugify


class DesignationModel(TrackedBase):
    """ORM model for ``Designation``."""

    __tablename__ = "designations"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    name_key: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    is_variable_pay: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("name_key", name="uq_designation_name_key"),
    )

    def set_name(self, name: str) -> None:
        self.name = name.strip()
        self.name_key = designation_key(name)
        self.slug = slugify(name)

    def to_dto(self) -> Designation:
        return Designation(
            id=self.id,
            name=self.name,
            is_variable_pay=self.is_variable_pay,
            notes=self.notes,
        )

    def __repr__(self) -> str:
        kind = "variable" if self.is_variable_pay else "fixed"
        return f"<DesignationModel {self.name} ({kind})>"
