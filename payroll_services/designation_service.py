"""
DesignationService -- job roles and their pay mode.

Responsibility:
    Create, rename, convert and delete designations while protecting the
    reserved production roles (operator, karigar, helper) that bonus
    eligibility and production pay depend on.

Invariants enforced:
    - Names are unique case-insensitively.
    - Reserved designations cannot be deleted, renamed or converted to
      fixed pay.
    - A designation referenced by employees cannot be deleted, and its pay
      mode cannot change (that would break the salary/designation pairing
      of its employees).

Failure modes:
    - DesignationNotFoundError, DuplicateDesignationError,
      ReservedDesignationError, DesignationInUseError.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from payroll_config import PayrollConfig
from payroll_kernel.domain.values import Designation, designation_key
from payroll_kernel.exceptions import (
    DesignationInUseError,
    DuplicateDesignationError,
    ReservedDesignationError,
)
from payroll_kernel.logging_config import get_logger
from payroll_services.repositories import DesignationRepository, EmployeeRepository

logger = get_logger("services.designation")


class DesignationService:
    def __init__(
        self,
        designations: DesignationRepository,
        employees: EmployeeRepository,
        config: PayrollConfig | None = None,
    ):
        self._designations = designations
        self._employees = employees
        self._config = config or PayrollConfig.with_defaults()

    def list(self) -> list[Designation]:
        return self._designations.list()

    def get(self, designation_id: UUID) -> Designation:
        return self._designations.get(designation_id)

    def find_by_name(self, name: str) -> Designation | None:
        return self._designations.find_by_name(name)

    def is_reserved(self, designation: Designation) -> bool:
        return self._config.is_reserved(designation.name)

    def create(
        self, name: str, is_variable_pay: bool, notes: str | None = None
    ) -> Designation:
        clean = (name or "").strip()
        if not clean:
            raise ValueError("Designation name cannot be empty")
        if self._designations.find_by_name(clean) is not None:
            raise DuplicateDesignationError(clean)

        designation = self._designations.add(clean, is_variable_pay, notes)
        logger.info(
            "designation_created",
            extra={
                "designation_id": str(designation.id),
                "designation": designation.name,
                "is_variable_pay": is_variable_pay,
            },
        )
        return designation

    def update(
        self,
        designation_id: UUID,
        *,
        name: str | None = None,
        is_variable_pay: bool | None = None,
        notes: str | None = None,
    ) -> Designation:
        current = self._designations.get(designation_id)
        reserved = self.is_reserved(current)
        updated = current

        if name is not None and name.strip() != current.name:
            clean = name.strip()
            if not clean:
                raise ValueError("Designation name cannot be empty")
            if reserved:
                raise ReservedDesignationError(current.name, "rename")
            other = self._designations.find_by_name(clean)
            if other is not None and other.id != current.id:
                raise DuplicateDesignationError(clean)
            updated = replace(updated, name=clean)

        if is_variable_pay is not None and is_variable_pay != current.is_variable_pay:
            if reserved:
                raise ReservedDesignationError(current.name, "convert to fixed pay")
            in_use = self._employees.count_by_designation(current.id)
            if in_use:
                raise DesignationInUseError(current.name, in_use)
            updated = replace(updated, is_variable_pay=is_variable_pay)

        if notes is not None:
            updated = replace(updated, notes=notes)

        if updated == current:
            return current
        result = self._designations.update(updated)
        logger.info(
            "designation_updated",
            extra={"designation_id": str(result.id), "designation": result.name},
        )
        return result

    def delete(self, designation_id: UUID) -> None:
        designation = self._designations.get(designation_id)
        if self.is_reserved(designation):
            raise ReservedDesignationError(designation.name, "delete")
        in_use = self._employees.count_by_designation(designation.id)
        if in_use:
            raise DesignationInUseError(designation.name, in_use)
        self._designations.delete(designation.id)
        logger.info(
            "designation_deleted",
            extra={"designation_id": str(designation.id), "designation": designation.name},
        )

    def ensure_defaults(self) -> list[Designation]:
        """Create any missing default designations; returns the ones created."""
        created = []
        for name, is_variable_pay in self._config.default_designations:
            if self._designations.find_by_name(name) is None:
                created.append(self._designations.add(name, is_variable_pay))
        if created:
            logger.info(
                "default_designations_created",
                extra={"designations": [designation_key(d.name) for d in created]},
            )
        return created
