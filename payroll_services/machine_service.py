"""MachineService -- machines and their owning companies (reporting only)."""

from __future__ import annotations

from uuid import UUID

from payroll_kernel.domain.values import Machine, MachineType
from payroll_kernel.logging_config import get_logger
from payroll_services.repositories import MachineRepository

logger = get_logger("services.machine")


class MachineService:
    def __init__(self, machines: MachineRepository):
        self._machines = machines

    def register(
        self, name: str, company_name: str, machine_type: MachineType | str
    ) -> Machine:
        """Add a machine; the company is created on first use."""
        clean_name = (name or "").strip()
        clean_company = (company_name or "").strip()
        if not clean_name:
            raise ValueError("Machine name cannot be empty")
        if not clean_company:
            raise ValueError("Company name cannot be empty")

        machine = self._machines.add(clean_name, clean_company, MachineType(machine_type))
        logger.info(
            "machine_registered",
            extra={
                "machine_id": str(machine.id),
                "machine_name": machine.name,
                "machine_type": machine.machine_type.value,
                "company_name": machine.company_name,
            },
        )
        return machine

    def get(self, machine_id: UUID) -> Machine:
        return self._machines.get(machine_id)

    def list(self) -> list[Machine]:
        return self._machines.list()
