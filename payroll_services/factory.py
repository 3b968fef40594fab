"""
Composition root: wire SQL repositories into the payroll services.

Usage:
    with session_scope() as session:
        services = PayrollServices.from_session(session, get_active_config())
        services.salary.calculate({...})
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from payroll_config import PayrollConfig
from payroll_kernel.domain.clock import Clock
from payroll_services.designation_service import DesignationService
from payroll_services.employee_service import EmployeeService
from payroll_services.machine_service import MachineService
from payroll_services.payroll_run_service import PayrollRunService
from payroll_services.rate_service import RateService
from payroll_services.salary_service import SalaryService
from payroll_services.sql_repositories import (
    SqlAdvanceRepository,
    SqlDesignationRepository,
    SqlEmployeeRepository,
    SqlMachineRepository,
    SqlPayslipRepository,
    SqlRateRepository,
)


@dataclass(frozen=True)
class PayrollServices:
    designations: DesignationService
    employees: EmployeeService
    machines: MachineService
    rates: RateService
    salary: SalaryService
    payroll_runs: PayrollRunService

    @classmethod
    def from_session(
        cls,
        session: Session,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ) -> PayrollServices:
        config = config or PayrollConfig.with_defaults()
        designation_repo = SqlDesignationRepository(session)
        employee_repo = SqlEmployeeRepository(session)
        machine_repo = SqlMachineRepository(session)
        rate_repo = SqlRateRepository(session)
        advance_repo = SqlAdvanceRepository(session)
        payslip_repo = SqlPayslipRepository(session)

        return cls(
            designations=DesignationService(designation_repo, employee_repo, config),
            employees=EmployeeService(
                employee_repo, designation_repo, advance_repo, config, clock
            ),
            machines=MachineService(machine_repo),
            rates=RateService(rate_repo, config),
            salary=SalaryService(employee_repo, advance_repo, payslip_repo, config),
            payroll_runs=PayrollRunService(
                employee_repo,
                machine_repo,
                rate_repo,
                advance_repo,
                payslip_repo,
                config,
            ),
        )
