"""
payroll_services -- orchestration over the pure payroll engines.

Services take repositories (see ``payroll_services.repositories``) and a
``PayrollConfig``; they flush through the repositories and never commit.
``PayrollServices.from_session`` wires the SQLAlchemy implementations.
"""

from payroll_services.designation_service import DesignationService
from payroll_services.employee_service import AdvanceSummary, EmployeeService
from payroll_services.factory import PayrollServices
from payroll_services.machine_service import MachineService
from payroll_services.payroll_run_service import PayrollRunService
from payroll_services.rate_service import RateService, load_rate_table
from payroll_services.results import BatchFailure, PayrollRunResult, PayslipBatchResult
from payroll_services.salary_service import FixedSalaryRequest, SalaryService

__all__ = [
    "AdvanceSummary",
    "BatchFailure",
    "DesignationService",
    "EmployeeService",
    "FixedSalaryRequest",
    "MachineService",
    "PayrollRunResult",
    "PayrollRunService",
    "PayrollServices",
    "PayslipBatchResult",
    "RateService",
    "SalaryService",
    "load_rate_table",
]
