"""
SQLAlchemy ORM models.

Importing this package registers every payroll table on ``Base.metadata``.
"""

from payroll_kernel.models.designation import DesignationModel
from payroll_kernel.models.employee import EmployeeAdvanceModel, EmployeeModel
from payroll_kernel.models.machine import MachineCompanyModel, MachineModel
from payroll_kernel.models.payslip import (
    AdvanceAllocationModel,
    PayslipItemModel,
    PayslipModel,
)
from payroll_kernel.models.rates import BonusTierModel, SalaryRateModel

__all__ = [
    "AdvanceAllocationModel",
    "BonusTierModel",
    "DesignationModel",
    "EmployeeAdvanceModel",
    "EmployeeModel",
    "MachineCompanyModel",
    "MachineModel",
    "PayslipItemModel",
    "PayslipModel",
    "SalaryRateModel",
]
