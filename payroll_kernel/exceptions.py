"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A payroll run touches many employees at once.  Callers must be able to tell a
configuration gap (no rate for a machine type) from bad input (more Friday
leaves than Fridays) without parsing messages, and must be able to report the
exact missing key back to an administrator.

Every error therefore:
  1. Has its own class (catch by type, not message)
  2. Carries a class-level CODE attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollError (base)
    |
    +-- EmployeeError
    |   +-- EmployeeNotFoundError
    |   +-- NotFixedSalaryEmployeeError
    |   +-- InvalidEmployeeError
    |
    +-- RateError
    |   +-- RateNotConfiguredError
    |   +-- InvalidRateTableError
    |
    +-- AttendanceError
    |   +-- InvalidAttendanceError
    |
    +-- DesignationError
    |   +-- DesignationNotFoundError
    |   +-- DuplicateDesignationError
    |   +-- ReservedDesignationError
    |   +-- DesignationInUseError
    |
    +-- MachineError
    |   +-- MachineNotFoundError
    |
    +-- AdvanceError
    |   +-- InvalidAdvanceError
    |
    +-- PayslipError
    |   +-- PayslipNotFoundError
    |
    +-- RequestError
        +-- InvalidPayrollRequestError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                       | When Raised
-------------|----------------------------|-------------------------------------------
Employee     | EMPLOYEE_NOT_FOUND         | Employee ID doesn't exist
             | NOT_FIXED_SALARY_EMPLOYEE  | Fixed-salary calc on a variable-pay employee
             | INVALID_EMPLOYEE           | Salary/designation combination is invalid
-------------|----------------------------|-------------------------------------------
Rate         | RATE_NOT_CONFIGURED        | No salary rate / bonus tiers for the key
             | INVALID_RATE_TABLE         | Upserted rate set violates table rules
-------------|----------------------------|-------------------------------------------
Attendance   | INVALID_ATTENDANCE         | Negative counts, leaves exceeding days
-------------|----------------------------|-------------------------------------------
Designation  | DESIGNATION_NOT_FOUND      | Designation ID doesn't exist
             | DUPLICATE_DESIGNATION      | Name already used (case-insensitive)
             | RESERVED_DESIGNATION       | Delete/convert of operator/karigar/helper
             | DESIGNATION_IN_USE         | Designation referenced by employees
-------------|----------------------------|-------------------------------------------
Machine      | MACHINE_NOT_FOUND          | Machine ID doesn't exist
-------------|----------------------------|-------------------------------------------
Advance      | INVALID_ADVANCE            | Advance amount is zero or negative
-------------|----------------------------|-------------------------------------------
Payslip      | PAYSLIP_NOT_FOUND          | Payslip ID doesn't exist
-------------|----------------------------|-------------------------------------------
Request      | INVALID_PAYROLL_REQUEST    | Request field missing or not parseable

UNKNOWN_EMPLOYEE is deliberately absent: an unresolvable assignment on a
production day is a soft warning collected on the result (see
``payroll_engines.production_pay.UnknownEmployeeWarning``), not an exception.

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        breakdown = salary_service.calculate(request)
    except RateNotConfiguredError as e:
        api_response(code=e.code, machine_type=e.machine_type,
                     designation=e.designation)
    except PayrollError as e:
        api_response(code=e.code, message=str(e))

Batch services catch ``PayrollError`` per employee and report the code next
to the successful results; anything that is not a ``PayrollError`` is a bug
and propagates.
"""


class PayrollError(Exception):
    """
    Base exception for all payroll errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ERROR"


# Employee-related exceptions


class EmployeeError(PayrollError):
    """Base exception for employee-related errors."""

    code: str = "EMPLOYEE_ERROR"


class EmployeeNotFoundError(EmployeeError):
    """Employee with given ID was not found."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = str(employee_id)
        super().__init__(f"Employee not found: {employee_id}")


class NotFixedSalaryEmployeeError(EmployeeError):
    """Fixed-salary calculation requested for an employee without a fixed salary."""

    code: str = "NOT_FIXED_SALARY_EMPLOYEE"

    def __init__(self, employee_id: str, designation: str, reason: str | None = None):
        self.employee_id = str(employee_id)
        self.designation = designation
        self.reason = reason or "designation is variable-pay or salary is missing"
        super().__init__(
            f"Employee {employee_id} ({designation}) does not have a fixed salary: "
            f"{self.reason}"
        )


class InvalidEmployeeError(EmployeeError):
    """Employee data violates the salary/designation pairing rules."""

    code: str = "INVALID_EMPLOYEE"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid employee {field}: {reason}")


# Rate-related exceptions


class RateError(PayrollError):
    """Base exception for rate table errors."""

    code: str = "RATE_ERROR"


class RateNotConfiguredError(RateError):
    """No salary entry or bonus tier exists for the requested key."""

    code: str = "RATE_NOT_CONFIGURED"

    def __init__(
        self,
        machine_type: str,
        designation: str | None = None,
        bonus_kind: str | None = None,
    ):
        self.machine_type = machine_type
        self.designation = designation
        self.bonus_kind = bonus_kind
        if designation is not None:
            detail = f"salary rate for designation '{designation}'"
        elif bonus_kind is not None:
            detail = f"bonus tiers for kind '{bonus_kind}'"
        else:
            detail = "rates"
        super().__init__(f"No {detail} configured for machine type {machine_type}")


class InvalidRateTableError(RateError):
    """A rate set supplied for replacement violates the table rules."""

    code: str = "INVALID_RATE_TABLE"

    def __init__(self, machine_type: str, reason: str):
        self.machine_type = machine_type
        self.reason = reason
        super().__init__(f"Invalid rate table for {machine_type}: {reason}")


# Attendance exceptions


class AttendanceError(PayrollError):
    """Base exception for attendance errors."""

    code: str = "ATTENDANCE_ERROR"


class InvalidAttendanceError(AttendanceError):
    """Attendance counts violate the ledger invariants."""

    code: str = "INVALID_ATTENDANCE"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid attendance {field}={value}: {reason}")


# Designation exceptions


class DesignationError(PayrollError):
    """Base exception for designation errors."""

    code: str = "DESIGNATION_ERROR"


class DesignationNotFoundError(DesignationError):
    """Designation with given ID or name was not found."""

    code: str = "DESIGNATION_NOT_FOUND"

    def __init__(self, designation: str):
        self.designation = str(designation)
        super().__init__(f"Designation not found: {designation}")


class DuplicateDesignationError(DesignationError):
    """A designation with the same name (case-insensitive) already exists."""

    code: str = "DUPLICATE_DESIGNATION"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Designation already exists: {name}")


class ReservedDesignationError(DesignationError):
    """Attempt to delete or convert a system-reserved designation."""

    code: str = "RESERVED_DESIGNATION"

    def __init__(self, name: str, action: str):
        self.name = name
        self.action = action
        super().__init__(f"Cannot {action} reserved designation '{name}'")


class DesignationInUseError(DesignationError):
    """Designation is referenced by employees."""

    code: str = "DESIGNATION_IN_USE"

    def __init__(self, name: str, employee_count: int):
        self.name = name
        self.employee_count = employee_count
        super().__init__(
            f"Designation '{name}' is in use by {employee_count} employee(s)"
        )


# Machine exceptions


class MachineError(PayrollError):
    """Base exception for machine errors."""

    code: str = "MACHINE_ERROR"


class MachineNotFoundError(MachineError):
    """Machine with given ID was not found."""

    code: str = "MACHINE_NOT_FOUND"

    def __init__(self, machine_id: str):
        self.machine_id = str(machine_id)
        super().__init__(f"Machine not found: {machine_id}")


# Advance exceptions


class AdvanceError(PayrollError):
    """Base exception for cash advance errors."""

    code: str = "ADVANCE_ERROR"


class InvalidAdvanceError(AdvanceError):
    """Advance amount is not positive."""

    code: str = "INVALID_ADVANCE"

    def __init__(self, employee_id: str, amount: str):
        self.employee_id = str(employee_id)
        self.amount = amount
        super().__init__(f"Advance amount must be positive, got {amount}")


# Payslip exceptions


class PayslipError(PayrollError):
    """Base exception for stored payslip errors."""

    code: str = "PAYSLIP_ERROR"


class PayslipNotFoundError(PayslipError):
    """Payslip ID doesn't exist."""

    code: str = "PAYSLIP_NOT_FOUND"

    def __init__(self, payslip_id: str):
        self.payslip_id = str(payslip_id)
        super().__init__(f"Payslip not found: {payslip_id}")


# Request exceptions


class RequestError(PayrollError):
    """Base exception for caller-supplied request errors."""

    code: str = "REQUEST_ERROR"


class InvalidPayrollRequestError(RequestError):
    """A request field is missing or cannot be parsed."""

    code: str = "INVALID_PAYROLL_REQUEST"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = None if value is None else str(value)
        self.reason = reason
        super().__init__(f"Invalid request field {field}={value!r}: {reason}")
