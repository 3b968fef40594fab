"""
Payroll Kernel

Shared foundation for the manufacturing payroll engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Immutable domain value objects (Decimal-only money)
- SQLAlchemy persistence for designations, employees, rates, advances
  and payslips
"""

__version__ = "0.1.0"
