"""
Payroll Configuration Schema.

Defines the structure and defaults for payroll settings.  Actual values are
loaded from YAML at runtime (see ``payroll_config.loader``).
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from typing import Any, Self

from payroll_kernel.domain.values import designation_key
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.schema")

DEFAULT_RESERVED_DESIGNATIONS = frozenset({"operator", "karigar", "helper"})
DEFAULT_BONUS_ELIGIBLE_DESIGNATIONS = frozenset({"operator", "karigar"})
DEFAULT_DESIGNATIONS: tuple[tuple[str, bool], ...] = (
    ("operator", True),
    ("karigar", True),
    ("helper", True),
    ("supervisor", False),
    ("manager", False),
)


def _to_decimal(name: str, value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a decimal number, got {value!r}") from exc


@dataclass(frozen=True)
class PayrollConfig:
    """
    Configuration schema for the payroll engine.

    The Friday multiplier is deliberately a setting: earlier calculators
    disagreed between 1.5 and 2.5, and the business value must be supplied
    explicitly rather than guessed.

        config = PayrollConfig(friday_multiplier=Decimal("2.5"))
    """

    friday_multiplier: Decimal = Decimal("1.5")
    bonus_eligible_designations: frozenset[str] = DEFAULT_BONUS_ELIGIBLE_DESIGNATIONS
    reserved_designations: frozenset[str] = DEFAULT_RESERVED_DESIGNATIONS
    default_designations: tuple[tuple[str, bool], ...] = field(
        default=DEFAULT_DESIGNATIONS
    )
    money_places: Decimal = Decimal("0.01")
    salary_rate_days_basis: int = 30
    employee_code_prefix: str = "EMP"

    def __post_init__(self):
        # Normalize collections so YAML lists and mixed-case names behave
        object.__setattr__(
            self, "friday_multiplier", _to_decimal("friday_multiplier", self.friday_multiplier)
        )
        object.__setattr__(
            self, "money_places", _to_decimal("money_places", self.money_places)
        )
        object.__setattr__(
            self,
            "bonus_eligible_designations",
            frozenset(designation_key(n) for n in self.bonus_eligible_designations),
        )
        object.__setattr__(
            self,
            "reserved_designations",
            frozenset(designation_key(n) for n in self.reserved_designations),
        )
        object.__setattr__(
            self,
            "default_designations",
            tuple((str(name), bool(variable)) for name, variable in self.default_designations),
        )

        if self.friday_multiplier <= 0:
            raise ValueError("friday_multiplier must be positive")
        if self.money_places <= 0:
            raise ValueError("money_places must be positive")
        if self.salary_rate_days_basis <= 0:
            raise ValueError("salary_rate_days_basis must be positive")
        if not self.employee_code_prefix:
            raise ValueError("employee_code_prefix cannot be empty")
        if not self.bonus_eligible_designations <= self.reserved_designations:
            extra = sorted(self.bonus_eligible_designations - self.reserved_designations)
            raise ValueError(
                f"bonus_eligible_designations must be reserved designations, got {extra}"
            )

        logger.debug(
            "payroll_config_initialized",
            extra={
                "friday_multiplier": str(self.friday_multiplier),
                "bonus_eligible_designations": sorted(self.bonus_eligible_designations),
                "reserved_designations": sorted(self.reserved_designations),
                "money_places": str(self.money_places),
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the shipped defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dictionary (e.g. parsed YAML)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown payroll config keys: {unknown}")

        kwargs = dict(data)
        for key in ("bonus_eligible_designations", "reserved_designations"):
            if key in kwargs:
                kwargs[key] = frozenset(kwargs[key])
        if "default_designations" in kwargs:
            kwargs["default_designations"] = tuple(
                (row["name"], row["is_variable_pay"]) if isinstance(row, dict) else tuple(row)
                for row in kwargs["default_designations"]
            )
        if "salary_rate_days_basis" in kwargs:
            kwargs["salary_rate_days_basis"] = int(kwargs["salary_rate_days_basis"])

        logger.info("payroll_config_loading_from_dict", extra={"keys": sorted(data)})
        return cls(**kwargs)

    def is_bonus_eligible(self, designation_name: str) -> bool:
        return designation_key(designation_name) in self.bonus_eligible_designations

    def is_reserved(self, designation_name: str) -> bool:
        return designation_key(designation_name) in self.reserved_designations
