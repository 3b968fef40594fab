"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    ``get_active_config()`` is the only way services obtain settings.  YAML
    loading is internal; callers receive a validated, frozen
    ``PayrollConfig``.

Audit relevance:
    Every call emits a ``payroll_config_loaded`` log record carrying the
    source path, checksum and the Friday multiplier in force, so a computed
    payslip can be traced to the settings that produced it.
"""

from __future__ import annotations

from pathlib import Path

from payroll_config.loader import (
    DEFAULTS_PATH,
    compute_checksum,
    load_payroll_config,
    load_yaml_file,
)
from payroll_config.schema import PayrollConfig
from payroll_kernel.logging_config import get_logger

_logger = get_logger("config")


def get_active_config(path: Path | str | None = None) -> PayrollConfig:
    """Load and validate the payroll configuration.

    Args:
        path: YAML file to load. Defaults to the shipped ``defaults.yaml``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the configuration fails validation.
    """
    source = Path(path) if path is not None else DEFAULTS_PATH
    config = load_payroll_config(source)
    _logger.info(
        "payroll_config_loaded",
        extra={
            "source": str(source),
            "checksum": compute_checksum(load_yaml_file(source)),
            "friday_multiplier": str(config.friday_multiplier),
        },
    )
    return config


__all__ = [
    "PayrollConfig",
    "get_active_config",
    "load_payroll_config",
]
