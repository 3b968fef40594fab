"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a YAML file and parses it into a ``PayrollConfig``.  Services never
call this directly; runtime configuration flows through
``payroll_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Non-mapping document or unknown keys  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollConfig

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def load_payroll_config(path: Path | str | None = None) -> PayrollConfig:
    """Parse ``path`` (default: the shipped ``defaults.yaml``) into a config."""
    data = load_yaml_file(Path(path) if path is not None else DEFAULTS_PATH)
    return PayrollConfig.from_dict(data.get("payroll", data))


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed config document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
