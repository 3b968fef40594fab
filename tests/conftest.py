"""
Pytest fixtures for the payroll test suite.

Provides:
- An in-memory SQLite database (override with PAYROLL_TEST_DATABASE_URL,
  e.g. a PostgreSQL URL) and a per-test session that is rolled back
- Structured logging capture
- Wired services and small data factories

Engine tests under ``tests/engines`` need none of the database fixtures.
"""

import json
import logging
import os
from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy.orm import Session

from payroll_config import PayrollConfig
from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.domain.values import MachineType
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_services import PayrollServices

DEFAULT_TEST_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, services):
            services.salary.calculate(...)
            logs = captured_logs()
            assert any(r["message"] == "fixed_salary_calculated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    engine = init_engine_from_url(
        os.environ.get("PAYROLL_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)
    )
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Session joined to an outer transaction that is rolled back at teardown."""
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Services and factories
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 6, 15, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def payroll_config() -> PayrollConfig:
    return PayrollConfig.with_defaults()


@pytest.fixture
def services(session, payroll_config, deterministic_clock) -> PayrollServices:
    return PayrollServices.from_session(session, payroll_config, deterministic_clock)


@pytest.fixture
def designations(services):
    """Default designations keyed by lower-case name."""
    services.designations.ensure_defaults()
    return {d.key: d for d in services.designations.list()}


@pytest.fixture
def make_employee(services, designations):
    """Create an employee by designation name."""

    def _make(name: str, designation: str, salary: str | None = None, **kwargs):
        return services.employees.create(
            name,
            designations[designation].id,
            Decimal(salary) if salary is not None else None,
            **kwargs,
        )

    return _make


@pytest.fixture
def h18_rates(services, designations):
    """H18 salary table (30000/month operator) and a two-tier bonus table."""
    services.rates.replace_salary_rates(
        MachineType.H18,
        {
            "operator": Decimal("30000"),
            "karigar": Decimal("24000"),
            "helper": Decimal("15000"),
        },
    )
    services.rates.replace_bonus_tiers(
        MachineType.H18,
        [
            ("2 head", 0, "0"),
            ("sheet", 0, "0"),
            ("2 head", 5000, "200"),
            ("sheet", 5000, "100"),
        ],
    )
    return services.rates.rate_table([MachineType.H18])
