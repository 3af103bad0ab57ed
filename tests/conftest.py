"""
Pytest fixtures for the FuelEU compliance test suite.

Provides:
- Structured logging configured for the whole run, plus a log capture fixture
- Database sessions with per-test isolation
- Deterministic clock, identifier generator and regulation parameters

Environment Variables:
- DATABASE_URL: database connection URL.  Defaults to an in-memory SQLite
  database; point it at PostgreSQL to exercise row locking for real.
"""

import json
import logging
import os
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from fueleu_config import get_active_regulation
from fueleu_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from fueleu_kernel.domain.clock import DeterministicClock
from fueleu_kernel.domain.identifiers import SequentialIdGenerator
from fueleu_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from fueleu_kernel.services.route_service import RouteService
from fueleu_services import ComplianceLedgerService

DEFAULT_DATABASE_URL = "sqlite://"


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


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
    Capture fueleu logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.calculate_cb("S1", 2025, "85.0", "5000")
            logs = captured_logs()
            assert any(r["message"] == "compliance_balance_upserted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fueleu")
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
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session on a freshly created schema.

    Tables are created before and dropped after every test, so a test that
    commits cannot leak rows into the next one.
    """
    create_tables()
    sess = get_session()

    yield sess

    sess.rollback()
    sess.close()
    drop_tables()


# =============================================================================
# Deterministic collaborators
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def id_generator():
    """Sequential ids: ``id-1``, ``id-2``, ..."""
    return SequentialIdGenerator()


@pytest.fixture(scope="session")
def regulation():
    """Regulation parameters shipped with fueleu_config."""
    return get_active_regulation()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def ledger(session, regulation, id_generator, deterministic_clock) -> ComplianceLedgerService:
    """Provide a ComplianceLedgerService on the test session."""
    return ComplianceLedgerService(
        session,
        regulation=regulation,
        id_generator=id_generator,
        clock=deterministic_clock,
    )


SEED_ROUTES = [
    ("R001", "Container", "HFO", 2024, Decimal("91.0"), Decimal("5000"), Decimal("12000"), Decimal("4500")),
    ("R002", "BulkCarrier", "LNG", 2024, Decimal("88.0"), Decimal("4800"), Decimal("11500"), Decimal("4200")),
    ("R003", "Tanker", "MGO", 2024, Decimal("93.5"), Decimal("5100"), Decimal("12500"), Decimal("4700")),
    ("R004", "RoRo", "HFO", 2025, Decimal("89.2"), Decimal("4900"), Decimal("11800"), Decimal("4300")),
    ("R005", "Container", "LNG", 2025, Decimal("90.5"), Decimal("4950"), Decimal("11900"), Decimal("4400")),
]


@pytest.fixture
def seeded_routes(session):
    """Insert the reference routes R001-R005 with R001 as baseline."""
    service = RouteService(session)
    routes = [
        service.add_route(
            route_id=route_id,
            vessel_type=vessel,
            fuel_type=fuel,
            year=year,
            ghg_intensity=intensity,
            fuel_consumption=fuel_t,
            distance=distance,
            total_emissions=emissions,
        )
        for route_id, vessel, fuel, year, intensity, fuel_t, distance, emissions in SEED_ROUTES
    ]
    service.set_baseline("R001")
    return routes
