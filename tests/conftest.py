import pytest
from datetime import datetime
from typing import Generator
from unittest.mock import MagicMock

from ar_copilot.src.main import app # FastAPI app
from ar_copilot.src.api.dependencies import get_account_store, get_audit_logger, get_metrics_collector
from ar_copilot.src.api.models.account_models import PatientAccountCreate
from ar_copilot.src.core.config.settings import Settings
from ar_copilot.src.core.monitoring.app_metrics import MetricsCollector
from ar_copilot.src.core.monitoring.audit_logger import AuditLogger
from ar_copilot.src.core.storage.account_store import InMemoryAccountStore
from ar_copilot.src.processing.account_service import AccountService

# A fixed moment used wherever comment/export timestamps are asserted
FIXED_NOW = datetime(2024, 3, 5, 14, 7, 0)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger(max_entries=100)


@pytest.fixture
def mock_metrics_collector() -> MagicMock:
    return MagicMock(spec=MetricsCollector)


@pytest.fixture
def app_settings() -> Settings:
    return Settings(_env_file=None) # _env_file=None to prevent .env load


@pytest.fixture
def account_service(store: InMemoryAccountStore, mock_metrics_collector: MagicMock, app_settings: Settings) -> AccountService:
    return AccountService(store=store, metrics_collector=mock_metrics_collector, settings=app_settings)


def account_payload(**overrides) -> dict:
    """Wire-format (camelCase) body for POST /api/accounts."""
    payload = {
        "patientName": "Jane Roe",
        "accountNumber": "ACC-1001",
        "insuranceName": "aetna",
        "sessionId": "session-1",
    }
    payload.update(overrides)
    return payload


def account_create(**overrides) -> PatientAccountCreate:
    data = {
        "patient_name": "Jane Roe",
        "account_number": "ACC-1001",
        "insurance_name": "aetna",
        "session_id": "session-1",
    }
    data.update(overrides)
    return PatientAccountCreate(**data)


@pytest.fixture
def client(store: InMemoryAccountStore, audit_logger: AuditLogger, mock_metrics_collector: MagicMock) -> Generator:
    """
    Provides a FastAPI TestClient backed by a fresh store for each test.
    """
    app.dependency_overrides[get_account_store] = lambda: store
    app.dependency_overrides[get_audit_logger] = lambda: audit_logger
    app.dependency_overrides[get_metrics_collector] = lambda: mock_metrics_collector

    from fastapi.testclient import TestClient # Import here to avoid issues if fastapi isn't installed when conftest is first parsed

    with TestClient(app) as c:
        yield c

    # Clean up overrides after test to prevent leakage between tests
    app.dependency_overrides.clear()


@pytest.fixture
def make_account_payload():
    return account_payload


@pytest.fixture
def make_account_create():
    return account_create
