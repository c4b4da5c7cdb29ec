"""Shared fixtures: in-memory storage, fast settings and a fake HTTP session."""

from unittest.mock import MagicMock

import pytest

from finova.agents import AdviceDispatcher, RuleBasedAssistant
from finova.audit import AuditLogger
from finova.config.settings import AppSettings, InferenceSettings
from finova.models.finance import Demographic, DemographicType, FinancialData, User
from finova.models.insights import AdviceContext
from finova.services.storage import FinanceStore, KeyValueAuditStorage, MemoryBackend


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return FinanceStore(backend)


@pytest.fixture
def audit_storage(backend):
    return KeyValueAuditStorage(backend)


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def app_settings():
    return AppSettings(
        thinking_delay_seconds=0,
        history_window=5,
        default_currency="USD",
        remote_assistant_enabled=False,
        storage_path=None,
    )


@pytest.fixture
def inference_settings():
    return InferenceSettings(
        api_base="https://inference.test/models",
        primary_model="primary/model",
        fallback_model="fallback/model",
        token=None,
        timeout_seconds=None,
    )


@pytest.fixture
def rules():
    return RuleBasedAssistant(AdviceDispatcher(), thinking_delay_seconds=0)


@pytest.fixture
def user():
    return User(
        email="asha@example.com",
        full_name="Asha Rao",
        demographic=Demographic(type=DemographicType.PROFESSIONAL),
        financial_goals=["Buy a house"],
    )


@pytest.fixture
def snapshot():
    return FinancialData(total_balance=10000, monthly_income=2000, monthly_expenses=500)


@pytest.fixture
def ctx(user, snapshot):
    return AdviceContext.build(user, snapshot, currency="USD")


def _fake_response(status_code=200, body=None, json_error=False):
    """Fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def make_response():
    return _fake_response
