"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import get_payment_client, get_store
from src.config.settings import Settings, get_settings
from src.revenue.config import RevenueConfig
from src.revenue.payment import X402PaymentClient
from src.revenue.schemas import PaymentResult


@pytest.fixture
def payment_client():
    """Payment client whose relay call is mocked out."""
    client = X402PaymentClient(RevenueConfig())
    client.settle = AsyncMock(
        return_value=PaymentResult(success=True, payer="SP2PAYER", txid="0xfeed")
    )
    return client


def _build_app(store, payment_client, settings: Settings | None = None):
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    if settings is not None:
        app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(store, payment_client):
    """FastAPI TestClient over an in-memory store, briefs free."""
    app = _build_app(store, payment_client)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def paid_client(store, payment_client):
    """FastAPI TestClient with brief reads behind x402 payment."""
    app = _build_app(
        store,
        payment_client,
        Settings(store_backend="memory", brief_access_mode="paid"),
    )

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
