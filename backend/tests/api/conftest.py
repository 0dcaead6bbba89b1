"""Test client wired to the in-memory service fixtures instead of the startup-built one."""
import pytest
from fastapi.testclient import TestClient

from folio.api.deps import get_market_data_service, get_portfolio_service
from folio.api.main import create_app


@pytest.fixture
def app(service, market_data):
    app = create_app()
    app.dependency_overrides[get_portfolio_service] = lambda: service
    app.dependency_overrides[get_market_data_service] = lambda: market_data
    return app


@pytest.fixture
def client(app):
    # Not entered as a context manager, so startup seeding never runs
    return TestClient(app)
