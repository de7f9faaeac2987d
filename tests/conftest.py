"""
Pytest configuration and shared fixtures.
"""
import pytest
from httpx import AsyncClient, ASGITransport

from poolview.api.main import app, get_datasource, get_settings
from poolview.config import Settings
from poolview.infrastructure.gateways.local_mock import LocalMockDataSource


@pytest.fixture
def settings():
    return Settings(graph_api_key="test-key", subgraph_id="test-subgraph")


@pytest.fixture
def datasource():
    return LocalMockDataSource()


@pytest.fixture
async def client(settings, datasource):
    """Async HTTP client for testing FastAPI endpoints against the in-memory pool source."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_datasource] = lambda: datasource
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
