"""Shared fixtures.

Environment variables are set before ``catalog`` is imported because the
settings object and the engine are created at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CREATE_TABLES"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from catalog.database import Base, build_session_factory, get_db
from catalog.main import app
from catalog.models import Product  # noqa: F401
from catalog.repository import ProductRepository
from tests.utils import product_payload


@pytest.fixture
def database_file(tmp_path):
    """A fresh SQLite file with the product table created."""
    path = tmp_path / "catalog.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


@pytest.fixture
def session_factory(database_file):
    # NullPool: every session opens its own connection on the running loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{database_file}", poolclass=NullPool)
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def repo(session_factory):
    async with session_factory() as session:
        yield ProductRepository(session)


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def create_product(client):
    """Create a product through the API and return its JSON body."""
    def _create(code="P0001", **overrides):
        response = client.post("/products", json=product_payload(code, **overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _create
