"""Application-level behaviour: health, error envelopes, timeouts and settings."""

import asyncio
from datetime import datetime, timezone

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from catalog.config import Settings, settings
from catalog.database import clean_asyncpg_url, get_db
from catalog.errors import (
    CatalogError,
    ConcurrencyConflictError,
    DuplicateCodeError,
    ProductNotFoundError,
    StorageFailureError,
)
from catalog.main import app
from catalog.models.product import Product
from tests.utils import product_payload


class BrokenSession:
    """Stands in for an AsyncSession whose database is unreachable."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    async def get(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    async def rollback(self):
        pass


class FailingCommitSession:
    """Reads succeed and return a stored product; every commit raises `error`."""

    def __init__(self, error):
        self.error = error
        now = datetime.now(timezone.utc)
        self.product = Product(id=1, **product_payload("P0001"), created_at=now, updated_at=now)

    def add(self, instance):
        pass

    async def get(self, *args, **kwargs):
        return self.product

    async def delete(self, instance):
        pass

    async def commit(self):
        raise self.error

    async def refresh(self, instance):
        pass

    async def rollback(self):
        pass


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestStorageFailures:
    def _break_database(self):
        async def broken_db():
            yield BrokenSession()

        app.dependency_overrides[get_db] = broken_db

    def test_list_all_returns_server_error(self, client):
        self._break_database()

        response = client.get("/products/all")

        assert response.status_code == 500
        assert response.json() == {"code": "storage_error", "message": "Internal server error"}

    def test_get_returns_server_error(self, client):
        self._break_database()

        assert client.get("/products/1").status_code == 500

    def test_view_returns_server_error(self, client):
        self._break_database()

        assert client.get("/products/view").status_code == 500


class TestWriteFailures:
    def _fail_commits_with(self, error):
        async def failing_db():
            yield FailingCommitSession(error)

        app.dependency_overrides[get_db] = failing_db

    def _storage_down(self):
        self._fail_commits_with(OperationalError("COMMIT", {}, Exception("database is down")))

    def test_create_returns_storage_error(self, client):
        self._storage_down()

        response = client.post("/products", json=product_payload("W1"))

        assert response.status_code == 500
        assert response.json() == {"code": "storage_error", "message": "Internal server error"}

    def test_update_returns_storage_error(self, client):
        self._storage_down()

        response = client.put("/products/1", json=product_payload("W1", id=1))

        assert response.status_code == 500
        assert response.json()["code"] == "storage_error"

    def test_delete_returns_storage_error(self, client):
        self._storage_down()

        response = client.delete("/products/1")

        assert response.status_code == 500
        assert response.json()["code"] == "storage_error"

    def test_update_of_vanished_row_returns_concurrency_error(self, client):
        self._fail_commits_with(
            StaleDataError("UPDATE statement on table 'product' expected to update 1 row(s); 0 were matched.")
        )

        response = client.put("/products/1", json=product_payload("W1", id=1))

        assert response.status_code == 500
        assert response.json() == {"code": "concurrency_error", "message": "Concurrency error occurred"}


def test_slow_request_times_out(client, monkeypatch):
    async def slow_db():
        await asyncio.sleep(2)
        yield None

    app.dependency_overrides[get_db] = slow_db
    monkeypatch.setattr(settings, "request_timeout_seconds", 0.05)

    response = client.get("/products/all")

    assert response.status_code == 500
    assert response.json()["code"] == "timeout"


def test_timeout_response_carries_cors_headers(client, monkeypatch):
    async def slow_db():
        await asyncio.sleep(2)
        yield None

    app.dependency_overrides[get_db] = slow_db
    monkeypatch.setattr(settings, "request_timeout_seconds", 0.05)

    response = client.get("/products/all", headers={"Origin": "http://x.example"})

    assert response.status_code == 500
    assert response.json()["code"] == "timeout"
    assert response.headers["access-control-allow-origin"] == "*"


class TestErrors:
    def test_not_found_message_names_the_id(self):
        error = ProductNotFoundError(7)
        assert error.status_code == 404
        assert error.to_dict() == {"code": "not_found", "message": "Product with ID 7 not found"}

    def test_duplicate_code_is_conflict(self):
        error = DuplicateCodeError("ABC")
        assert error.status_code == 409
        assert "ABC" in error.message

    def test_concurrency_error_is_a_storage_failure(self):
        error = ConcurrencyConflictError("Concurrency error occurred")
        assert isinstance(error, StorageFailureError)
        assert isinstance(error, CatalogError)
        assert error.status_code == 500
        assert error.code == "concurrency_error"


class TestSettings:
    def test_sync_url_derived_from_asyncpg_url(self):
        config = Settings(database_url="postgresql+asyncpg://u:p@db:5432/catalog", database_url_sync=None)
        assert config.sync_database_url == "postgresql://u:p@db:5432/catalog"

    def test_explicit_sync_url_wins(self):
        config = Settings(
            database_url="postgresql+asyncpg://u:p@db/catalog",
            database_url_sync="postgresql://other/catalog",
        )
        assert config.sync_database_url == "postgresql://other/catalog"

    def test_sqlite_sync_url(self):
        config = Settings(database_url="sqlite+aiosqlite:///./catalog.db", database_url_sync=None)
        assert config.sync_database_url == "sqlite:///./catalog.db"


class TestCleanAsyncpgUrl:
    def test_plain_postgres_url_converted(self):
        url, connect_args = clean_asyncpg_url("postgresql://u:p@localhost:5432/catalog")
        assert url == "postgresql+asyncpg://u:p@localhost:5432/catalog"
        assert connect_args == {}

    def test_sslmode_moved_to_connect_args(self):
        url, connect_args = clean_asyncpg_url("postgresql://u:p@localhost/catalog?sslmode=require")
        assert url == "postgresql+asyncpg://u:p@localhost/catalog"
        assert connect_args == {"ssl": True}

    def test_sslmode_disable(self):
        _, connect_args = clean_asyncpg_url("postgresql://u:p@localhost/catalog?sslmode=disable")
        assert connect_args == {"ssl": False}

    def test_non_postgres_url_untouched(self):
        assert clean_asyncpg_url("sqlite+aiosqlite:///x.db") == ("sqlite+aiosqlite:///x.db", {})
