"""
Test configuration and fixtures for NutriMood.

Implements the transaction rollback pattern:
- Session-scoped in-memory SQLite engine
- Function-scoped session inside an outer transaction that is rolled back
- TestClient with database dependency override
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nutrimood.database import Base, get_db
from nutrimood.main import app
import nutrimood.models  # noqa: F401  (register tables)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_engine():
    """
    Create the test database engine once per session.

    A single shared in-memory connection (StaticPool) is used so every
    session and the TestClient thread see the same tables.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs these hooks for SAVEPOINT-based rollback to work
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Generator[Session, None, None]:
    """
    Provide a transactional database session that rolls back after each test.

    Commits inside the code under test only release savepoints; the outer
    transaction is rolled back so no data leaks between tests.
    """
    connection = test_engine.connect()
    transaction = connection.begin()

    TestingSessionLocal = sessionmaker(
        bind=connection, join_transaction_mode="create_savepoint"
    )
    session = TestingSessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# TestClient Fixtures
# =============================================================================


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    TestClient with database dependency override.

    The database session is injected into the app's get_db dependency.
    """

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
