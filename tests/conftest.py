import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

# Set environment variables BEFORE any imports that might use settings
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_funeral_core.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["DEFAULT_POLICY_PRESET"] = "STANDARD"
os.environ["CONFLICT_RETRY_ATTEMPTS"] = "3"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from funeral_core.main import app

ROOT = Path(__file__).resolve().parent.parent

TENANT = "fh-42"
OTHER_TENANT = "fh-7"


class FakeClock:
    """Deterministic clock for lifecycle managers. Advances only when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function")
def session_factory():
    """Create a fresh migrated database for each test and return a session factory."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    # Enable WAL mode to reduce locking issues
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    # Run Alembic migrations to set up the database schema
    alembic_cfg = Config(str(ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    try:
        yield TestingSessionLocal
    finally:
        # Dispose the engine to close all connections
        test_engine.dispose()

        # Clean up - remove test database file, WAL files and directory
        try:
            for suffix in ["", "-wal", "-shm"]:
                path = f"{test_db_path}{suffix}"
                if os.path.exists(path):
                    os.remove(path)
            if os.path.exists(temp_db_dir):
                os.rmdir(temp_db_dir)
        except OSError as e:
            print(f"Cleanup failed: {e}")


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from funeral_core.api.deps import get_db

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def actor_headers() -> dict:
    return {"X-Actor-Id": "director@fh-42.example.com"}


@pytest.fixture(scope="function")
def case(db: Session):
    """Create a current case for tenant fh-42."""
    from funeral_core.services.case import create_case

    return create_case(
        db,
        tenant_id=TENANT,
        actor="director@fh-42.example.com",
        decedent_name="Margaret Hale",
        case_type="at_need",
        status="active",
        amount=100,
        business_key="case-1",
    )
