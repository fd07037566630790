"""Test fixtures for the machinehub API tests."""
import os
import shutil
import tempfile

# Must be set before machinehub modules read their configuration.
STORED_DIR = tempfile.mkdtemp(prefix="machinehub-stored-")
os.environ["MACHINEHUB_DATABASE_URL"] = "sqlite://"
os.environ["MACHINEHUB_STORED_DIR"] = STORED_DIR

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from machinehub.db import Base
from machinehub.models.error_log import ErrorLog  # noqa: F401
from machinehub.models.machine_config import MachineConfig  # noqa: F401


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def TestingSessionLocal(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(TestingSessionLocal):
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="session", autouse=True)
def remove_storage_root():
    """Delete the temporary storage root once the session ends."""
    yield
    shutil.rmtree(STORED_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_storage():
    """Empty the image storage root between tests."""
    yield
    for entry in os.listdir(STORED_DIR):
        shutil.rmtree(os.path.join(STORED_DIR, entry), ignore_errors=True)


@pytest.fixture
def app(TestingSessionLocal):
    """FastAPI app with the database dependency pointed at the test engine."""
    from machinehub.api.machines import get_db
    from machinehub.main import app as fastapi_app

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def registered_machine(db_session):
    """Insert a machine that has already made its first contact."""
    from machinehub.services import config_store

    config = config_store.fetch_or_register(db_session, "dev-1", True)
    return config.id
