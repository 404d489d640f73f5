import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from onboarding.config import settings
from onboarding.database import get_db, init_db
from onboarding.main import app
from onboarding.services.account_service import account_service


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data_dir(tmp_path):
    data_dir = tmp_path / "OnboardingDocs"
    data_dir.mkdir()
    (data_dir / "logos").mkdir()
    return data_dir


@pytest.fixture
def test_db(tmp_data_dir):
    db_path = tmp_data_dir / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def fresh_account_service():
    """Reset in-memory sessions for each test."""
    original = account_service.__dict__.copy()
    account_service._sessions = {}
    yield account_service
    account_service.__dict__.update(original)


@pytest.fixture
def client(tmp_data_dir, test_db, fresh_account_service):
    original_data_dir = settings.data_dir
    settings.data_dir = tmp_data_dir
    c = TestClient(app)
    yield c
    settings.data_dir = original_data_dir

