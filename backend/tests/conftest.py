import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from examgrid.api.deps import get_app_settings, get_db
from examgrid.core.config import Settings
from examgrid.db.base import Base
from examgrid.main import app
from examgrid.services.timetable_locks import clear_timetable_locks


@pytest.fixture()
def client():
    clear_timetable_locks()
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    def override_get_settings():
        # Fixed seed keeps auto-schedule responses reproducible.
        return Settings(exam_scheduler_random_seed=7)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_settings] = override_get_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_timetable_locks()
