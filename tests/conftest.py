import os
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('SEED_DEMO_DATA', 'false')

from backend.database import Base  # noqa: E402
from backend.models.course import Course, Enrollment  # noqa: E402,F401
from backend.models.user import User  # noqa: E402,F401
from backend.seed import build_demo_courses, build_demo_users  # noqa: E402
from backend.store import RecordStore  # noqa: E402

SEED_DAY = date(2025, 1, 1)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'craftconnect.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db) -> RecordStore:
    return RecordStore(db)


@pytest.fixture
def seeded_store(store: RecordStore) -> RecordStore:
    store.seed_if_empty(build_demo_users(), build_demo_courses(SEED_DAY))
    return store
