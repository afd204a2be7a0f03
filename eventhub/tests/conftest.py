import os
import tempfile
from datetime import datetime, timedelta, timezone

# Point the app at a throwaway SQLite file before anything imports the engine
_TEST_DIR = tempfile.mkdtemp(prefix="eventhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOCK_BACKEND"] = "local"
os.environ["STORE_RETRY_BACKOFF"] = "0"

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from eventhub.core.locks import RedisEventLocker  # noqa: E402
from eventhub.database.db import Base, SessionLocal, engine  # noqa: E402
from eventhub.main import app  # noqa: E402
from eventhub.models.events import Event  # noqa: E402
from eventhub.models.users import User  # noqa: E402
from eventhub.routes.deps import get_locker  # noqa: E402

TestingSessionLocal = SessionLocal


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def redis_client(fake_redis):
    """Route the API's per-event locks through fakeredis."""
    app.dependency_overrides[get_locker] = lambda: RedisEventLocker(fake_redis, blocking_timeout=10)
    yield fake_redis
    app.dependency_overrides.pop(get_locker, None)


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def make_user(db: Session, email: str, *, is_organizer: bool = False) -> User:
    user = User(email=email, full_name=email.split("@")[0], is_organizer=is_organizer)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_event(
    db: Session,
    organizer: User,
    *,
    title: str = "Test Event",
    capacity: int = 10,
    booked_count: int = 0,
    days_ahead: float = 7,
    category: str | None = None,
    is_featured: bool = False,
) -> Event:
    event = Event(
        title=title,
        capacity=capacity,
        booked_count=booked_count,
        scheduled_at=datetime.now(timezone.utc) + timedelta(days=days_ahead),
        organizer_id=organizer.id,
        category=category,
        is_featured=is_featured,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture
def organizer(db_session: Session) -> User:
    return make_user(db_session, "organizer@example.com", is_organizer=True)


@pytest.fixture
def attendee(db_session: Session) -> User:
    return make_user(db_session, "attendee@example.com")


def auth(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


REGISTRATION_FORM = {"full_name": "Jane Doe", "phone_number": "+15551234567"}
