import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("TIMEZONE", "America/New_York")
os.environ.setdefault("SLACK_SIGNING_SECRET", "test-signing-secret")

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pawsboarding.core.deps import get_calendar_gateway, get_db, get_notifier
from pawsboarding.core.errors import NotificationFailure, UpstreamUnavailable
from pawsboarding.db.base import Base
from pawsboarding.main import app
from pawsboarding.services.booking_rules import day_of_week
from pawsboarding.services.calendar_gateway import BusyInterval

FACILITY_TZ = ZoneInfo("America/New_York")


def facility_today() -> date:
    return datetime.now(tz=FACILITY_TZ).date()


def upcoming(dow: int, min_days: int = 14) -> date:
    """First date at least ``min_days`` out that falls on ``dow`` (Sunday=0)."""
    d = facility_today() + timedelta(days=min_days)
    while day_of_week(d) != dow:
        d += timedelta(days=1)
    return d


class FakeGateway:
    def __init__(self, intervals=None, error: str | None = None):
        self.intervals = list(intervals or [])
        self.error = error
        self.calls: list[tuple[date, date]] = []

    async def list_busy_intervals(self, window_start, window_end):
        self.calls.append((window_start, window_end))
        if self.error:
            raise UpstreamUnavailable(self.error)
        return list(self.intervals)


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.posted: list[tuple[str, str]] = []
        self.updated: list[tuple[str, str, str | None]] = []

    async def post_approval_request(self, booking, availability_message):
        if self.fail:
            raise NotificationFailure("Slack chat.postMessage failed: channel_not_found")
        self.posted.append((booking.id, availability_message))
        return f"1700000000.{len(self.posted):06d}"

    async def update_approval_message(self, message_ts, status, approver=None):
        self.updated.append((message_ts, status, approver))


def all_day(first: date, days: int = 1, label: str = "Booked") -> BusyInterval:
    return BusyInterval(first_day=first, last_day=first + timedelta(days=days - 1), label=label, all_day=True)


@pytest.fixture(scope="session")
def engine():
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    tx = connection.begin()

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=connection)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        tx.rollback()
        connection.close()


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def client(db_session, gateway, notifier):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
