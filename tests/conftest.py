"""Pytest fixtures for slot calculation and booking tests."""

import os
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from slotwise.config.database import get_db
from slotwise.domain import (
    Booking,
    BookingStatus,
    EventPolicy,
    GuestInfo,
    WeeklyAvailabilityRule,
)
from slotwise.main import app
from slotwise.models import Base
from slotwise.schemas.event_type import EventTypeCreate
from slotwise.schemas.host import HostCreate
from slotwise.services.event_type.event_type_service import EventTypeService
from slotwise.services.host.host_service import HostService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

NEW_YORK = "America/New_York"

# Friday 2030-03-01 07:00 in New York (EST, UTC-5)
NOW = datetime(2030, 3, 1, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2030, 3, 4)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_policy():
    """Build a valid EventPolicy; keyword arguments override the 30-minute default."""
    def _make(duration_minutes: int = 30, **kwargs) -> EventPolicy:
        result = EventPolicy.create(duration_minutes=duration_minutes, **kwargs)
        assert result.is_success, result.error
        return result.value
    return _make


@pytest.fixture
def policy(make_policy):
    return make_policy()


@pytest.fixture
def weekly_rules():
    """Default week: Mon-Fri 09:00-17:00."""
    return WeeklyAvailabilityRule.default_week()


@pytest.fixture
def guest():
    return GuestInfo.create("Ada Lovelace", "ada@acme.io", None, "Europe/London").value


@pytest.fixture
def make_booking(guest):
    """Build a stored booking directly, bypassing validation."""
    def _make(
            start_utc: datetime,
            minutes: int = 30,
            status: BookingStatus = BookingStatus.CONFIRMED,
            event_type_id: Optional[UUID] = None,
    ) -> Booking:
        return Booking(
            event_type_id=event_type_id,
            host_id=None,
            guest=guest,
            start_time_utc=start_utc,
            end_time_utc=start_utc + timedelta(minutes=minutes),
            status=status,
        )
    return _make


# ============================================================================
# Database fixtures
# ============================================================================

@pytest.fixture
def engine():
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
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """TestClient bound to the test database. The lifespan is not run."""
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def host(db):
    result = HostService.create_host(db, HostCreate(name="Grace Hopper", email="grace@acme.io", timezone=NEW_YORK))
    assert result.is_success, result.error
    return result.value


@pytest.fixture
def event_type(db, host):
    result = EventTypeService.create_event_type(db, host, EventTypeCreate(name="Intro Call", duration_minutes=30))
    assert result.is_success, result.error
    return result.value
