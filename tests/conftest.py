"""Pytest configuration and shared fixtures."""

from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from approvable.core.approval.machine import ApprovalCallbacks
from approvable.core.config import get_settings
from approvable.db.base import Base
from tests.models import HookedEntity

FROZEN_NOW = datetime(2026, 1, 15, 12, 30, 45)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Each test reads settings from a clean environment."""
    for name in ("APPROVABLE_TIMESTAMP_PRECISION", "APPROVABLE_DATABASE_URL", "APPROVABLE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine():
    """In-memory SQLite database with every test model's table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Session bound to an outer transaction that is rolled back afterwards."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)
    yield session
    session.close()
    if transaction.is_active:
        transaction.rollback()
    connection.close()


@pytest.fixture
def frozen_now():
    """Pin fresh_timestamp() to FROZEN_NOW."""
    with patch("approvable.db.base.utcnow", return_value=FROZEN_NOW):
        yield FROZEN_NOW


@pytest.fixture
def hooked_entity_class():
    """HookedEntity with its callback registry emptied before and after the test."""
    HookedEntity._approval_callbacks = ApprovalCallbacks()
    yield HookedEntity
    HookedEntity._approval_callbacks = ApprovalCallbacks()
