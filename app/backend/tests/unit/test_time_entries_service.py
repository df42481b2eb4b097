"""Tests for time entry bookkeeping."""

from __future__ import annotations

import os
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_sessionbook.db")
os.environ.setdefault("AWS_S3_BUCKET", "local")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/sessionbook-tests")

import pytest

from app.backend.src.core.errors import (
    InvalidInputError,
    InvalidRangeError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from app.backend.src.db import Base, get_engine, session_scope
from app.backend.src.models import TimeEntry
from app.backend.src.services import clients as client_service
from app.backend.src.services import time_entries as time_entry_service


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client_id() -> int:
    with session_scope() as session:
        return client_service.create_client(
            session, name="  Lotus Club ", hourly_rate=Decimal("40.00")
        ).id


def test_create_defaults_to_scheduled(client_id: int) -> None:
    with session_scope() as session:
        entry = time_entry_service.create_time_entry(
            session,
            client_id=client_id,
            title="Yin Yoga",
            start_at=datetime(2026, 3, 4, 19, 0),
            end_at=datetime(2026, 3, 4, 20, 30),
        )
        assert entry.status == "scheduled"
        assert entry.duration_hours == Decimal("1.5")


def test_end_must_follow_start(client_id: int) -> None:
    with session_scope() as session:
        with pytest.raises(InvalidInputError):
            time_entry_service.create_time_entry(
                session,
                client_id=client_id,
                title="Yin Yoga",
                start_at=datetime(2026, 3, 4, 19, 0),
                end_at=datetime(2026, 3, 4, 19, 0),
            )


def test_unknown_client_is_rejected() -> None:
    with session_scope() as session:
        with pytest.raises(NotFoundError):
            time_entry_service.create_time_entry(
                session,
                client_id=404,
                title="Yin Yoga",
                start_at=datetime(2026, 3, 4, 19, 0),
                end_at=datetime(2026, 3, 4, 20, 0),
            )


def test_update_checks_the_resulting_times(client_id: int) -> None:
    with session_scope() as session:
        entry = time_entry_service.create_time_entry(
            session,
            client_id=client_id,
            title="Yin Yoga",
            start_at=datetime(2026, 3, 4, 19, 0),
            end_at=datetime(2026, 3, 4, 20, 0),
        )
        with pytest.raises(InvalidInputError):
            time_entry_service.update_time_entry(
                session, entry.id, {"start_at": datetime(2026, 3, 4, 21, 0)}
            )

        updated = time_entry_service.update_time_entry(
            session, entry.id, {"title": "Restorative", "end_at": datetime(2026, 3, 4, 20, 15)}
        )
        assert updated.title == "Restorative"
        assert updated.end_at == datetime(2026, 3, 4, 20, 15)


def test_list_filters_are_inclusive_by_day(client_id: int) -> None:
    with session_scope() as session:
        for day in (1, 15, 31):
            time_entry_service.create_time_entry(
                session,
                client_id=client_id,
                title=f"Class {day}",
                start_at=datetime(2026, 3, day, 22, 0),
                end_at=datetime(2026, 3, day, 23, 0),
            )

        march = time_entry_service.list_time_entries(
            session, start_date=date(2026, 3, 1), end_date=date(2026, 3, 31)
        )
        assert [entry.title for entry in march] == ["Class 1", "Class 15", "Class 31"]

        tail = time_entry_service.list_time_entries(session, start_date=date(2026, 3, 31))
        assert [entry.title for entry in tail] == ["Class 31"]

        with pytest.raises(InvalidRangeError):
            time_entry_service.list_time_entries(
                session, start_date=date(2026, 4, 1), end_date=date(2026, 3, 1)
            )


def test_status_changes_follow_the_lifecycle(client_id: int) -> None:
    with session_scope() as session:
        entry = time_entry_service.create_time_entry(
            session,
            client_id=client_id,
            title="Yin Yoga",
            start_at=datetime(2026, 3, 4, 19, 0),
            end_at=datetime(2026, 3, 4, 20, 0),
        )
        completed = time_entry_service.change_status(session, entry.id, "completed")
        assert completed.status == "completed"

        with pytest.raises(InvalidStatusTransitionError):
            time_entry_service.change_status(session, entry.id, "cancelled")

        only_completed = time_entry_service.list_time_entries(session, status="completed")
        assert [e.id for e in only_completed] == [entry.id]


def test_deleting_client_removes_its_entries(client_id: int) -> None:
    with session_scope() as session:
        time_entry_service.create_time_entry(
            session,
            client_id=client_id,
            title="Yin Yoga",
            start_at=datetime(2026, 3, 4, 19, 0),
            end_at=datetime(2026, 3, 4, 20, 0),
        )

    with session_scope() as session:
        client_service.delete_client(session, client_id)

    with session_scope() as session:
        assert session.query(TimeEntry).count() == 0


def test_client_name_is_stripped_and_rate_checked(client_id: int) -> None:
    with session_scope() as session:
        assert client_service.get_client(session, client_id).name == "Lotus Club"
        with pytest.raises(InvalidInputError):
            client_service.update_client(session, client_id, {"hourly_rate": Decimal("-1")})
        with pytest.raises(InvalidInputError):
            client_service.create_client(session, name="   ", hourly_rate=Decimal("10"))
