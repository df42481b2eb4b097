"""Utilities for seeding development data."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from app.backend.src.models import (
    PROFILE_ID,
    ClassTemplate,
    Client,
    TimeEntry,
    TimeEntryStatus,
    UserProfile,
)

DEFAULT_PROFILE_NAME = "Demo Freelancer"
DEFAULT_PROFILE_ADDRESS = "Musterstraße 1\n10115 Berlin"
DEFAULT_CLIENT_NAME = "Sunrise Yoga Studio"
DEFAULT_CLIENT_RATE = Decimal("31.50")
DEFAULT_CLASS_TITLE = "Vinyasa Flow"


@dataclass
class SeedResult:
    """Information about the seeded profile, client and sessions."""

    profile: UserProfile
    client: Client
    profile_created: bool
    client_created: bool
    entries_created: int


def seed_development_data(
    session: Session,
    *,
    client_name: str = DEFAULT_CLIENT_NAME,
    hourly_rate: Decimal = DEFAULT_CLIENT_RATE,
    today: date | None = None,
) -> SeedResult:
    """Ensure a demo profile, client, template and a month of sessions exist.

    Sessions are only created the first time the client is seeded, so running
    the script repeatedly does not pile up entries.
    """

    today = today or date.today()

    profile = session.get(UserProfile, PROFILE_ID)
    profile_created = False
    if profile is None:
        profile = UserProfile(
            id=PROFILE_ID,
            name=DEFAULT_PROFILE_NAME,
            address=DEFAULT_PROFILE_ADDRESS,
            bank_details="IBAN DE00 0000 0000 0000 0000 00",
        )
        session.add(profile)
        profile_created = True

    client = session.query(Client).filter(Client.name == client_name).one_or_none()
    client_created = False
    entries_created = 0
    if client is None:
        client = Client(
            name=client_name,
            address="Hauptstraße 5\n10117 Berlin",
            contact_person="Studio Manager",
            hourly_rate=hourly_rate,
        )
        session.add(client)
        session.flush()
        client_created = True

        template = ClassTemplate(
            client_id=client.id,
            name="Monday evening",
            title=DEFAULT_CLASS_TITLE,
            weekday=0,
            start_time=time(18, 0),
            end_time=time(19, 15),
            auto_schedule=True,
        )
        session.add(template)
        session.flush()

        first_day = today.replace(day=1)
        monday = first_day + timedelta(days=(7 - first_day.weekday()) % 7)
        while monday < today:
            session.add(
                TimeEntry(
                    client_id=client.id,
                    template_id=template.id,
                    title=DEFAULT_CLASS_TITLE,
                    start_at=datetime.combine(monday, template.start_time),
                    end_at=datetime.combine(monday, template.end_time),
                    status=TimeEntryStatus.COMPLETED.value,
                )
            )
            entries_created += 1
            monday += timedelta(days=7)
        session.flush()

    return SeedResult(
        profile=profile,
        client=client,
        profile_created=profile_created,
        client_created=client_created,
        entries_created=entries_created,
    )


__all__ = ["seed_development_data", "SeedResult"]
