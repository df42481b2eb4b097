"""Service layer functions for the sender profile."""

from __future__ import annotations

from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from app.backend.src.core.errors import InvalidInputError, NotFoundError
from app.backend.src.models import PROFILE_ID, UserProfile

LOGGER = structlog.get_logger(__name__)


def find_profile(session: Session) -> UserProfile | None:
    return session.get(UserProfile, PROFILE_ID)


def get_profile(session: Session) -> UserProfile:
    profile = find_profile(session)
    if profile is None:
        raise NotFoundError("Profile has not been set up yet")
    return profile


def save_profile(
    session: Session,
    *,
    name: str,
    address: str,
    tax_id: str | None = None,
    bank_details: str | None = None,
    default_hourly_rate: Decimal | None = None,
) -> UserProfile:
    """Create the profile, or overwrite the existing one."""

    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise InvalidInputError("Profile name must not be empty")
    if default_hourly_rate is not None and Decimal(default_hourly_rate) < 0:
        raise InvalidInputError("Default hourly rate must be zero or positive")

    profile = find_profile(session)
    created = profile is None
    if profile is None:
        profile = UserProfile(id=PROFILE_ID)

    profile.name = cleaned_name
    profile.address = (address or "").strip()
    profile.tax_id = tax_id or None
    profile.bank_details = bank_details or None
    profile.default_hourly_rate = default_hourly_rate

    session.add(profile)
    session.commit()
    session.refresh(profile)
    LOGGER.info("profile_saved", created=created)
    return profile


__all__ = ["find_profile", "get_profile", "save_profile"]
