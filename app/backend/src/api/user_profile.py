"""Sender profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.backend.src.schemas.user_profile import ProfileRead, ProfileUpdate
from app.backend.src.services import user_profile as profile_service
from ..db import get_session_dependency

router = APIRouter(prefix="/profile", tags=["profile"])

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.get("", response_model=ProfileRead)
def get_profile(session: SessionDep) -> ProfileRead:
    return ProfileRead.model_validate(profile_service.get_profile(session))


@router.put("", response_model=ProfileRead)
def save_profile(payload: ProfileUpdate, session: SessionDep) -> ProfileRead:
    """Create the sender profile, or replace the existing one."""

    return ProfileRead.model_validate(
        profile_service.save_profile(session, **payload.model_dump())
    )
