"""User administration and dentist profiles."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bastadental.models import User
from bastadental.models.user import ROLE_ADMIN
from bastadental.routers.deps import ensure_self_or_admin, get_current_user, require_roles
from bastadental.routers.responses import (
    CamelModel,
    DentistEnvelope,
    DentistOut,
    UserEnvelope,
    UserListEnvelope,
    UserOut,
)
from bastadental.services.db import get_db
from bastadental.services.users import UserService
from bastadental.utils.config import Settings, get_settings

router = APIRouter()


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None


class RoleRequest(CamelModel):
    role: Optional[str] = None


class DentistProfileRequest(CamelModel):
    specialization: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None


@router.get("", response_model=UserListEnvelope)
def list_users(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> UserListEnvelope:
    users = UserService(db, settings).list_users()
    return UserListEnvelope(users=[UserOut.from_model(user) for user in users])


# Declared before "/{user_id}" so "dentists" is never read as an id.
@router.get("/dentists/{user_id}", response_model=DentistEnvelope)
def get_dentist_profile(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: User = Depends(get_current_user),
) -> DentistEnvelope:
    dentist = UserService(db, settings).get_dentist_by_user(user_id)
    return DentistEnvelope(dentist=DentistOut.from_model(dentist))


@router.put("/dentists/{user_id}", response_model=DentistEnvelope)
def update_dentist_profile(
    user_id: int,
    payload: DentistProfileRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> DentistEnvelope:
    ensure_self_or_admin(actor, user_id)
    dentist = UserService(db, settings).update_dentist_profile(
        user_id,
        payload.model_dump(exclude_unset=True),
    )
    return DentistEnvelope(
        message="Dentist profile updated",
        dentist=DentistOut.from_model(dentist),
    )


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> UserEnvelope:
    ensure_self_or_admin(actor, user_id)
    user = UserService(db, settings).get_user(user_id)
    return UserEnvelope(user=UserOut.from_model(user))


@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    payload: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    actor: User = Depends(get_current_user),
) -> UserEnvelope:
    """Edit profile fields; fields left out of the body are unchanged."""

    ensure_self_or_admin(actor, user_id)
    user = UserService(db, settings).update_profile(
        user_id,
        payload.model_dump(exclude_unset=True),
    )
    return UserEnvelope(message="Profile updated", user=UserOut.from_model(user))


@router.put("/{user_id}/role", response_model=UserEnvelope)
def change_role(
    user_id: int,
    payload: RoleRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> UserEnvelope:
    user = UserService(db, settings).change_role(user_id, payload.role)
    return UserEnvelope(message="User role updated", user=UserOut.from_model(user))
