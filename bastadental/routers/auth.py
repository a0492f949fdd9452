"""Signup, login and logout."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bastadental.models import User
from bastadental.routers.deps import bearer_token, get_current_user
from bastadental.routers.responses import (
    CamelModel,
    Envelope,
    LoginEnvelope,
    SignupEnvelope,
    UserEnvelope,
    UserOut,
)
from bastadental.services import session as login_sessions
from bastadental.services.db import get_db
from bastadental.services.users import UserService
from bastadental.utils.config import Settings, get_settings

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class SignupRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    dob: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/signup", response_model=SignupEnvelope, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SignupEnvelope:
    """Register a patient account."""

    user = UserService(db, settings).register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        dob=payload.dob,
        phone=payload.phone,
        gender=payload.gender,
        address=payload.address,
    )
    return SignupEnvelope(message="User registered successfully", user_id=user.id)


@router.post("/login", response_model=LoginEnvelope)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> LoginEnvelope:
    user = UserService(db, settings).authenticate(payload.email, payload.password)
    token = login_sessions.create_session(user.id, user.role, settings.session_ttl_seconds)
    LOGGER.info("User logged in user_id=%s role=%s", user.id, user.role)
    return LoginEnvelope(
        message="Login successful",
        user=UserOut.from_model(user),
        token=token,
    )


@router.post("/logout", response_model=Envelope)
def logout(
    token: str = Depends(bearer_token),
    user: User = Depends(get_current_user),
) -> Envelope:
    login_sessions.delete_session(token)
    LOGGER.info("User logged out user_id=%s", user.id)
    return Envelope(message="Logged out")


@router.get("/me", response_model=UserEnvelope)
def me(user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserOut.from_model(user))
