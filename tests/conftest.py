"""Shared fixtures: in-memory database, in-memory login sessions, factories."""

from datetime import date
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

import bastadental.services.session as session_mod
from bastadental.main import create_app
from bastadental.models import Appointment, Dentist, User
from bastadental.services.db import build_engine, build_session_factory, init_db
from bastadental.services.security import hash_password
from bastadental.utils.config import Settings
from helpers import future_date

PASSWORD = "secret123"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        bcrypt_rounds=4,
        email_smtp="",
        frontend_dir=None,
        admin_email="admin@bastadental.com",
        admin_password="admin-secret",
    )


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    init_db(engine)
    factory = build_session_factory(engine)
    yield factory
    engine.dispose()


@pytest.fixture
def cache_store(monkeypatch) -> Dict[str, str]:
    """Replace the Redis helpers used by login sessions with a dict."""

    store: Dict[str, str] = {}

    def fake_cache_set(key: str, value: str, ex: Optional[int] = None) -> bool:
        store[key] = value
        return True

    def fake_cache_get(key: str) -> Optional[str]:
        return store.get(key)

    def fake_cache_delete(key: str) -> bool:
        return store.pop(key, None) is not None

    monkeypatch.setattr(session_mod, "cache_set", fake_cache_set)
    monkeypatch.setattr(session_mod, "cache_get", fake_cache_get)
    monkeypatch.setattr(session_mod, "cache_delete", fake_cache_delete)
    return store


@pytest.fixture
def app(settings, session_factory, cache_store):
    return create_app(settings=settings, session_factory=session_factory)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """Create a user (and a dentist profile for dentists); returns the detached row."""

    counter = {"value": 0}

    def _make(name: str = "Pat Patient", role: str = "patient", email: Optional[str] = None) -> User:
        counter["value"] += 1
        with session_factory() as session:
            user = User(
                name=name,
                email=email or f"user{counter['value']}@example.com",
                password=hash_password(PASSWORD, rounds=4),
                dob=date(1990, 1, 1),
                role=role,
            )
            session.add(user)
            session.flush()
            if role == "dentist":
                session.add(Dentist(user_id=user.id))
            session.commit()
            return user

    return _make


@pytest.fixture
def patient(make_user) -> User:
    return make_user("Pat Patient")


@pytest.fixture
def dr_a(make_user) -> User:
    return make_user("Dr. A", role="dentist")


@pytest.fixture
def dr_b(make_user) -> User:
    return make_user("Dr. B", role="dentist")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("Ada Admin", role="admin")


@pytest.fixture
def auth(cache_store):
    """Bearer headers for a user, issued the same way login issues them."""

    def _headers(user: User) -> Dict[str, str]:
        token = session_mod.create_session(user.id, user.role, 3600)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_appointment(session_factory, settings):
    """Insert an appointment directly, bypassing booking validation."""

    def _make(
        patient: User,
        dentist: User,
        on_date: date,
        time: str = "09:00",
        status: str = "pending",
        service: str = "General Checkup",
    ) -> int:
        with session_factory() as session:
            dentist_id = session.scalars(
                select(Dentist.id).where(Dentist.user_id == dentist.id)
            ).one()
            appointment = Appointment(
                user_id=patient.id,
                service=service,
                dentist_id=dentist_id,
                date=on_date,
                time=time,
                status=status,
                transfer_status="pending",
                downpayment_amount=settings.downpayment_amount,
                downpayment_status="unpaid",
            )
            session.add(appointment)
            session.commit()
            return appointment.id

    return _make


@pytest.fixture
def tomorrow() -> date:
    return future_date(1)
