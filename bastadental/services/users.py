"""Registration, login and user administration."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from bastadental.errors import (
    AuthenticationFailed,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from bastadental.models import Dentist, User
from bastadental.models.user import ROLE_ADMIN, ROLE_DENTIST, ROLE_PATIENT, USER_ROLES
from bastadental.repositories.users import DentistRepository, UserRepository
from bastadental.services.security import hash_password, verify_password
from bastadental.utils.config import Settings
from bastadental.utils.dates import clinic_today, parse_date

LOGGER = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: Optional[str]) -> str:
    value = (email or "").strip()
    if not EMAIL_PATTERN.match(value):
        raise ValidationFailed("Please provide a valid email address")
    return value


def validate_dob(value: Any, today: date) -> date:
    try:
        dob = parse_date(value, "dob")
    except ValidationFailed:
        raise ValidationFailed("Please provide a valid date of birth") from None
    if dob >= today:
        raise ValidationFailed("Please provide a valid date of birth")
    return dob


class UserService:
    """User accounts and the dentist profiles attached to them."""

    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.users = UserRepository(session)
        self.dentists = DentistRepository(session)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def register(
        self,
        *,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        dob: Any,
        phone: Optional[str] = None,
        gender: Optional[str] = None,
        address: Optional[str] = None,
    ) -> User:
        """Create a patient account."""

        if not (name and name.strip()) or not email or not password or not dob:
            raise ValidationFailed(
                "Name, email, password, and date of birth are required"
            )
        email = validate_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed("Password must be at least 6 characters long")
        birth_date = validate_dob(dob, clinic_today(self.settings.clinic_timezone))

        if self.users.email_taken(email):
            raise ValidationFailed("Email already in use")

        user = User(
            name=name.strip(),
            email=email,
            password=hash_password(password, self.settings.bcrypt_rounds),
            dob=birth_date,
            phone=phone or None,
            gender=gender or None,
            address=address or None,
            role=ROLE_PATIENT,
        )
        self.users.add(user)
        self.session.commit()
        LOGGER.info("Registered patient user_id=%s", user.id)
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        if not email or not password:
            raise ValidationFailed("Email and password are required")

        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            LOGGER.info("Failed login attempt for %s", email)
            raise AuthenticationFailed("Invalid email or password")
        return user

    def get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def list_users(self) -> List[User]:
        return self.users.list_all()

    def update_profile(self, user_id: int, changes: Dict[str, Any]) -> User:
        """Apply profile edits; keys that are absent are left unchanged."""

        user = self.get_user(user_id)

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationFailed("Name cannot be empty")
            user.name = name
        if "email" in changes:
            email = validate_email(changes["email"])
            if self.users.email_taken(email, exclude_user_id=user.id):
                raise ValidationFailed("Email already in use")
            user.email = email
        if "dob" in changes and changes["dob"]:
            user.dob = validate_dob(
                changes["dob"],
                clinic_today(self.settings.clinic_timezone),
            )
        for field in ("phone", "gender", "address"):
            if field in changes:
                setattr(user, field, changes[field] or None)

        self.session.commit()
        return user

    def change_role(self, user_id: int, role: Optional[str]) -> User:
        """Set a user's role; promotion to dentist creates the dentist profile."""

        if role not in USER_ROLES:
            raise ValidationFailed("Valid role is required")

        user = self.get_user(user_id)
        previous = user.role
        user.role = role
        if role == ROLE_DENTIST:
            self._ensure_dentist_profile(user)
        self.session.commit()
        LOGGER.info("Changed role user_id=%s %s -> %s", user.id, previous, role)
        return user

    def seed_admin(self) -> Optional[User]:
        """Create the configured admin account if no admin exists yet."""

        existing = self.users.get_by_email(self.settings.admin_email)
        if existing is not None:
            return None
        if any(user.role == ROLE_ADMIN for user in self.users.list_all()):
            return None

        admin = User(
            name=self.settings.admin_name,
            email=self.settings.admin_email,
            password=hash_password(
                self.settings.admin_password,
                self.settings.bcrypt_rounds,
            ),
            role=ROLE_ADMIN,
        )
        self.users.add(admin)
        self.session.commit()
        LOGGER.info("Seeded admin account %s", admin.email)
        return admin

    # ------------------------------------------------------------------
    # Dentist profiles
    # ------------------------------------------------------------------
    def _ensure_dentist_profile(self, user: User) -> Dentist:
        dentist = self.dentists.get_by_user_id(user.id)
        if dentist is None:
            dentist = self.dentists.add(Dentist(user_id=user.id, phone=user.phone))
            LOGGER.info("Created dentist profile for user_id=%s", user.id)
        return dentist

    def get_dentist_by_user(self, user_id: int) -> Dentist:
        """Dentist profile for a user that must hold the dentist role."""

        user = self.get_user(user_id)
        if user.role != ROLE_DENTIST:
            raise PermissionDenied("Unauthorized: User is not a dentist")
        dentist = self._ensure_dentist_profile(user)
        self.session.commit()
        return dentist

    def find_dentist_by_name(self, name: Optional[str]) -> Dentist:
        """Resolve a dentist display name to its profile."""

        if not name or not name.strip():
            raise ValidationFailed("Dentist name is required")
        user = self.users.find_dentist_user_by_name(name)
        if user is None:
            raise NotFound("Dentist not found")
        dentist = self._ensure_dentist_profile(user)
        self.session.commit()
        return dentist

    def list_dentists(self) -> List[Dentist]:
        return self.dentists.list_active()

    def update_dentist_profile(self, user_id: int, changes: Dict[str, Any]) -> Dentist:
        dentist = self.get_dentist_by_user(user_id)
        for field in ("specialization", "bio", "phone"):
            if field in changes:
                setattr(dentist, field, changes[field] or None)
        self.session.commit()
        return dentist
