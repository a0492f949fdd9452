"""User and dentist profile database access."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from bastadental.models import Dentist, User
from bastadental.models.user import ROLE_DENTIST


class UserRepository:
    """Database operations for users."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.session.scalars(stmt).first()

    def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        return self.session.scalars(stmt).first() is not None

    def list_all(self) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        return list(self.session.scalars(stmt))

    def find_dentist_user_by_name(self, name: str) -> Optional[User]:
        """Dentist-role user with this display name (lowest id wins on duplicates)."""

        stmt = (
            select(User)
            .where(User.role == ROLE_DENTIST, User.name == name.strip())
            .order_by(User.id)
        )
        return self.session.scalars(stmt).first()

    def count_created_between(self, start: datetime, end: datetime) -> int:
        stmt = select(func.count(User.id)).where(
            User.created_at >= start,
            User.created_at < end,
        )
        return int(self.session.scalar(stmt) or 0)

    def add(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user


class DentistRepository:
    """Database operations for dentist profiles."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, dentist_id: int) -> Optional[Dentist]:
        return self.session.get(Dentist, dentist_id)

    def get_by_user_id(self, user_id: int) -> Optional[Dentist]:
        stmt = select(Dentist).where(Dentist.user_id == user_id)
        return self.session.scalars(stmt).first()

    def list_active(self) -> List[Dentist]:
        """Profiles whose user still holds the dentist role, by name."""

        stmt = (
            select(Dentist)
            .join(Dentist.user)
            .where(User.role == ROLE_DENTIST)
            .options(joinedload(Dentist.user))
            .order_by(User.name)
        )
        return list(self.session.scalars(stmt))

    def add(self, dentist: Dentist) -> Dentist:
        self.session.add(dentist)
        self.session.flush()
        return dentist
