"""
Credential store: the user table behind DBStorage.

Every write commits its own unit of work and rolls back on failure. Reads
use populate_existing() so a thread's session never serves a stale refresh
token out of its identity map.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.base_model import utcnow
from models.db_storage import DBStorage
from models.user import User


class DuplicateUserError(Exception):
    """A unique index on username or email rejected the write."""


class CredentialStore:

    def __init__(self, storage: DBStorage):
        self.storage = storage

    def _session(self):
        return self.storage.get_session()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return (
            self._session()
            .query(User)
            .populate_existing()
            .filter(User.id == user_id)
            .first()
        )

    def find_by_username_or_email(self, username=None, email=None) -> list:
        """All users matching either identifier (at most two)."""
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return []
        return (
            self._session()
            .query(User)
            .populate_existing()
            .filter(or_(*conditions))
            .limit(2)
            .all()
        )

    def exists(self, username=None, email=None) -> bool:
        return bool(self.find_by_username_or_email(username, email))

    def email_taken(self, email: str, exclude_user_id: Optional[str] = None) -> bool:
        query = self._session().query(User.id).filter(User.email == email)
        if exclude_user_id:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    def create(self, **fields) -> User:
        user = User(**fields)
        session = self._session()
        session.add(user)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise DuplicateUserError(str(exc.orig)) from exc
        except SQLAlchemyError:
            session.rollback()
            raise
        return user

    def update_fields(self, user_id: str, **fields) -> Optional[User]:
        session = self._session()
        user = self.find_by_id(user_id)
        if user is None:
            return None
        for key, value in fields.items():
            setattr(user, key, value)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise DuplicateUserError(str(exc.orig)) from exc
        except SQLAlchemyError:
            session.rollback()
            raise
        return user

    def _update_where(self, criteria, values) -> int:
        session = self._session()
        try:
            updated = (
                session.query(User)
                .filter(*criteria)
                .update(values, synchronize_session=False)
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        return updated

    def update_refresh_token(self, user_id: str, token: Optional[str]) -> bool:
        """Overwrite (or clear, with None) the stored refresh token."""
        updated = self._update_where(
            (User.id == user_id,),
            {User.refresh_token: token, User.updated_at: utcnow()},
        )
        return updated == 1

    def swap_refresh_token(self, user_id: str, expected: str, new: str) -> bool:
        """
        Compare-and-set: store `new` only if the stored token still equals
        `expected`. Returns False when another writer got there first.
        """
        updated = self._update_where(
            (User.id == user_id, User.refresh_token == expected),
            {User.refresh_token: new, User.updated_at: utcnow()},
        )
        return updated == 1
