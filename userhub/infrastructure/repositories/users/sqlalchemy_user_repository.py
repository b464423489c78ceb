# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from userhub.domain.users.entities import NewUser
from userhub.domain.users.entities import User as DomainUser
from userhub.domain.users.exceptions import UserAlreadyExistsError
from userhub.domain.users.repositories import UserRepository
from userhub.infrastructure.db.models import User
from userhub.infrastructure.db.session import Database
from userhub.shared.errors.base import PersistenceError
from userhub.shared.logging import logger


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        username=row.username,
        email=row.email,
        full_name=row.full_name,
        avatar=row.avatar,
        cover_image=row.cover_image or "",
        password_hash=row.password_hash,
        refresh_token=row.refresh_token,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"users.store: {operation} failed ({type(exc).__name__})")
        raise PersistenceError() from exc


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    def find_by_identity(
        self, *, username: str | None = None, email: str | None = None
    ) -> DomainUser | None:
        clauses = []
        if username:
            clauses.append(User.username == username.lower())
        if email:
            clauses.append(User.email == email.lower())
        if not clauses:
            return None
        with _store_errors("find_by_identity"), self._db.session_scope() as session:
            row = session.scalars(select(User).where(or_(*clauses)).limit(1)).first()
            return _to_domain(row) if row else None

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with _store_errors("find_by_id"), self._db.session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def add(self, user: NewUser) -> DomainUser:
        try:
            with self._db.session_scope() as session:
                row = User(
                    username=user.username.lower(),
                    email=user.email.lower(),
                    full_name=user.full_name,
                    avatar=user.avatar,
                    cover_image=user.cover_image,
                    password_hash=user.password_hash,
                    refresh_token=None,
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            logger.info("users.store: insert hit a unique constraint")
            raise UserAlreadyExistsError() from exc
        except SQLAlchemyError as exc:
            logger.error(f"users.store: add failed ({type(exc).__name__})")
            raise PersistenceError() from exc

    def update_refresh_token(self, user_id: int, token: str | None) -> bool:
        with _store_errors("update_refresh_token"), self._db.session_scope() as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(refresh_token=token)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def rotate_refresh_token(self, user_id: int, expected: str, replacement: str) -> bool:
        # Single conditional UPDATE: of two concurrent rotations only one matches.
        with _store_errors("rotate_refresh_token"), self._db.session_scope() as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id, User.refresh_token == expected)
                .values(refresh_token=replacement)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1
