"""SQLAlchemy-backed identity store."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from warden.errors import Conflict, DuplicateIdError, StoreError
from warden.models.user import User
from warden.store.base import Identity, IdentityStore, normalize


def _to_identity(user: User) -> Identity:
    return Identity(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        password_hash=user.password_hash,
        invite_code=user.invite_code,
        recovery_code_hash=user.recovery_code_hash,
        resetting_code_hash=user.resetting_code_hash,
    )


class SqlIdentityStore(IdentityStore):
    """Identity store on a relational database.

    Every call runs in its own short session. The primary key on ``id`` is what
    makes concurrent inserts of the same id fail, and the unique index on
    ``username`` rejects duplicate usernames that slip past the service check.
    """

    def __init__(self, session_factory: sessionmaker, logger: logging.Logger | None = None) -> None:
        self._session_factory = session_factory
        self._logger = logger or logging.getLogger("warden")

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            self._logger.error("Store failure: %s", e)
            raise StoreError(str(e)) from e
        finally:
            db.close()

    def max_id(self) -> int:
        with self._session() as db:
            return db.query(func.max(User.id)).scalar() or 0

    def insert(self, identity: Identity) -> None:
        with self._session() as db:
            db.add(
                User(
                    id=identity.id,
                    username=normalize(identity.username),
                    first_name=identity.first_name,
                    last_name=identity.last_name,
                    email=normalize(identity.email),
                    password_hash=identity.password_hash,
                    invite_code=identity.invite_code,
                )
            )
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if db.get(User, identity.id) is not None:
                    raise DuplicateIdError(identity.id) from e
                raise Conflict() from e

    def get(self, identity_id: int) -> Identity | None:
        with self._session() as db:
            user = db.get(User, identity_id)
            return _to_identity(user) if user else None

    def get_by_username(self, username: str) -> Identity | None:
        with self._session() as db:
            user = db.query(User).filter(User.username == normalize(username)).first()
            return _to_identity(user) if user else None

    def get_by_email(self, email: str) -> Identity | None:
        with self._session() as db:
            user = db.query(User).filter(User.email == normalize(email)).order_by(User.id).first()
            return _to_identity(user) if user else None

    def get_all(self) -> list[Identity]:
        with self._session() as db:
            return [_to_identity(u) for u in db.query(User).order_by(User.id).all()]

    def update(self, identity: Identity) -> None:
        values = {}
        if identity.first_name:
            values[User.first_name] = identity.first_name
        if identity.last_name:
            values[User.last_name] = identity.last_name
        if identity.email:
            values[User.email] = normalize(identity.email)
        if identity.password_hash:
            values[User.password_hash] = identity.password_hash
        if not values:
            return
        self._update_where(values, User.id == identity.id)

    def delete_by_id(self, identity_id: int) -> None:
        with self._session() as db:
            db.query(User).filter(User.id == identity_id).delete(synchronize_session=False)
            db.commit()

    def set_recovery_code(self, identity_id: int, code_hash: str) -> None:
        self._update_where({User.recovery_code_hash: code_hash, User.resetting_code_hash: None}, User.id == identity_id)

    def get_recovery_code(self, identity_id: int) -> str | None:
        return self._get_column(identity_id, User.recovery_code_hash)

    def set_resetting_code(self, identity_id: int, code_hash: str) -> None:
        self._update_where({User.resetting_code_hash: code_hash, User.recovery_code_hash: None}, User.id == identity_id)

    def get_resetting_code(self, identity_id: int) -> str | None:
        return self._get_column(identity_id, User.resetting_code_hash)

    def reset_password(self, identity_id: int, password_hash: str) -> None:
        self._update_where({User.password_hash: password_hash, User.resetting_code_hash: None}, User.id == identity_id)

    def set_invite_code(self, identity_id: int, invite_code: str) -> None:
        self._update_where({User.invite_code: invite_code}, User.id == identity_id)

    def consume_invite(self, identity_id: int, invite_code: str, registration: Identity) -> bool:
        if not invite_code:
            return False
        values = {
            User.username: normalize(registration.username),
            User.first_name: registration.first_name,
            User.last_name: registration.last_name,
            User.password_hash: registration.password_hash,
            User.invite_code: None,
        }
        return self._update_where(values, User.id == identity_id, User.invite_code == invite_code) == 1

    def _get_column(self, identity_id: int, column) -> str | None:
        with self._session() as db:
            return db.query(column).filter(User.id == identity_id).scalar()

    def _update_where(self, values: dict, *criteria) -> int:
        with self._session() as db:
            try:
                count = db.query(User).filter(*criteria).update(values, synchronize_session=False)
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise Conflict() from e
            return count
