"""SQLAlchemy storage backend for accounts.

Uniqueness of usernames and emails is enforced by the database's own unique
constraints; a violation surfaces as ``IntegrityError`` on insert and is
translated into ``DuplicateError``. There is no check-then-insert window.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
    case,
    create_engine,
    delete,
    func,
    select,
    true,
    update,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from gameaccounts.adapters.storage.base import (
    AbstractAccountStore,
    AccountChanges,
    AccountRecord,
    AccountStats,
    NewAccount,
)
from gameaccounts.core.errors import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class AccountTable(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("username", name="uq_accounts_username"),
        UniqueConstraint("email", name="uq_accounts_email"),
        Index("ix_accounts_is_active", "is_active"),
        # ids of deleted rows are never handed out again
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64))
    email: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str] = mapped_column(String(255))
    first_name: Mapped[str] = mapped_column(String(100), default="", server_default="")
    last_name: Mapped[str] = mapped_column(String(100), default="", server_default="")
    grade: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    school: Mapped[str] = mapped_column(String(255), default="", server_default="")
    game_level: Mapped[int] = mapped_column(Integer, default=1, server_default="1")
    experience: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())


# Markers identifying the violated constraint in SQLite and PostgreSQL messages
_DUPLICATE_MARKERS = {
    "username": ("uq_accounts_username", "accounts.username"),
    "email": ("uq_accounts_email", "accounts.email"),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored here is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_record(row: AccountTable) -> AccountRecord:
    return AccountRecord(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name or "",
        last_name=row.last_name or "",
        grade=row.grade,
        school=row.school or "",
        game_level=row.game_level,
        experience=row.experience,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
        is_active=bool(row.is_active),
    )


def _engine_options(dsn: str) -> dict[str, Any]:
    url = make_url(dsn)
    options: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if url.database in (None, "", ":memory:"):
            # every session must see the same in-memory database
            options["poolclass"] = StaticPool
    return options


class SQLAlchemyAccountStore(AbstractAccountStore):
    """Account store backed by a SQLAlchemy engine.

    Each mutating call runs in its own transaction. Reads open a short-lived
    session and return detached records.
    """

    def __init__(
        self,
        dsn: str,
        *,
        echo: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._engine = create_engine(dsn, echo=echo, **_engine_options(dsn))
        self._session_factory: sessionmaker[Session] = sessionmaker(self._engine, expire_on_commit=False)
        self._clock = clock
        self._clock_lock = threading.Lock()
        self._last_timestamp: datetime | None = None

    def init_models(self) -> None:
        Base.metadata.create_all(self._engine)

    def close(self) -> None:
        self._engine.dispose()

    def _now(self) -> datetime:
        """Return a timestamp strictly later than any previously issued one."""
        with self._clock_lock:
            now = _as_utc(self._clock())
            if self._last_timestamp is not None and now <= self._last_timestamp:
                now = self._last_timestamp + timedelta(microseconds=1)
            self._last_timestamp = now
            return now

    def create(self, account: NewAccount) -> AccountRecord:
        now = self._now()
        row = AccountTable(
            username=account.username,
            email=account.email,
            password_hash=account.password_hash,
            first_name=account.first_name,
            last_name=account.last_name,
            grade=account.grade,
            school=account.school,
            game_level=1,
            experience=0,
            created_at=now,
            updated_at=now,
            is_active=True,
        )
        try:
            with self._session_factory.begin() as session:
                session.add(row)
        except IntegrityError as exc:
            field = self._duplicate_field(exc, account)
            if field is None:
                raise
            logger.info("account_store.duplicate", extra={"field": field})
            raise DuplicateError(field) from exc

        return _to_record(row)

    def _duplicate_field(self, exc: IntegrityError, account: NewAccount) -> str | None:
        message = str(exc.orig)
        for field, markers in _DUPLICATE_MARKERS.items():
            if any(marker in message for marker in markers):
                return field

        # Unrecognised driver message: look the values up instead
        with self._session_factory() as session:
            if session.scalar(select(AccountTable.id).where(AccountTable.username == account.username)):
                return "username"
            if session.scalar(select(AccountTable.id).where(AccountTable.email == account.email)):
                return "email"
        return None

    def get_by_id(self, account_id: int) -> AccountRecord:
        with self._session_factory() as session:
            row = session.get(AccountTable, account_id)
            if row is None:
                raise NotFoundError(account_id)
            return _to_record(row)

    def get_by_username(self, username: str) -> AccountRecord:
        with self._session_factory() as session:
            row = session.scalars(select(AccountTable).where(AccountTable.username == username)).first()
            if row is None:
                raise NotFoundError()
            return _to_record(row)

    def list_all(self) -> list[AccountRecord]:
        with self._session_factory() as session:
            stmt = select(AccountTable).order_by(AccountTable.created_at.desc(), AccountTable.id.desc())
            return [_to_record(row) for row in session.scalars(stmt)]

    def update(self, account_id: int, changes: AccountChanges) -> AccountRecord:
        now = self._now()
        with self._session_factory.begin() as session:
            stmt = (
                update(AccountTable)
                .where(AccountTable.id == account_id)
                .values(
                    first_name=changes.first_name,
                    last_name=changes.last_name,
                    grade=changes.grade,
                    school=changes.school,
                    game_level=changes.game_level,
                    experience=changes.experience,
                    is_active=changes.is_active,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if session.execute(stmt).rowcount == 0:
                raise NotFoundError(account_id)
            row = session.get(AccountTable, account_id)
            return _to_record(row)

    def delete(self, account_id: int) -> None:
        with self._session_factory.begin() as session:
            result = session.execute(delete(AccountTable).where(AccountTable.id == account_id))
            if result.rowcount == 0:
                raise NotFoundError(account_id)

    def stats(self) -> AccountStats:
        stmt = select(
            func.count(AccountTable.id),
            func.coalesce(func.sum(case((AccountTable.is_active.is_(True), 1), else_=0)), 0),
            func.coalesce(func.avg(AccountTable.game_level), 0.0),
            func.coalesce(func.sum(AccountTable.experience), 0),
        )
        with self._session_factory() as session:
            total, active, average_level, total_experience = session.execute(stmt).one()

        return AccountStats(
            total_accounts=int(total),
            active_accounts=int(active),
            average_game_level=float(average_level),
            total_experience=int(total_experience),
        )
