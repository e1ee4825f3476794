from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import func

from .events import User
from .models import BotUser, create_sqlite_engine, create_tables


def _profile_fields(user: User) -> Dict[str, Any]:
    return {
        "first_name": user.first_name or "",
        "last_name": user.last_name,
        "username": user.username,
        "language_code": user.language_code,
        "is_bot": bool(user.is_bot),
        "last_active_at": datetime.now(timezone.utc),
    }


class UserRepository(ABC):
    """Storage for the users the bot has seen, keyed by Telegram user id."""

    @abstractmethod
    def upsert_from_telegram(self, user: User) -> Dict[str, Any]:
        """Insert or update the record for *user*; concurrent calls must converge."""

    @abstractmethod
    def find_by_telegram_id(self, telegram_id: int) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def set_banned(self, telegram_id: int, banned: bool = True) -> Optional[Dict[str, Any]]: ...


class InMemoryUserRepo(UserRepository):
    """Simple in-memory store for testing.

    Not persistent; IDs are ints.
    """

    def __init__(self) -> None:
        self._next_id = 0
        self.users: Dict[int, Dict[str, Any]] = {}

    def upsert_from_telegram(self, user: User) -> Dict[str, Any]:
        rec = self.users.get(user.id)
        if rec is None:
            self._next_id += 1
            rec = {"id": self._next_id, "telegram_id": user.id, "is_banned": False}
            self.users[user.id] = rec
        rec.update(_profile_fields(user))
        return dict(rec)

    def find_by_telegram_id(self, telegram_id: int) -> Optional[Dict[str, Any]]:
        rec = self.users.get(int(telegram_id))
        return dict(rec) if rec else None

    def set_banned(self, telegram_id: int, banned: bool = True) -> Optional[Dict[str, Any]]:
        rec = self.users.get(int(telegram_id))
        if not rec:
            return None
        rec["is_banned"] = banned
        return dict(rec)


class SQLiteUserRepository(UserRepository):
    """SQLite implementation of UserRepository."""

    def __init__(self, database_url: str = "sqlite:///skybot.db", echo: bool = False):
        """Initialize SQLite repository.

        Args:
            database_url: SQLAlchemy database URL
            echo: Whether to echo SQL statements (useful for debugging)
        """
        self.engine = create_sqlite_engine(database_url, echo)
        create_tables(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def _get_session(self) -> Session:
        """Get a new database session"""
        return self.SessionLocal()

    def upsert_from_telegram(self, user: User) -> Dict[str, Any]:
        """INSERT ... ON CONFLICT(telegram_id) DO UPDATE in one statement"""
        fields = _profile_fields(user)
        stmt = insert(BotUser).values(telegram_id=user.id, is_banned=False, **fields)
        stmt = stmt.on_conflict_do_update(
            index_elements=[BotUser.telegram_id],
            set_={**fields, "updated_at": func.now()},
        )
        with self._get_session() as session:
            session.execute(stmt)
            session.commit()
            row = session.query(BotUser).filter(BotUser.telegram_id == user.id).one()
            return row.to_dict()

    def find_by_telegram_id(self, telegram_id: int) -> Optional[Dict[str, Any]]:
        with self._get_session() as session:
            row = session.query(BotUser).filter(BotUser.telegram_id == int(telegram_id)).first()
            return row.to_dict() if row else None

    def set_banned(self, telegram_id: int, banned: bool = True) -> Optional[Dict[str, Any]]:
        with self._get_session() as session:
            row = session.query(BotUser).filter(BotUser.telegram_id == int(telegram_id)).first()
            if not row:
                return None
            row.is_banned = banned
            session.commit()
            session.refresh(row)
            return row.to_dict()


def create_sqlite_repo(database_url: str = "sqlite:///skybot.db", echo: bool = False) -> SQLiteUserRepository:
    """Create a SQLite repository instance"""
    return SQLiteUserRepository(database_url, echo)
