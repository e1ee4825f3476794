from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, create_engine, make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BotUser(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=True)
    username = Column(String(255), nullable=True)
    language_code = Column(String(16), nullable=True)
    is_bot = Column(Boolean, default=False, nullable=False)
    is_banned = Column(Boolean, default=False, nullable=False)
    last_active_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "telegram_id": self.telegram_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
            "language_code": self.language_code,
            "is_bot": bool(self.is_bot),
            "is_banned": bool(self.is_banned),
            "last_active_at": self.last_active_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def create_sqlite_engine(database_url: str = "sqlite:///skybot.db", echo: bool = False):
    """Create SQLite engine usable from the webhook threadpool"""
    if make_url(database_url).get_backend_name() != "sqlite":
        raise ValueError(f"only sqlite:// database URLs are supported, got {database_url!r}")
    return create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})


def create_tables(engine):
    """Create all tables"""
    Base.metadata.create_all(bind=engine)
