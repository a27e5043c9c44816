# -*- coding: utf-8 -*-
"""
SQLAlchemy ORM models for chat sessions.

Uses async SQLAlchemy engine (asyncpg for PostgreSQL, aiosqlite fallback).
Tables: chat_sessions, chat_messages.
"""
from __future__ import annotations

import os
from datetime import datetime

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base, relationship

from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


# ═══════════════════════════════════════════════════════════════════════════════
# TABLE: chat_sessions
# ═══════════════════════════════════════════════════════════════════════════════


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    session_id    = Column(String(64), nullable=False, index=True)    # reused after a soft delete
    user_id       = Column(String(64), nullable=True, index=True)
    is_active     = Column(Boolean, default=True)
    created_at    = Column(DateTime, default=datetime.utcnow)
    last_activity = Column(DateTime, default=datetime.utcnow)

    messages = relationship(
        "ChatMessage",
        back_populates="session",
        order_by="ChatMessage.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# TABLE: chat_messages
# ═══════════════════════════════════════════════════════════════════════════════


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    chat_id    = Column(
        Integer,
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role       = Column(String(16), nullable=False)
    content    = Column(Text, nullable=False)
    meta       = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    session = relationship("ChatSession", back_populates="messages")


# ═══════════════════════════════════════════════════════════════════════════════
# ENGINE & SESSION HELPERS
# ═══════════════════════════════════════════════════════════════════════════════


def resolve_database_url(url: str) -> str:
    """Map plain postgres URLs to asyncpg; empty → local SQLite file."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url:
        return url

    data_dir = os.path.join(os.path.dirname(__file__), "..", "..", "data")
    os.makedirs(data_dir, exist_ok=True)
    sqlite_path = os.path.abspath(os.path.join(data_dir, "chat.db"))
    logger.info("Chat sessions using SQLite fallback: %s", sqlite_path)
    return f"sqlite+aiosqlite:///{sqlite_path}"


def build_engine(url: str) -> AsyncEngine:
    return create_async_engine(resolve_database_url(url), echo=False)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if they don't exist. Safe to call on every startup."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Chat DB tables created / verified ✓")
    except Exception as e:
        logger.error("Chat DB init failed: %s", e)
