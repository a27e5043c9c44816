# -*- coding: utf-8 -*-
"""
Chat session store — sessions, messages and the context window handed to
the orchestrator.

All functions are async. Uses SQLAlchemy AsyncSession.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func, or_, select

from aurora_gold.chatbot.models import ChatMessage, ChatSession
from aurora_gold.chatbot.schemas import ChatSessionOut, StoredMessage
from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)


def _row_to_message(row: ChatMessage) -> StoredMessage:
    return StoredMessage(
        id=row.id,
        role=row.role,
        content=row.content,
        timestamp=row.created_at or datetime.utcnow(),
        metadata=row.meta or {},
    )


# ═══════════════════════════════════════════════════════════════════════════════
# SESSIONS
# ═══════════════════════════════════════════════════════════════════════════════


async def get_or_create_session(db, session_id: str, user_id: Optional[str] = None) -> ChatSession:
    """Return the active session with this id, creating it when missing.

    A soft-deleted id opens a fresh session row under the same id.
    """
    stmt = select(ChatSession).where(
        ChatSession.session_id == session_id,
        ChatSession.is_active == True,
    ).order_by(ChatSession.id.desc())
    result = await db.execute(stmt)
    chat = result.scalars().first()
    if chat:
        return chat

    chat = ChatSession(session_id=session_id, user_id=user_id, is_active=True)
    db.add(chat)
    await db.commit()
    logger.info("Created chat session %s for %s", session_id, user_id or "guest")
    return chat


async def get_session(db, session_id: str, user_id: Optional[str] = None) -> ChatSessionOut:
    """Active session owned by ``user_id`` or anonymous; 404 otherwise."""
    stmt = select(ChatSession).where(
        ChatSession.session_id == session_id,
        ChatSession.is_active == True,
        or_(ChatSession.user_id == user_id, ChatSession.user_id.is_(None)),
    ).order_by(ChatSession.id.desc())
    result = await db.execute(stmt)
    chat = result.scalars().first()
    if not chat:
        raise HTTPException(status_code=404, detail="Chat session not found")

    return ChatSessionOut(
        session_id=chat.session_id,
        messages=[_row_to_message(m) for m in chat.messages],
        last_activity=chat.last_activity,
        is_active=chat.is_active,
    )


async def deactivate_session(db, session_id: str, user_id: Optional[str] = None) -> dict:
    """Soft-delete a chat session (set is_active=False)."""
    stmt = select(ChatSession).where(
        ChatSession.session_id == session_id,
        ChatSession.is_active == True,
    )
    if user_id:
        stmt = stmt.where(ChatSession.user_id == user_id)
    result = await db.execute(stmt)
    chat = result.scalars().first()

    if not chat:
        raise HTTPException(status_code=404, detail="Chat session not found")

    chat.is_active = False
    await db.commit()

    logger.info("Deactivated chat session %s", session_id)
    return {"message": "Chat session deleted successfully"}


# ═══════════════════════════════════════════════════════════════════════════════
# MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════


async def add_message(
    db,
    chat:     ChatSession,
    role:     str,
    content:  str,
    metadata: Optional[Dict[str, Any]] = None,
) -> ChatMessage:
    now = datetime.utcnow()
    row = ChatMessage(
        chat_id=chat.id,
        role=role,
        content=content,
        meta=metadata or {},
        created_at=now,
    )
    db.add(row)
    chat.last_activity = now
    await db.commit()
    await db.refresh(row)
    return row


async def count_messages(db, chat: ChatSession) -> int:
    stmt = select(func.count()).select_from(ChatMessage).where(ChatMessage.chat_id == chat.id)
    result = await db.execute(stmt)
    return result.scalar() or 0


async def recent_history(db, chat: ChatSession, limit: int = 10) -> List[dict]:
    """Last ``limit`` messages, oldest first, as {role, content}."""
    stmt = (
        select(ChatMessage)
        .where(ChatMessage.chat_id == chat.id)
        .order_by(ChatMessage.id.desc())
        .limit(limit)
    )
    result = await db.execute(stmt)
    rows = list(result.scalars().all())
    rows.reverse()
    return [{"role": r.role, "content": r.content} for r in rows]
