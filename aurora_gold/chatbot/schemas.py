# -*- coding: utf-8 -*-
"""
Pydantic V2 schemas for the Aurora AI chat assistant.

Outgoing models serialize with camelCase aliases (shouldOfferPurchase,
goldPrice, ...) to match the web client.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


IntentCategory = Literal[
    "greeting",
    "purchase_intent",
    "price_inquiry",
    "portfolio_check",
    "gold_general",
    "general",
]

ReplySource = Literal[
    "gemini_text",
    "gemini_json",
    "gemini_extracted",
    "gemini_truncated",
    "gemini_fallback",
    "fallback",
    "error",
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# ORCHESTRATOR TYPES
# ═══════════════════════════════════════════════════════════════════════════════


class Intent(BaseModel):
    category:   IntentCategory
    confidence: float     = Field(..., ge=0.0, le=1.0)
    keywords:   List[str] = Field(default_factory=list)


class ChatContext(BaseModel):
    """What the HTTP layer knows about the conversation."""

    user_id:              Optional[str]  = None
    conversation_history: List[dict]     = Field(default_factory=list)
    current_gold_price:   Optional[int]  = None


class ReplyMetadata(CamelModel):
    intent:     str
    confidence: float
    gold_price: int
    timestamp:  datetime
    source:     ReplySource
    error:      bool = False


class ChatReply(CamelModel):
    message:               str
    suggestions:           List[str]     = Field(default_factory=list)
    source:                ReplySource
    should_offer_purchase: bool          = False
    require_login:         bool          = False
    suggested_amount:      Optional[int] = None
    metadata:              ReplyMetadata


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP REQUESTS / RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class ChatRequest(CamelModel):
    """Incoming chat message from the user."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="User's current question",
    )
    session_id: Optional[str] = Field(
        None,
        description="Existing chat session; a new one is created when omitted",
    )
    user_id: Optional[str] = Field(
        None,
        description="Authenticated user id, set by the auth layer in front of this API",
    )

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        return v.strip()


class ChatMessageOut(CamelModel):
    id:          Any
    content:     str
    timestamp:   datetime
    suggestions: List[str] = Field(default_factory=list)


class ChatAIInfo(CamelModel):
    should_offer_purchase: bool          = False
    require_login:         bool          = False
    suggested_amount:      Optional[int] = None
    intent:                str           = "general"
    confidence:            float         = 0.5
    source:                str           = "fallback"


class ChatContextOut(CamelModel):
    gold_price:          int
    is_logged_in:        bool
    conversation_length: int


class ChatResponse(CamelModel):
    """Response sent back to the frontend."""

    session_id: str
    message:    ChatMessageOut
    ai:         ChatAIInfo
    context:    ChatContextOut
    error:      Optional[str] = None


class StoredMessage(CamelModel):
    id:        int
    role:      str
    content:   str
    timestamp: datetime
    metadata:  Dict[str, Any] = Field(default_factory=dict)


class ChatSessionOut(CamelModel):
    session_id:    str
    messages:      List[StoredMessage] = Field(default_factory=list)
    last_activity: Optional[datetime]  = None
    is_active:     bool                = True
