# -*- coding: utf-8 -*-
"""
Prompt building and reply parsing for the Aurora AI assistant.

Gemini is asked for plain text but does not always comply, so its reply
runs through an ordered list of matchers (first hit wins). Every path,
including the canned fallbacks, ends in ``build_reply`` which adds the
per-intent suggestions, legacy purchase/login flags and metadata.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from aurora_gold.chatbot.schemas import ChatReply, Intent, ReplyMetadata, ReplySource
from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are Aurora AI, a helpful gold investment assistant. "
    "Respond naturally and conversationally about gold investment topics. "
    "Keep responses brief (1-2 sentences), helpful, and encouraging. "
    "When users show interest in buying gold, suggest they visit the Buy Gold page "
    "for easy investing with amounts like ₹500, ₹1000, ₹2500, or ₹5000. "
    "Do not use JSON format - just provide a natural, helpful response."
)

DEFAULT_GOLD_PRICE = 6850

EMPTY_MESSAGE_REPLACEMENT = (
    "I apologize for the technical difficulty. How can I help you with gold investment today?"
)

GENERIC_PRICE_MESSAGE = "I'm here to help you with gold investment. Current price is ₹{price}/g."

# ── Canned replies ────────────────────────────────────────────────────────────

FALLBACK_RESPONSES = {
    "greeting": {
        "message": "Hello! I'm Aurora AI, your gold investment assistant. Ready to explore smart gold investments?",
        "suggestions": ["Check gold prices", "Visit Buy Gold page", "Investment advice"],
    },
    "gold_general": {
        "message": "Gold is a stable investment option, trading around ₹{price}/g today. "
                   "Visit our Buy Gold page for current market conditions and easy investing!",
        "suggestions": ["Go to Buy Gold page", "Buy ₹500 gold", "Check portfolio"],
    },
    "purchase_intent": {
        "message": "Great choice! Visit the Buy Gold page to start investing. "
                   "I recommend starting with ₹1000 - ₹2500 for diversification.",
        "suggestions": ["Visit Buy Gold page", "Buy ₹1000", "Learn more"],
    },
    "portfolio_check": {
        "message": "To check your portfolio, please log in. "
                   "After investing on the Buy Gold page, you can track your holdings!",
        "suggestions": ["Login", "Visit Buy Gold page", "Investment tips"],
    },
}

DEFAULT_SUGGESTIONS = {
    "greeting":        ["Check gold prices", "Investment advice", "Portfolio help"],
    "gold_general":    ["Buy ₹500 gold", "Buy ₹1000 gold", "Check portfolio"],
    "purchase_intent": ["Buy ₹1000", "Buy ₹2500", "Learn more"],
    "portfolio_check": ["Login", "Sign up", "Investment tips"],
    "price_inquiry":   ["Buy now", "Set alert", "Price history"],
}

ERROR_MESSAGE = (
    "I apologize, but I'm having a temporary issue. Let me help you with gold investment "
    "opportunities - would you like to know about current gold prices?"
)


def default_suggestions(intent: Intent) -> List[str]:
    return list(DEFAULT_SUGGESTIONS.get(intent.category, DEFAULT_SUGGESTIONS["gold_general"]))


def build_prompt(message: str, gold_price: int, logged_in: bool) -> str:
    user = "logged in" if logged_in else "guest"
    return f'Context: Gold price ₹{gold_price}/gram. User: {user}. Message: "{message}". {SYSTEM_PROMPT}'


# ═══════════════════════════════════════════════════════════════════════════════
# REPLY MATCHERS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class ParsedReply:
    message:     str
    source:      ReplySource
    suggestions: Optional[List[str]] = None


_JSON_OBJECT_RE   = re.compile(r'\{[^{}]*"message"[^{}]*"suggestions"[^{}]*\}')
_MESSAGE_FIELD_RE = re.compile(r'"message"\s*:\s*"([^"]+)"')


def match_clean_text(text: str) -> Optional[ParsedReply]:
    if not text.startswith("{") and '"message"' not in text and len(text) < 300:
        return ParsedReply(message=text.strip(), source="gemini_text")
    return None


def match_json_object(text: str) -> Optional[ParsedReply]:
    m = _JSON_OBJECT_RE.search(text)
    if not m:
        return None
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError:
        logger.debug("JSON-looking reply did not decode: %s", m.group(0)[:60])
        return None
    message, suggestions = parsed.get("message"), parsed.get("suggestions")
    if not message or suggestions is None:
        return None
    return ParsedReply(
        message=str(message),
        source="gemini_json",
        suggestions=[str(s) for s in suggestions] if isinstance(suggestions, list) else None,
    )


def match_message_field(text: str) -> Optional[ParsedReply]:
    m = _MESSAGE_FIELD_RE.search(text)
    if m and m.group(1):
        return ParsedReply(message=m.group(1), source="gemini_extracted")
    return None


def match_first_sentence(text: str) -> Optional[ParsedReply]:
    if len(text) <= 200:
        return None
    first_sentence = text.split(".")[0] + "."
    if 10 < len(first_sentence) < 200:
        return ParsedReply(message=first_sentence.strip(), source="gemini_truncated")
    return None


REPLY_MATCHERS: List[Callable[[str], Optional[ParsedReply]]] = [
    match_clean_text,
    match_json_object,
    match_message_field,
    match_first_sentence,
]


def parse_reply(text: str, gold_price: int) -> ParsedReply:
    """Run the matchers in order; the last resort never fails."""
    for matcher in REPLY_MATCHERS:
        parsed = matcher(text)
        if parsed is not None:
            return parsed
    if len(text) < 300:
        return ParsedReply(message=text.strip(), source="gemini_fallback")
    return ParsedReply(
        message=GENERIC_PRICE_MESSAGE.format(price=gold_price),
        source="gemini_fallback",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════════════


def build_reply(parsed: ParsedReply, intent: Intent, gold_price: int) -> ChatReply:
    """Single exit point for every non-error reply."""
    message = (parsed.message or "").strip()
    if not message:
        logger.warning("Empty reply message from %s — substituting help text", parsed.source)
        message = EMPTY_MESSAGE_REPLACEMENT

    purchase = intent.category == "purchase_intent"
    return ChatReply(
        message=message,
        suggestions=parsed.suggestions or default_suggestions(intent),
        source=parsed.source,
        should_offer_purchase=purchase,
        require_login=intent.category == "portfolio_check",
        suggested_amount=1000 if purchase else None,
        metadata=ReplyMetadata(
            intent=intent.category,
            confidence=intent.confidence,
            gold_price=gold_price,
            timestamp=datetime.now(),
            source=parsed.source,
        ),
    )


def fallback_reply(intent: Intent, gold_price: Optional[int]) -> ChatReply:
    price = gold_price or DEFAULT_GOLD_PRICE
    template = FALLBACK_RESPONSES.get(intent.category, FALLBACK_RESPONSES["gold_general"])
    parsed = ParsedReply(
        message=template["message"].format(price=price),
        source="fallback",
        suggestions=list(template["suggestions"]),
    )
    return build_reply(parsed, intent, price)


def error_reply() -> ChatReply:
    return ChatReply(
        message=ERROR_MESSAGE,
        suggestions=["Check gold prices", "Investment advice", "Try again"],
        source="error",
        should_offer_purchase=True,
        require_login=False,
        suggested_amount=500,
        metadata=ReplyMetadata(
            intent="error",
            confidence=0.3,
            gold_price=DEFAULT_GOLD_PRICE,
            timestamp=datetime.now(),
            source="error",
            error=True,
        ),
    )
