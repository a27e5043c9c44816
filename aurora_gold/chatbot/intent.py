# -*- coding: utf-8 -*-
"""
Keyword intent classifier for the chat assistant.

Pure and deterministic: case-insensitive substring matching, first rule
that fits wins.
"""
from __future__ import annotations

import re

from aurora_gold.chatbot.schemas import Intent

GOLD_INVESTMENT_KEYWORDS = [
    "gold", "invest", "buy", "purchase", "portfolio", "price", "rate",
    "savings", "money", "investment", "returns", "profit", "market",
]

_GREETING_RE = re.compile(r"^(hi|hello|hey|good|greetings)")


def classify_intent(message: str) -> Intent:
    """Classify a chat message into one of the six intent categories.

    Order: purchase_intent → price_inquiry → portfolio_check → gold_general
    (all need a gold keyword) → greeting → general.
    """
    lower = message.lower()
    keywords = [k for k in GOLD_INVESTMENT_KEYWORDS if k in lower]

    if keywords:
        if "buy" in lower or "purchase" in lower:
            return Intent(category="purchase_intent", confidence=0.9, keywords=keywords)
        if "price" in lower or "rate" in lower:
            return Intent(category="price_inquiry", confidence=0.8, keywords=keywords)
        if "portfolio" in lower or "holdings" in lower:
            return Intent(category="portfolio_check", confidence=0.9, keywords=keywords)
        return Intent(category="gold_general", confidence=0.7, keywords=keywords)

    if _GREETING_RE.match(lower):
        return Intent(category="greeting", confidence=0.9)

    return Intent(category="general", confidence=0.5)
