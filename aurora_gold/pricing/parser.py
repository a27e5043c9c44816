# -*- coding: utf-8 -*-
"""
Gold price parser for free-text LLM replies.

Ordered strategies, first valid candidate wins:
  1. STANDALONE number      6850
  2. CURRENCY adjacent      ₹6850 | Rs. 6850 | INR 6850 | 6850 rupees
  3. COMMA grouped          6,850
  4. ANY 4-5 digit run      (last resort, every run tried)

A candidate is valid only inside [MIN_VALID_PRICE, MAX_VALID_PRICE].
"""
from __future__ import annotations
import re
from typing import Callable, Iterable, List, Optional, Tuple

from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)

# Model estimates are trusted over a wider band than the simulator's.
MIN_VALID_PRICE = 5500
MAX_VALID_PRICE = 8000


def is_valid_gold_price(price: int) -> bool:
    return MIN_VALID_PRICE <= price <= MAX_VALID_PRICE


# -- Strategies ---------------------------------------------------------------

_STANDALONE_RE = re.compile(r"\b(\d{4,5})\b")

_CURRENCY_RES = [
    re.compile(r"₹\s*(\d{4,5})"),        # ₹6850
    re.compile(r"Rs\.?\s*(\d{4,5})", re.I),   # Rs 6850 | Rs. 6850
    re.compile(r"INR\s*(\d{4,5})", re.I),     # INR 6850
    re.compile(r"rupees?\s*(\d{4,5})", re.I), # rupees 6850
    re.compile(r"(\d{4,5})\s*rupees?", re.I), # 6850 rupees
    re.compile(r"(\d{4,5})\s*INR", re.I),     # 6850 INR
]

_COMMA_RE = re.compile(r"\b(\d{1,2},\d{3})\b")

_ANY_DIGITS_RE = re.compile(r"\d{4,5}")


def _first_valid(candidates: Iterable[str]) -> Optional[int]:
    for raw in candidates:
        price = int(raw.replace(",", ""))
        if is_valid_gold_price(price):
            return price
    return None


def _standalone(text: str) -> Optional[int]:
    m = _STANDALONE_RE.search(text)
    return _first_valid([m.group(1)]) if m else None


def _currency(text: str) -> Optional[int]:
    return _first_valid(m.group(1) for m in (r.search(text) for r in _CURRENCY_RES) if m)


def _comma(text: str) -> Optional[int]:
    m = _COMMA_RE.search(text)
    return _first_valid([m.group(1)]) if m else None


def _any_digits(text: str) -> Optional[int]:
    return _first_valid(_ANY_DIGITS_RE.findall(text))


PRICE_STRATEGIES: List[Tuple[str, Callable[[str], Optional[int]]]] = [
    ("standalone", _standalone),
    ("currency",   _currency),
    ("comma",      _comma),
    ("any_digits", _any_digits),
]


def parse_gold_price(text: Optional[str]) -> Optional[int]:
    """Return the first in-range price found in ``text``, or None."""
    if not text:
        return None
    for name, strategy in PRICE_STRATEGIES:
        price = strategy(text)
        if price is not None:
            logger.debug("Price %d parsed via %s strategy", price, name)
            return price
    logger.info("No valid price found in '%s'", text[:60])
    return None
