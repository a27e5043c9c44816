# -*- coding: utf-8 -*-
"""
Gold price estimator.

Asks Gemini for an approximate 24k price per gram at most once every
``price_ai_fetch_interval_seconds`` and otherwise synthesizes a bounded
pseudo-random price. Results are cached for ``price_cache_ttl_seconds``.
"""
from __future__ import annotations

import math
import random
import time
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from aurora_gold.config import Settings, settings as default_settings
from aurora_gold.pricing.parser import parse_gold_price
from aurora_gold.pricing.schemas import PriceChange, PricePoint, PriceQuote
from aurora_gold.utils.llm_client import GeminiClient, LLMError
from aurora_gold.utils.logger import get_logger
from aurora_gold.utils.throttle import ThrottleQueue

logger = get_logger(__name__)

PRICE_PROMPT = (
    "Give me an approximate 24k gold price per gram in Indian Rupees "
    "(current range 6200-7200). Reply with just a number like 6850."
)

SIMULATED_MIN_PRICE = 6200
SIMULATED_MAX_PRICE = 7200

HISTORY_MIN_PRICE = 6000
HISTORY_MAX_PRICE = 7500

# period → (points, spacing)
HISTORY_PERIODS = {
    "1d": (24, timedelta(hours=1)),
    "1w": (7,  timedelta(days=1)),
    "1m": (30, timedelta(days=1)),
}


class PriceServiceUnavailable(Exception):
    """No cached price and the fetch path failed."""


class GoldPriceService:

    def __init__(
        self,
        llm:      GeminiClient,
        config:   Optional[Settings] = None,
        throttle: Optional[ThrottleQueue] = None,
        clock:    Callable[[], float] = time.time,
        rng:      Optional[random.Random] = None,
    ):
        config = config or default_settings
        self._llm              = llm
        self._clock            = clock
        self._rng              = rng or random.Random()
        self.base_price        = config.base_gold_price
        self.cache_ttl         = config.price_cache_ttl_seconds
        self.ai_fetch_interval = config.price_ai_fetch_interval_seconds
        self._throttle         = throttle or ThrottleQueue(
            config.price_min_request_interval, name="gold-price",
        )

        self._cached_price:  Optional[int]   = None
        self._last_updated:  Optional[float] = None
        self._last_ai_fetch: Optional[float] = None

    # ── Current price ────────────────────────────────────────────────────────

    async def get_current_price(self) -> PriceQuote:
        """Return the cached quote while fresh, otherwise fetch a new one.

        Falls back to a stale cached price when the fetch raises, and only
        raises PriceServiceUnavailable when nothing was ever cached.
        """
        now = self._clock()

        if (
            self._cached_price is not None
            and self._last_updated is not None
            and now - self._last_updated < self.cache_ttl
        ):
            return PriceQuote(
                price=self._cached_price,
                source="cache",
                timestamp=datetime.fromtimestamp(self._last_updated),
            )

        try:
            price = await self.fetch_from_api()
        except Exception as e:
            logger.error("Gold price fetch failed: %s", str(e)[:150], exc_info=True)
            if self._cached_price is not None and self._last_updated is not None:
                logger.info("Returning cached price ₹%d due to fetch error", self._cached_price)
                return PriceQuote(
                    price=self._cached_price,
                    source="cache_fallback",
                    timestamp=datetime.fromtimestamp(self._last_updated),
                    error="API temporarily unavailable",
                )
            raise PriceServiceUnavailable(
                "Gold price service unavailable and no cached data available"
            ) from e

        self._cached_price = price
        self._last_updated = now
        return PriceQuote(price=price, source="api", timestamp=datetime.fromtimestamp(now))

    async def fetch_from_api(self) -> int:
        now = self._clock()

        if self._llm.enabled and self._ai_interval_elapsed(now):
            # Attempt time, not success time: a failed call still uses up the window.
            self._last_ai_fetch = now
            try:
                text = await self._throttle.enqueue(
                    lambda: self._llm.generate(
                        PRICE_PROMPT, max_output_tokens=30, temperature=0.1, top_p=0.8,
                    )
                )
                price = parse_gold_price(text)
                if price is not None:
                    logger.info("Gemini gold price: ₹%d", price)
                    return price
                logger.warning("Could not parse Gemini price reply '%s'", text[:60])
            except LLMError as e:
                logger.warning("Gemini price call failed, using simulated price: %s", e)
        elif self._last_ai_fetch is not None:
            wait = self.ai_fetch_interval - (now - self._last_ai_fetch)
            logger.debug("Skipping Gemini price call — next call in %ds", round(wait))

        price = self.generate_realistic_price()
        logger.info("Using simulated price: ₹%d", price)
        return price

    def _ai_interval_elapsed(self, now: float) -> bool:
        return self._last_ai_fetch is None or now - self._last_ai_fetch >= self.ai_fetch_interval

    def generate_realistic_price(self) -> int:
        hour = datetime.fromtimestamp(self._clock()).hour
        time_variation   = math.sin((hour / 24) * math.pi * 2) * 50
        random_variation = (self._rng.random() - 0.5) * 100
        price = round(self.base_price + time_variation + random_variation)
        return max(SIMULATED_MIN_PRICE, min(SIMULATED_MAX_PRICE, price))

    async def refresh_price(self) -> PriceQuote:
        self._cached_price = None
        self._last_updated = None
        return await self.get_current_price()

    # ── History ──────────────────────────────────────────────────────────────

    def get_price_history(self, period: str = "1d") -> List[PricePoint]:
        """Illustrative history ending now. Never calls the model."""
        if period not in HISTORY_PERIODS:
            raise ValueError(f"Invalid period '{period}'. Use 1d, 1w, or 1m")

        points, spacing = HISTORY_PERIODS[period]
        current = self._cached_price if self._cached_price is not None else self.generate_realistic_price()
        now = datetime.fromtimestamp(self._clock())

        history = []
        for i in range(points):
            variation = (self._rng.random() - 0.5) * 200
            trend     = math.sin((i / points) * math.pi) * 150
            price     = round(current + variation + trend)
            history.append(PricePoint(
                timestamp=now - spacing * (points - 1 - i),
                price=max(HISTORY_MIN_PRICE, min(HISTORY_MAX_PRICE, price)),
                volume=math.floor(self._rng.random() * 1000) + 100,
            ))
        return history

    @staticmethod
    def calculate_price_change(current_price: float, previous_price: float) -> PriceChange:
        change = current_price - previous_price
        change_percent = (change / previous_price) * 100 if previous_price else 0.0
        return PriceChange(
            change=round(change),
            change_percent=round(change_percent, 2),
            trend="up" if change >= 0 else "down",
        )

    @property
    def throttle(self) -> ThrottleQueue:
        return self._throttle
