from __future__ import annotations

import random

import pytest

from aurora_gold.config import Settings
from aurora_gold.pricing.service import GoldPriceService
from aurora_gold.utils.throttle import ThrottleQueue


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLM:
    """Stands in for GeminiClient: scripted replies, records every prompt."""

    def __init__(self, replies=None, enabled: bool = True, error: Exception | None = None):
        self.enabled = enabled
        self.model   = "fake-gemini"
        self.replies = list(replies or [])
        self.error   = error
        self.calls   = []

    async def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "Gold is a solid long-term hedge against inflation."

    async def aclose(self):
        pass


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, gemini_api_key="test-key", log_level="WARNING")


@pytest.fixture
def offline_settings():
    return Settings(_env_file=None, gemini_api_key="", log_level="WARNING")


@pytest.fixture
def make_price_service(clock, test_settings):
    def _make(llm=None, config=None, seed: int = 7):
        llm = llm or FakeLLM(enabled=False)
        return GoldPriceService(
            llm,
            config or test_settings,
            throttle=ThrottleQueue(0.0, name="test-price", clock=clock),
            clock=clock,
            rng=random.Random(seed),
        )
    return _make
