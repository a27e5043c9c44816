# -*- coding: utf-8 -*-
"""
Pydantic V2 schemas for the gold price estimator.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


PriceSource = Literal["cache", "api", "cache_fallback"]


class PriceQuote(BaseModel):
    price:     int
    source:    PriceSource
    timestamp: datetime
    currency:  str           = "INR"
    error:     Optional[str] = None


class PricePoint(BaseModel):
    timestamp: datetime
    price:     int
    volume:    int


class PriceChange(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    change:         int
    change_percent: float
    trend:          Literal["up", "down"]


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class CurrentPrice(BaseModel):
    price:     int
    currency:  str = "INR"
    unit:      str = "gram"
    timestamp: datetime
    source:    PriceSource


class MarketStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_open:     bool
    next_update: datetime


class GoldPriceResponse(BaseModel):
    current: CurrentPrice
    change:  PriceChange
    market:  MarketStatus


class PriceHistoryResponse(BaseModel):
    period: str
    data:   List[PricePoint] = Field(default_factory=list)
    count:  int
