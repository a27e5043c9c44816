# -*- coding: utf-8 -*-
"""
Chatbot Service Orchestrator.

cache → gold price → intent → (throttled Gemini | canned fallback) → cache.
Never raises: any internal failure becomes the fixed error reply.
"""
from __future__ import annotations

import time
from typing import Callable, Optional

from aurora_gold.chatbot.intent import classify_intent
from aurora_gold.chatbot.responder import (
    build_prompt,
    build_reply,
    error_reply,
    fallback_reply,
    parse_reply,
)
from aurora_gold.chatbot.schemas import ChatContext, ChatReply, Intent
from aurora_gold.config import Settings, settings as default_settings
from aurora_gold.pricing.service import GoldPriceService
from aurora_gold.utils.llm_client import GeminiClient
from aurora_gold.utils.logger import get_logger
from aurora_gold.utils.throttle import ThrottleQueue
from aurora_gold.utils.ttl_cache import TTLCache

logger = get_logger(__name__)


class ChatbotService:

    def __init__(
        self,
        llm:           GeminiClient,
        price_service: GoldPriceService,
        config:        Optional[Settings] = None,
        throttle:      Optional[ThrottleQueue] = None,
        clock:         Callable[[], float] = time.time,
    ):
        config = config or default_settings
        self._llm      = llm
        self._prices   = price_service
        self._throttle = throttle or ThrottleQueue(
            config.chat_min_request_interval, name="chat",
        )
        self._cache: TTLCache[ChatReply] = TTLCache(
            ttl_seconds=config.chat_cache_ttl_seconds,
            max_entries=config.chat_cache_max_entries,
            clock=clock,
        )

    @staticmethod
    def cache_key(message: str, user_id: Optional[str]) -> str:
        return f"{message.lower().strip()}_{user_id or 'guest'}"

    async def process_message(
        self,
        message: str,
        context: Optional[ChatContext] = None,
    ) -> ChatReply:
        """Answer one chat message.

        Steps:
          1. Response cache lookup (message + user)
          2. Resolve gold price (context or price service)
          3. Classify intent
          4. Gemini via the throttle queue when configured and not throttled
          5. Canned fallback when Gemini was skipped or failed
          6. Cache and return
        """
        context = context or ChatContext()
        try:
            key = self.cache_key(message, context.user_id)
            cached = self._cache.get(key)
            if cached is not None:
                logger.info("Chat cache HIT: %s", key[:60])
                return cached

            gold_price = context.current_gold_price
            if not gold_price:
                gold_price = (await self._prices.get_current_price()).price

            intent = classify_intent(message)
            logger.info(
                "Intent: '%s' → %s (%.1f) | history=%d",
                message[:60], intent.category, intent.confidence,
                len(context.conversation_history),
            )

            reply = None
            if self.should_use_ai():
                try:
                    reply = await self._throttle.enqueue(
                        lambda: self._ai_reply(message, intent, gold_price, context.user_id)
                    )
                except Exception as e:
                    logger.warning("Gemini chat failed, using fallback: %s", str(e)[:150])

            if reply is None:
                reply = fallback_reply(intent, gold_price)

            self._cache.set(key, reply)
            return reply

        except Exception as e:
            logger.error("Chatbot processing error: %s", str(e)[:150], exc_info=True)
            return error_reply()

    def should_use_ai(self) -> bool:
        return self._llm.enabled and self._throttle.ready()

    async def _ai_reply(
        self,
        message:    str,
        intent:     Intent,
        gold_price: int,
        user_id:    Optional[str],
    ) -> ChatReply:
        prompt = build_prompt(message, gold_price, logged_in=bool(user_id))
        logger.debug("Chat Gemini request: %s... | intent=%s", prompt[:100], intent.category)

        text = await self._llm.generate(prompt, max_output_tokens=120, temperature=0.3, top_p=0.8)
        parsed = parse_reply(text, gold_price)
        logger.info("Gemini reply parsed via %s (%d chars)", parsed.source, len(parsed.message))
        return build_reply(parsed, intent, gold_price)

    @property
    def cache(self) -> TTLCache[ChatReply]:
        return self._cache

    @property
    def throttle(self) -> ThrottleQueue:
        return self._throttle
