# -*- coding: utf-8 -*-
"""
FastAPI application — Aurora AI gold assistant.

Endpoints:
  POST   /api/chat                → Chat with Aurora AI (persists the session)
  GET    /api/chat/{session_id}   → Chat history
  DELETE /api/chat/{session_id}   → Soft-delete a chat session
  GET    /api/gold/price          → Current gold price per gram
  GET    /api/gold/history/{p}    → Illustrative price history (1d | 1w | 1m)
  POST   /api/gold/refresh        → Force a price refresh
  GET    /api/gold/calculator     → INR ↔ grams with transaction fee
  GET    /                        → Service info
  GET    /health                  → Health check
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from aurora_gold.chatbot.history import (
    add_message,
    count_messages,
    deactivate_session,
    get_or_create_session,
    get_session,
    recent_history,
)
from aurora_gold.chatbot.models import build_engine, build_sessionmaker, init_db
from aurora_gold.chatbot.responder import DEFAULT_GOLD_PRICE, EMPTY_MESSAGE_REPLACEMENT
from aurora_gold.chatbot.schemas import (
    ChatAIInfo,
    ChatContext,
    ChatContextOut,
    ChatMessageOut,
    ChatRequest,
    ChatResponse,
    ChatSessionOut,
)
from aurora_gold.chatbot.service import ChatbotService
from aurora_gold.config import settings
from aurora_gold.pricing.schemas import (
    CurrentPrice,
    GoldPriceResponse,
    MarketStatus,
    PriceHistoryResponse,
)
from aurora_gold.pricing.service import GoldPriceService, PriceServiceUnavailable
from aurora_gold.utils.llm_client import GeminiClient
from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)

TRANSACTION_FEE_RATE = 0.01


# ── Lifespan ──────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=== Startup: Aurora AI gold assistant ===")

    if not settings.gemini_configured:
        logger.warning("GEMINI_API_KEY is missing — chat uses canned replies, prices are simulated")
    else:
        logger.info("Gemini API key detected ✓")

    llm = GeminiClient(settings)
    prices = GoldPriceService(llm, settings)
    app.state.llm = llm
    app.state.prices = prices
    app.state.chatbot = ChatbotService(llm, prices, settings)

    engine = build_engine(settings.database_url)
    await init_db(engine)
    app.state.db_sessionmaker = build_sessionmaker(engine)

    yield

    # Cleanup
    await llm.aclose()
    await engine.dispose()
    logger.info("=== Shutdown ===")


# ── App ───────────────────────────────────────────────────────────────────────


app = FastAPI(
    title="Aurora Gold",
    description="AI chat assistant and gold price service for digital gold investing",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Dependencies ──────────────────────────────────────────────────────────────


def get_prices(request: Request) -> GoldPriceService:
    return request.app.state.prices


def get_chatbot(request: Request) -> ChatbotService:
    return request.app.state.chatbot


async def get_db(request: Request):
    """Yields an AsyncSession, closes in finally."""
    session = request.app.state.db_sessionmaker()
    try:
        yield session
    finally:
        await session.close()


# ═══════════════════════════════════════════════════════════════════════════════
# Chat endpoints
# ═══════════════════════════════════════════════════════════════════════════════


@app.post("/api/chat", response_model=ChatResponse)
async def chat_endpoint(
    chat_req: ChatRequest,
    chatbot:  ChatbotService = Depends(get_chatbot),
    prices:   GoldPriceService = Depends(get_prices),
    db=Depends(get_db),
):
    """POST /api/chat → Aurora AI reply.

    Stores the user message, asks the orchestrator, stores the reply.
    Any failure still answers with a friendly fallback (error=AI_FALLBACK).
    """
    if not chat_req.message:
        raise HTTPException(status_code=400, detail="Message is required")

    session_id = chat_req.session_id or str(uuid4())
    user_id = chat_req.user_id

    try:
        chat = await get_or_create_session(db, session_id, user_id)
        await add_message(db, chat, "user", chat_req.message)

        quote = await prices.get_current_price()
        context = ChatContext(
            user_id=user_id,
            conversation_history=await recent_history(db, chat, settings.chat_history_max_messages),
            current_gold_price=quote.price,
        )

        reply = await chatbot.process_message(chat_req.message, context)

        content = (reply.message or "").strip()
        if not content:
            logger.warning("Empty AI reply for session %s — using fallback text", session_id)
            content = EMPTY_MESSAGE_REPLACEMENT

        ai = ChatAIInfo(
            should_offer_purchase=reply.should_offer_purchase,
            require_login=reply.require_login,
            suggested_amount=reply.suggested_amount,
            intent=reply.metadata.intent,
            confidence=reply.metadata.confidence,
            source=reply.source,
        )
        saved = await add_message(db, chat, "assistant", content, metadata={
            **ai.model_dump(by_alias=True),
            "goldPrice": quote.price,
            "suggestions": reply.suggestions,
        })

        return ChatResponse(
            session_id=session_id,
            message=ChatMessageOut(
                id=saved.id,
                content=content,
                timestamp=saved.created_at,
                suggestions=reply.suggestions,
            ),
            ai=ai,
            context=ChatContextOut(
                gold_price=quote.price,
                is_logged_in=bool(user_id),
                conversation_length=await count_messages(db, chat),
            ),
        )

    except Exception as e:
        logger.error("Chat API error: %s", str(e)[:150], exc_info=True)
        await db.rollback()
        return ChatResponse(
            session_id=session_id,
            message=ChatMessageOut(
                id=int(datetime.now().timestamp() * 1000),
                content="I apologize for the technical difficulty. Gold is currently a stable "
                        "investment option. How can I help you today?",
                timestamp=datetime.now(),
                suggestions=["Check current gold prices", "Investment advice", "Start small with ₹500"],
            ),
            ai=ChatAIInfo(
                should_offer_purchase=True,
                suggested_amount=500,
                intent="general",
                confidence=0.5,
                source="fallback",
            ),
            context=ChatContextOut(
                gold_price=DEFAULT_GOLD_PRICE,
                is_logged_in=bool(user_id),
                conversation_length=1,
            ),
            error="AI_FALLBACK",
        )


@app.get("/api/chat/{session_id}", response_model=ChatSessionOut)
async def chat_history(session_id: str, user_id: Optional[str] = None, db=Depends(get_db)):
    return await get_session(db, session_id, user_id)


@app.delete("/api/chat/{session_id}")
async def delete_chat(session_id: str, user_id: Optional[str] = None, db=Depends(get_db)):
    return await deactivate_session(db, session_id, user_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Gold price endpoints
# ═══════════════════════════════════════════════════════════════════════════════


def is_market_open(now: datetime) -> bool:
    """Mock market hours: Monday-Friday, 9 AM - 6 PM."""
    return now.weekday() < 5 and 9 <= now.hour < 18


@app.get("/api/gold/price", response_model=GoldPriceResponse)
async def gold_price(prices: GoldPriceService = Depends(get_prices)):
    try:
        quote = await prices.get_current_price()
    except PriceServiceUnavailable as e:
        logger.error("Gold price fetch error: %s", e)
        raise HTTPException(status_code=503, detail="Failed to fetch gold price") from e

    now = datetime.now()
    # No real history to compare against yet, so change is reported flat.
    return GoldPriceResponse(
        current=CurrentPrice(
            price=quote.price,
            currency=quote.currency,
            timestamp=quote.timestamp,
            source=quote.source,
        ),
        change=prices.calculate_price_change(quote.price, quote.price),
        market=MarketStatus(is_open=is_market_open(now), next_update=now + timedelta(seconds=30)),
    )


@app.get("/api/gold/history/{period}", response_model=PriceHistoryResponse)
async def gold_history(period: str, prices: GoldPriceService = Depends(get_prices)):
    try:
        history = prices.get_price_history(period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return PriceHistoryResponse(period=period, data=history, count=len(history))


@app.post("/api/gold/refresh")
async def gold_refresh(prices: GoldPriceService = Depends(get_prices)):
    try:
        quote = await prices.refresh_price()
    except PriceServiceUnavailable as e:
        logger.error("Price refresh error: %s", e)
        raise HTTPException(status_code=503, detail="Failed to refresh price") from e
    return {"message": "Price refreshed successfully", "data": quote.model_dump(mode="json")}


@app.get("/api/gold/calculator")
async def gold_calculator(
    amount:    float = Query(..., description="INR amount or grams, depending on type"),
    calc_type: str = Query("inr", alias="type", description="inr | grams"),
    prices: GoldPriceService = Depends(get_prices),
):
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Valid amount is required")
    if calc_type not in ("inr", "grams"):
        raise HTTPException(status_code=400, detail='Type must be "inr" or "grams"')

    try:
        quote = await prices.get_current_price()
    except PriceServiceUnavailable as e:
        raise HTTPException(status_code=503, detail="Failed to calculate gold amount") from e
    price = quote.price

    if calc_type == "inr":
        fee = round(amount * TRANSACTION_FEE_RATE)
        calculation = {
            "input":  {"amount": amount, "type": "INR"},
            "output": {"grams": round(amount / price, 4), "pricePerGram": price},
            "fees":   {"transactionFee": fee, "totalAmount": amount + fee},
        }
    else:
        inr_amount = round(amount * price)
        fee = round(amount * price * TRANSACTION_FEE_RATE)
        calculation = {
            "input":  {"amount": amount, "type": "grams"},
            "output": {"inrAmount": inr_amount, "pricePerGram": price},
            "fees":   {"transactionFee": fee, "totalAmount": inr_amount + fee},
        }

    return {
        "calculation": calculation,
        "market": {"currentPrice": price, "timestamp": quote.timestamp},
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Info / Health
# ═══════════════════════════════════════════════════════════════════════════════


@app.get("/")
async def root():
    return {
        "name": "Aurora Gold",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health(request: Request):
    llm: GeminiClient = request.app.state.llm
    return {
        "status": "ok",
        "llm_enabled": llm.enabled,
        "llm_model": llm.model if llm.enabled else None,
        "gemini_key_present": settings.gemini_configured,
        "chat_cache_entries": len(request.app.state.chatbot.cache),
    }
