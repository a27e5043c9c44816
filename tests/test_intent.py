import pytest

from aurora_gold.chatbot.intent import classify_intent


@pytest.mark.parametrize("message, category, confidence", [
    ("I want to buy gold",                "purchase_intent", 0.9),
    ("Can I PURCHASE some gold today?",   "purchase_intent", 0.9),
    ("What is the gold price today?",     "price_inquiry",   0.8),
    ("current gold rate please",          "price_inquiry",   0.8),
    ("show my gold holdings",             "portfolio_check", 0.9),
    ("how is my portfolio doing",         "portfolio_check", 0.9),
    ("is gold a safe place for savings",  "gold_general",    0.7),
    ("hello there",                       "greeting",        0.9),
    ("Good morning!",                     "greeting",        0.9),
    ("what's the weather like",           "general",         0.5),
])
def test_classify_intent(message, category, confidence):
    intent = classify_intent(message)
    assert intent.category == category
    assert intent.confidence == confidence


def test_purchase_wins_over_price():
    assert classify_intent("buy gold at this price").category == "purchase_intent"


def test_keywords_are_reported():
    intent = classify_intent("I want to buy gold")
    assert set(intent.keywords) == {"buy", "gold"}


def test_gold_keyword_beats_greeting():
    # "hello" alone is a greeting, but any gold keyword takes precedence
    assert classify_intent("hello, tell me about gold").category == "gold_general"


def test_greeting_has_no_keywords():
    assert classify_intent("hey").keywords == []
