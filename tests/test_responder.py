import pytest

from aurora_gold.chatbot.intent import classify_intent
from aurora_gold.chatbot.responder import (
    DEFAULT_SUGGESTIONS,
    EMPTY_MESSAGE_REPLACEMENT,
    FALLBACK_RESPONSES,
    ParsedReply,
    build_prompt,
    build_reply,
    error_reply,
    fallback_reply,
    parse_reply,
)

PRICE = 6850


def test_clean_text_used_verbatim():
    parsed = parse_reply("  Gold is a great hedge. Start with ₹1000!  ", PRICE)
    assert parsed.source == "gemini_text"
    assert parsed.message == "Gold is a great hedge. Start with ₹1000!"


def test_json_object_with_suggestions():
    text = '{"message": "Buy a little every month.", "suggestions": ["Buy ₹500", "Learn more"]}'
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_json"
    assert parsed.message == "Buy a little every month."
    assert parsed.suggestions == ["Buy ₹500", "Learn more"]


def test_json_object_with_non_list_suggestions_uses_defaults():
    text = '{"message": "Gold is steady.", "suggestions": "Buy now"}'
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_json"
    reply = build_reply(parsed, classify_intent("tell me about gold"), PRICE)
    assert reply.suggestions == DEFAULT_SUGGESTIONS["gold_general"]


def test_json_object_with_empty_suggestions_uses_defaults():
    text = '{"message": "Gold holds value over time.", "suggestions": []}'
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_json"
    assert parsed.message == "Gold holds value over time."
    reply = build_reply(parsed, classify_intent("tell me about gold"), PRICE)
    assert reply.suggestions == DEFAULT_SUGGESTIONS["gold_general"]


def test_message_field_extracted_from_partial_json():
    text = '{"message": "Gold prices are stable right now", "suggest'
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_extracted"
    assert parsed.message == "Gold prices are stable right now"


def test_broken_json_falls_through_to_message_field():
    text = '{"message": "Invest steadily", "suggestions": [oops]}'
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_extracted"
    assert parsed.message == "Invest steadily"


def test_long_reply_truncated_to_first_sentence():
    text = "Gold has protected wealth for centuries. " + "More detail follows here " * 15
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_truncated"
    assert parsed.message == "Gold has protected wealth for centuries."


def test_long_reply_without_usable_sentence_gets_generic_message():
    text = "x" * 400
    parsed = parse_reply(text, PRICE)
    assert parsed.source == "gemini_fallback"
    assert parsed.message == f"I'm here to help you with gold investment. Current price is ₹{PRICE}/g."


def test_short_json_without_message_value_used_as_is():
    parsed = parse_reply('{"answer": 42}', PRICE)
    assert parsed.source == "gemini_fallback"
    assert parsed.message == '{"answer": 42}'


@pytest.mark.parametrize("raw", ["", "   ", "\n\t"])
def test_empty_messages_are_replaced(raw):
    reply = build_reply(parse_reply(raw, PRICE), classify_intent("hi"), PRICE)
    assert reply.message == EMPTY_MESSAGE_REPLACEMENT


def test_legacy_flags_for_purchase_intent():
    reply = build_reply(ParsedReply("Go for it", "gemini_text"), classify_intent("buy gold"), PRICE)
    assert reply.should_offer_purchase is True
    assert reply.require_login is False
    assert reply.suggested_amount == 1000
    assert reply.suggestions == DEFAULT_SUGGESTIONS["purchase_intent"]
    assert reply.metadata.intent == "purchase_intent"
    assert reply.metadata.gold_price == PRICE
    assert reply.metadata.source == "gemini_text"


def test_legacy_flags_for_portfolio_check():
    reply = build_reply(ParsedReply("Log in first", "gemini_text"), classify_intent("my gold portfolio"), PRICE)
    assert reply.should_offer_purchase is False
    assert reply.require_login is True
    assert reply.suggested_amount is None


def test_fallback_reply_per_intent():
    greeting = fallback_reply(classify_intent("hello"), PRICE)
    assert greeting.source == "fallback"
    assert greeting.message == FALLBACK_RESPONSES["greeting"]["message"]
    assert greeting.suggestions == FALLBACK_RESPONSES["greeting"]["suggestions"]

    general = fallback_reply(classify_intent("what's the weather like"), 7000)
    assert "₹7000/g" in general.message


def test_fallback_reply_without_price_uses_default():
    reply = fallback_reply(classify_intent("gold"), None)
    assert reply.metadata.gold_price == 6850


def test_error_reply_shape():
    reply = error_reply()
    assert reply.source == "error"
    assert reply.message
    assert reply.metadata.intent == "error"
    assert reply.metadata.error is True
    assert reply.suggested_amount == 500


def test_prompt_mentions_price_login_state_and_message():
    prompt = build_prompt("is gold good?", 6900, logged_in=False)
    assert prompt.startswith('Context: Gold price ₹6900/gram. User: guest. Message: "is gold good?".')
    assert "logged in" in build_prompt("hi", 6900, logged_in=True)


def test_reply_serializes_with_camel_case():
    data = fallback_reply(classify_intent("buy gold"), PRICE).model_dump(by_alias=True)
    assert data["shouldOfferPurchase"] is True
    assert data["suggestedAmount"] == 1000
    assert data["metadata"]["goldPrice"] == PRICE
