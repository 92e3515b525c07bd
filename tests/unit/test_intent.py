"""Tests for intent classification."""

from knowledge_federation.models.domain import IntentTag
from knowledge_federation.query.intent import classify_intent, normalize_query


def test_urgent_stakeholder_meeting():
    tags = classify_intent("urgent stakeholder meeting")
    assert IntentTag.URGENT in tags
    assert IntentTag.MEETINGS in tags
    assert IntentTag.STAKEHOLDERS in tags


def test_classification_is_deterministic():
    first = classify_intent("urgent stakeholder meeting")
    for _ in range(10):
        assert classify_intent("urgent stakeholder meeting") == first


def test_no_keywords_defaults_to_general():
    assert classify_intent("hello world") == [IntentTag.GENERAL]
    assert classify_intent("") == [IntentTag.GENERAL]


def test_tags_follow_vocabulary_order():
    tags = classify_intent("What's next for the backlog today?")
    assert tags == [IntentTag.CURRENT, IntentTag.UPCOMING, IntentTag.BACKLOG]


def test_case_insensitive():
    assert classify_intent("URGENT") == [IntentTag.URGENT]


def test_substring_matching():
    # "address" contains "add"
    assert classify_intent("address") == [IntentTag.CREATE]


def test_multi_word_keyword():
    assert IntentTag.WEEKLY in classify_intent("what happened   this\tweek")


def test_normalize_query():
    assert normalize_query("  many \n spaces\there ") == "many spaces here"
