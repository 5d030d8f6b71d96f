"""
Unit tests for intent classification.
"""
import pytest

from src.services.conversation.intent import Intent, classify_intent


class TestClassifyIntent:
    """Tests for classify_intent."""

    def test_empty_deck_is_always_create(self):
        assert classify_intent("add a slide about pricing", False) == Intent.CREATE
        assert classify_intent("update everything", False) == Intent.CREATE

    @pytest.mark.parametrize("utterance", [
        "Add a slide about costs",
        "please INSERT a summary",
        "create another one on risks",
        "add more examples",
    ])
    def test_append_keywords(self, utterance):
        assert classify_intent(utterance, True) == Intent.APPEND

    @pytest.mark.parametrize("utterance", [
        "Modify the second slide",
        "update the intro",
        "change the tone",
        "edit slide 3",
        "revise the conclusion",
    ])
    def test_modify_keywords(self, utterance):
        assert classify_intent(utterance, True) == Intent.MODIFY

    def test_append_wins_over_modify(self):
        assert classify_intent("Add a slide and update the title", True) == Intent.APPEND

    def test_substring_matching(self):
        # "address" contains "add"
        assert classify_intent("Make it address security", True) == Intent.APPEND

    def test_anything_else_replaces(self):
        assert classify_intent("Now do one about cats", True) == Intent.REPLACE

    def test_empty_utterance(self):
        assert classify_intent("", True) == Intent.REPLACE
