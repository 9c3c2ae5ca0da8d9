"""Tests for the rule-based intent responder."""
import re

import pytest

from src.second_brain.intent_responder import (
    EXCERPT_LIMIT,
    FALLBACK_REPLY,
    RULES,
    IntentRule,
    classify,
    effective_input,
)

SUMMARY_REPLY = (
    "Here is a tight synthesis: capture the key themes, highlight blockers, and define one tactical "
    "next step. Tag the summary for resurfacing during weekly review."
)
PLAN_REPLY = (
    "Drafting an adaptive plan: prioritize your top three outcomes, shape the supporting tasks, and "
    "schedule focus blocks. Use reminders to create accountability loops."
)
IDEATE_REPLY = (
    "Let's ideate: explore adjacent possibilities, capture rapid-fire thoughts as atomic notes, and "
    "link them to existing knowledge for future synthesis."
)


class TestRuleMatching:
    """Each category answers with its exact canned reply."""

    @pytest.mark.parametrize("prompt", ["Summarize my notes", "give me a SUMMARY", "need a synthesis"])
    def test_summary(self, prompt):
        result = classify(prompt)
        assert result.kind == "summary"
        assert result.reply == SUMMARY_REPLY
        assert result.excerpt is None

    @pytest.mark.parametrize("prompt", ["plan my day", "what's on the Agenda", "schedule focus time"])
    def test_plan(self, prompt):
        assert classify(prompt).reply == PLAN_REPLY

    @pytest.mark.parametrize("prompt", ["I have an idea", "let's Brainstorm"])
    def test_ideate(self, prompt):
        assert classify(prompt).reply == IDEATE_REPLY

    def test_substring_match_inside_words(self):
        # Keywords are plain substrings, so "planet" counts as "plan"
        assert classify("tell me about the planet").kind == "plan"

    def test_declared_order(self):
        assert [rule.kind for rule in RULES] == ["summary", "plan", "ideate"]


class TestPrecedence:
    def test_first_match_wins(self):
        assert classify("please summarize and also brainstorm").reply == SUMMARY_REPLY

    def test_plan_beats_ideate_regardless_of_position(self):
        assert classify("brainstorm ideas, then plan").kind == "plan"

    def test_later_rules_are_not_evaluated(self):
        calls = []

        class Spy:
            def search(self, text):
                calls.append(text)
                return None

        rules = (
            IntentRule(kind="first", pattern=re.compile("hello"), reply="hi"),
            IntentRule(kind="second", pattern=Spy(), reply="never"),
        )
        assert classify("hello there", rules=rules).reply == "hi"
        assert calls == []


class TestFallback:
    def test_empty_input(self):
        result = classify("")
        assert result.is_fallback
        assert result.excerpt == ""
        assert result.reply == f"{FALLBACK_REPLY} Prompt noted: "

    def test_echoes_short_prompt(self):
        result = classify("buy oat milk")
        assert result.reply == f"{FALLBACK_REPLY} Prompt noted: buy oat milk"

    def test_truncates_to_exact_limit_without_ellipsis(self):
        prompt = "x" * 100 + "y" * 100
        result = classify(prompt)
        assert result.excerpt == prompt[:EXCERPT_LIMIT]
        assert len(result.excerpt) == 140
        assert result.reply.endswith("Prompt noted: " + prompt[:140])
        assert "..." not in result.reply

    def test_prompt_of_exactly_limit_is_kept_whole(self):
        prompt = "z" * 140
        assert classify(prompt).excerpt == prompt


class TestTotality:
    @pytest.mark.parametrize("payload", [None, 42, 3.5, ["plan"], {"prompt": "plan"}, True])
    def test_non_text_payload_matches_empty_input(self, payload):
        assert effective_input(payload) == ""
        assert classify(payload) == classify("")

    def test_pure(self):
        assert classify("agenda for monday") == classify("agenda for monday")
        assert classify("random words") == classify("random words")
