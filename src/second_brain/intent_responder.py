"""
Intent Responder: canned assistant replies chosen by ordered keyword rules.

There is no model behind the assistant. Each rule is a case-insensitive
pattern plus a fixed reply; rules are tried in declaration order and the
first match wins (later rules are not evaluated). When nothing matches, the
fallback reply echoes the prompt, hard-cut at EXCERPT_LIMIT characters.

Examples:
    >>> classify("please summarize my week").kind
    'summary'
    >>> classify("please summarize and also brainstorm").kind
    'summary'
    >>> classify(42) == classify("")
    True
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Pattern, Tuple

EXCERPT_LIMIT = 140

FALLBACK_REPLY = (
    "I captured that. Let me know if you want a summary, plan, or brainstorm rooted in your workspace."
)
FALLBACK_KIND = "fallback"


@dataclass(frozen=True)
class IntentRule:
    kind: str
    pattern: Pattern[str]
    reply: str

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class DispatchResult:
    kind: str
    reply: str
    excerpt: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.kind == FALLBACK_KIND


RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        kind="summary",
        pattern=re.compile(r"summarize|summary|synthesis", re.IGNORECASE),
        reply=(
            "Here is a tight synthesis: capture the key themes, highlight blockers, and define one "
            "tactical next step. Tag the summary for resurfacing during weekly review."
        ),
    ),
    IntentRule(
        kind="plan",
        pattern=re.compile(r"plan|agenda|schedule", re.IGNORECASE),
        reply=(
            "Drafting an adaptive plan: prioritize your top three outcomes, shape the supporting "
            "tasks, and schedule focus blocks. Use reminders to create accountability loops."
        ),
    ),
    IntentRule(
        kind="ideate",
        pattern=re.compile(r"idea|brainstorm", re.IGNORECASE),
        reply=(
            "Let's ideate: explore adjacent possibilities, capture rapid-fire thoughts as atomic "
            "notes, and link them to existing knowledge for future synthesis."
        ),
    ),
)


def effective_input(payload: Any) -> str:
    """Non-text payloads (None, numbers, objects) classify as empty input."""
    return payload if isinstance(payload, str) else ""


def fallback_reply(text: str) -> DispatchResult:
    excerpt = text[:EXCERPT_LIMIT]
    return DispatchResult(kind=FALLBACK_KIND, reply=f"{FALLBACK_REPLY} Prompt noted: {excerpt}", excerpt=excerpt)


def classify(payload: Any, rules: Tuple[IntentRule, ...] = RULES) -> DispatchResult:
    text = effective_input(payload)
    for rule in rules:
        if rule.matches(text):
            return DispatchResult(kind=rule.kind, reply=rule.reply)
    return fallback_reply(text)
