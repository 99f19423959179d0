"""Topic detection - cascading pattern match over subject and body preview."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .constants import UNCATEGORIZED
from .counterparty import derive_company

GroupSelector = Callable[[re.Match[str]], str | None]


def longest_group(match: re.Match[str]) -> str | None:
    """Return the longest non-blank capture group of a match."""
    candidates = [g for g in match.groups() if g and g.strip()]
    if not candidates:
        return None
    # max() keeps the first of equally long groups
    return max(candidates, key=len)


@dataclass(frozen=True)
class TopicPattern:
    """A regex plus the rule picking the topic out of its match."""

    name: str
    regex: re.Pattern[str]
    select: GroupSelector = longest_group


# Highest priority first.
TOPIC_PATTERNS: tuple[TopicPattern, ...] = (
    TopicPattern("brackets", re.compile(r"\[(.*?)\]")),
    TopicPattern("parentheses", re.compile(r"\((.*?)\)")),
    TopicPattern(
        "project",
        re.compile(r"\b(?:PRJ|PROJ|PROJECT)[:\s\-]+([A-Za-z0-9._\-]+)", re.IGNORECASE),
    ),
    TopicPattern(
        "document",
        # A keyword directly followed by a letter is part of a word ("Invoice").
        re.compile(r"\b(?:RFQ|PO|INV|BOM)(?![A-Za-z])[\-_\s]*([A-Za-z0-9._\-]+)", re.IGNORECASE),
    ),
)

_ENCLOSING_PAIRS = {"[": "]", "(": ")"}
_EDGE_PUNCT_RE = re.compile(r"^[#_\-:\s]+|[#_\-:\s]+$")


def clean_topic(raw: str | None) -> str:
    """Normalize an extracted topic candidate.

    Strips one enclosing pair of brackets or parentheses and the
    characters ``# _ - :`` plus whitespace from both ends.
    """
    topic = (raw or "").strip()
    if len(topic) >= 2 and _ENCLOSING_PAIRS.get(topic[0]) == topic[-1]:
        topic = topic[1:-1]
    topic = _EDGE_PUNCT_RE.sub("", topic)
    return topic if topic.strip() else UNCATEGORIZED


def first_match(patterns: Iterable[TopicPattern], texts: Sequence[str]) -> str | None:
    """Run patterns in priority order over each text; the first match wins.

    Every text is tried with a pattern before the next pattern is
    considered, so a lower-priority pattern never beats a higher one.
    A match whose selection is blank (e.g. "[]") still decides the topic
    and cleans to "Uncategorized".
    """
    for pattern in patterns:
        for text in texts:
            match = pattern.regex.search(text)
            if match is not None:
                return clean_topic(pattern.select(match))
    return None


def detect_topic(
    subject: str | None = None,
    preview: str | None = None,
    sender: str | None = None,
    patterns: Iterable[TopicPattern] = TOPIC_PATTERNS,
) -> str:
    """Assign a topic label to a message.

    Tries the patterns against the subject, then the body preview, falls
    back to the sender's company and finally to "Uncategorized".
    """
    topic = first_match(patterns, (subject or "", preview or ""))
    if topic:
        return topic

    company = derive_company(sender)
    if company.strip():
        return company

    return UNCATEGORIZED
