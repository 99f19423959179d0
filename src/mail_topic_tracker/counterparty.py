"""Domain, company and conversation-window derivation from email addresses."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

_WORD_RE = re.compile(r"\S+")


def extract_domain(address: str | None) -> str:
    """Return the part after the first '@', or '' when there is none."""
    address = address or ""
    at = address.find("@")
    if at < 0 or at == len(address) - 1:
        return ""
    return address[at + 1 :]


def _capitalize(word: str) -> str:
    if word.isupper():
        return word  # acronyms such as "IBM" stay as written
    return word[:1].upper() + word[1:].lower()


def title_case(text: str) -> str:
    """Capitalize the first letter of every word and lower-case the rest.

    Words written entirely in capitals are left alone. Uses plain
    str.upper/str.lower so the output never depends on the process locale.
    """
    return _WORD_RE.sub(lambda m: _capitalize(m.group(0)), text)


def _domain_label(domain: str) -> str:
    parts = domain.split(".")
    label = parts[0] if len(parts) >= 2 else domain
    return title_case(label.replace("-", " "))


def derive_company(address: str | None) -> str:
    """Turn an address into a readable organization label.

    "alice@sub.example.com" -> "Sub", "bob@big-co.io" -> "Big Co".
    """
    domain = extract_domain(address)
    if not domain.strip():
        return ""
    return _domain_label(domain)


def derive_window(
    sender: str | None,
    to: Iterable[str] = (),
    cc: Iterable[str] = (),
) -> str:
    """Return the label of the most frequent other-party domain among recipients.

    Recipient domains equal to the sender's (case-insensitive) are ignored.
    On a tie the domain encountered first (To before Cc, list order) wins.
    """
    sender_domain = extract_domain(sender).lower()
    counts: Counter[str] = Counter()
    for address in [*to, *cc]:
        domain = extract_domain(address)
        if not domain.strip() or domain.lower() == sender_domain:
            continue
        counts[domain] += 1

    if not counts:
        return ""
    # most_common keeps insertion order among equal counts
    winner, _ = counts.most_common(1)[0]
    # Hyphens are kept here: "partner-firm.com" -> "Partner-Firm".
    return "-".join(title_case(part) for part in winner.split(".")[0].split("-"))
