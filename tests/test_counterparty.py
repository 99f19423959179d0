"""Tests for domain, company and window derivation."""

import pytest

from mail_topic_tracker.counterparty import derive_company, derive_window, extract_domain, title_case


@pytest.mark.parametrize(
    "address, expected",
    [
        ("alice@example.com", "example.com"),
        ("a@b@c.com", "b@c.com"),
        ("no-at-sign", ""),
        ("trailing@", ""),
        ("@leading.com", "leading.com"),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_domain(address, expected):
    assert extract_domain(address) == expected


def test_derive_company_uses_first_label():
    assert derive_company("alice@sub.example.com") == "Sub"
    assert derive_company("bob@example.com") == "Example"


def test_derive_company_empty():
    assert derive_company("") == ""
    assert derive_company(None) == ""
    assert derive_company("nobody") == ""


def test_derive_company_single_label_domain():
    assert derive_company("root@localhost") == "Localhost"


def test_derive_company_hyphens_become_spaces():
    assert derive_company("ops@big-co-group.com") == "Big Co Group"


def test_title_case_is_simple_and_predictable():
    assert title_case("aCME corp") == "Acme Corp"
    assert title_case("mixed-Case") == "Mixed-case"
    assert title_case("istanbul") == "Istanbul"
    assert title_case("") == ""


def test_window_picks_most_frequent_other_domain():
    window = derive_window(
        "carol@bigco.io",
        ["dave@acme.com", "erin@acme.com"],
        ["frank@partner.com"],
    )
    assert window == "Acme"


def test_window_ignores_sender_domain_case_insensitively():
    window = derive_window(
        "carol@bigco.io",
        ["x@BIGCO.io", "y@bigco.io", "z@bigco.io"],
        ["frank@partner.com"],
    )
    assert window == "Partner"


def test_window_tie_goes_to_first_seen():
    assert derive_window("me@home.com", ["a@first.com", "b@second.com"]) == "First"
    assert derive_window("me@home.com", ["b@second.com"], ["a@first.com"]) == "Second"


def test_window_keeps_hyphens():
    assert derive_window("me@home.com", ["a@partner-firm.com"]) == "Partner-Firm"
    assert derive_window("me@home.com", ["a@big-co-group.co.uk"]) == "Big-Co-Group"


def test_all_capital_words_are_kept():
    assert title_case("IBM corp") == "IBM Corp"
    assert derive_company("sales@IBM.COM") == "IBM"
    assert derive_company("ops@NEW-ERA.com") == "NEW ERA"
    assert derive_window("me@home.com", ["a@HP.com"]) == "HP"


def test_window_empty_when_only_internal_recipients():
    assert derive_window("me@home.com", ["you@home.com"], []) == ""
    assert derive_window("me@home.com") == ""
    assert derive_window("me@home.com", ["broken", "also-broken@"]) == ""
