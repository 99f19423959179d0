"""Tests for file and sheet name sanitizers."""

from mail_topic_tracker.sanitize import sanitize_path_segment, sanitize_sheet_name


def test_path_segment_replaces_illegal_characters():
    assert sanitize_path_segment('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
    assert sanitize_path_segment("tab\there") == "tab_here"


def test_path_segment_keeps_legal_names():
    assert sanitize_path_segment("PRJ-42 kickoff.pdf") == "PRJ-42 kickoff.pdf"


def test_path_segment_fallback():
    assert sanitize_path_segment("") == "file"
    assert sanitize_path_segment("   ") == "file"
    assert sanitize_path_segment(None) == "file"
    assert sanitize_path_segment("..") == "file"


def test_sheet_name_replaces_forbidden_characters():
    name = sanitize_sheet_name("a\\b/c*d[e]f:g?h")
    assert name == "a_b_c_d_e_f_g_h"


def test_sheet_name_truncated_to_31():
    name = sanitize_sheet_name("x" * 40)
    assert name == "x" * 31


def test_sheet_name_fallback():
    assert sanitize_sheet_name("") == "Sheet"
    assert sanitize_sheet_name("   ") == "Sheet"
    assert sanitize_sheet_name(None) == "Sheet"


def test_sheet_name_never_too_long_or_forbidden():
    forbidden = set("\\/*[]:?")
    for raw in ["[PRJ-42]: kickoff? " * 5, "/" * 50, "ok", "??", "a" * 31 + "*"]:
        name = sanitize_sheet_name(raw)
        assert len(name) <= 31
        assert not forbidden & set(name)
