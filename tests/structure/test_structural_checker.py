"""
Tests for per-line delimiter and string termination checks.
"""

from __future__ import annotations

from pinescript_analyzer.services.scanner import split_lines
from pinescript_analyzer.services.structural_checker import check_structure

STRUCTURAL_CODES = {"UNMATCHED_BRACKET", "UNCLOSED_BRACKET", "UNCLOSED_STRING"}


def _codes(source: str):
    return [(d.code, d.line, d.column) for d in check_structure(split_lines(source))]


def test_balanced_line_has_no_findings():
    assert _codes('plot(ta.sma(close, 14), title="SMA [14]")') == []


def test_single_unmatched_closing_paren_reported_once_at_its_column():
    assert _codes("x = 1)") == [("UNMATCHED_BRACKET", 1, 6)]


def test_unmatched_closer_after_balanced_pair():
    assert _codes("plot(close))") == [("UNMATCHED_BRACKET", 1, 12)]


def test_unclosed_bracket_points_at_last_unmatched_opener():
    # The inner `(` at column 14 is closed; the outer one at column 5 is not
    assert _codes("plot(math.max(a, b)") == [("UNCLOSED_BRACKET", 1, 5)]


def test_one_unclosed_finding_per_delimiter_kind():
    findings = _codes("x = arr[(1")

    assert ("UNCLOSED_BRACKET", 1, 8) in findings
    assert ("UNCLOSED_BRACKET", 1, 9) in findings
    assert len(findings) == 2


def test_unclosed_string_reported_at_opening_quote():
    assert _codes('title = "abc') == [("UNCLOSED_STRING", 1, 9)]


def test_escaped_quote_keeps_string_open():
    assert _codes('s = "a\\"b"') == []
    assert _codes('s = "a\\"') == [("UNCLOSED_STRING", 1, 5)]


def test_delimiters_inside_strings_and_comments_are_ignored():
    assert _codes('t = "(("') == []
    assert _codes("x = 1 // )") == []


def test_multiline_bracket_is_reported_on_both_lines():
    findings = _codes("x = math.max(1,\n     2)")

    assert findings == [("UNCLOSED_BRACKET", 1, 13), ("UNMATCHED_BRACKET", 2, 7)]


def test_diagnostics_are_errors():
    diagnostics = check_structure(split_lines("x = (1"))

    assert all(d.severity.value == "error" for d in diagnostics)
    assert {d.code for d in diagnostics} <= STRUCTURAL_CODES
