"""
Tests for the lexical scanner.

The scanner is the leaf every other component depends on: splitting must be
lossless and tokenizing must never raise.
"""

from __future__ import annotations

from pinescript_analyzer.models.source import TokenKind
from pinescript_analyzer.services.scanner import (
    code_mask,
    code_only,
    is_blank_line,
    is_comment_line,
    join_lines,
    split_lines,
    strip_comment,
    tokenize_line,
)


def test_split_is_lossless():
    for source in ("", "\n", "a\nb", "//@version=6\nplot(close)\n", "x\r\ny"):
        assert join_lines(split_lines(source)) == source


def test_split_numbers_lines_from_one():
    lines = split_lines("a\nb\n")

    assert [line.number for line in lines] == [1, 2, 3]
    assert [line.text for line in lines] == ["a", "b", ""]


def test_empty_source_is_one_empty_line():
    lines = split_lines("")

    assert len(lines) == 1
    assert lines[0].text == ""


def test_comment_and_blank_lines_are_recognized():
    assert is_comment_line("// a comment")
    assert is_comment_line("    //@version=6")
    assert not is_comment_line("x = 1 // trailing")
    assert is_blank_line("   \t")
    assert not is_blank_line(" x")


def test_tokenize_delimiters_and_identifiers():
    tokens = tokenize_line("x = ta.sma(close, 14)")

    kinds = [t.kind for t in tokens]
    assert kinds == [
        TokenKind.IDENTIFIER,      # x
        TokenKind.IDENTIFIER,      # ta (sma is a member, not an identifier)
        TokenKind.OPEN_DELIMITER,
        TokenKind.IDENTIFIER,      # close
        TokenKind.CLOSE_DELIMITER,
    ]
    assert [t.text for t in tokens if t.kind is TokenKind.IDENTIFIER] == ["x", "ta", "close"]
    assert tokens[2].column == 11


def test_tokenize_ignores_string_contents_and_comments():
    tokens = tokenize_line('label = "(not a bracket" // plot(x')

    assert [t.kind for t in tokens] == [
        TokenKind.IDENTIFIER,
        TokenKind.QUOTE,
        TokenKind.QUOTE,
        TokenKind.COMMENT_START,
    ]
    assert tokens[1].column == 9
    assert tokens[-1].column == 26


def test_escaped_quote_does_not_close_string():
    tokens = tokenize_line('s = "a\\"b"')

    quotes = [t for t in tokens if t.kind is TokenKind.QUOTE]
    assert [q.column for q in quotes] == [5, 10]


def test_hex_colors_are_not_identifiers():
    tokens = tokenize_line("c = color.new(#FF0000, 50)")

    assert [t.text for t in tokens if t.kind is TokenKind.IDENTIFIER] == ["c", "color"]


def test_code_mask_blanks_strings_and_comments():
    line = 'x = "ab" // c'
    mask = code_mask(line)

    assert len(mask) == len(line)
    assert mask[:4] == [True] * 4
    assert mask[4:8] == [False] * 4
    assert mask[8] is True
    assert not any(mask[9:])
    assert code_only(line) == "x =" + " " * (len(line) - 3)


def test_unterminated_string_is_masked_to_end_of_line():
    assert code_only('t = "abc') == "t =     "


def test_strip_comment_keeps_slashes_inside_strings():
    assert strip_comment('url = "http://x" // note') == 'url = "http://x" '
    assert strip_comment("plot(close)") == "plot(close)"
