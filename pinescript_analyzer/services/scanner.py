"""
Lexical scanner for Pine Script source.

Splits text into SourceLines and produces a lightweight per-line token stream
(delimiters, quote boundaries, identifiers, comment start). Every other
component works from these two views of the text.

Scanning is total: it never raises, whatever the input.
"""

from __future__ import annotations

from typing import List

from ..models.source import SourceLine, Token, TokenKind

LINE_COMMENT = "//"
QUOTES = ('"', "'")
ESCAPE = "\\"
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}


def split_lines(source: str) -> List[SourceLine]:
    """Split source on '\\n'. Lossless: join_lines(split_lines(s)) == s."""
    return [SourceLine(number=idx, text=text) for idx, text in enumerate(source.split("\n"), start=1)]


def join_lines(lines: List[SourceLine]) -> str:
    return "\n".join(line.text for line in lines)


def is_blank_line(text: str) -> bool:
    return not text.strip()


def is_comment_line(text: str) -> bool:
    stripped = text.lstrip()
    return stripped.startswith(LINE_COMMENT) or stripped.startswith("/*")


def tokenize_line(text: str) -> List[Token]:
    """
    Produce the token stream of a single physical line.

    Quote tokens are emitted for both the opening and the closing quote of a
    string literal; a quote preceded by a backslash inside a string does not
    terminate it. Nothing is emitted inside a string except its closing
    quote, and nothing at all after a comment start.
    """
    tokens: List[Token] = []
    string_char = ""
    i = 0
    n = len(text)

    while i < n:
        char = text[i]

        if string_char:
            if char == string_char and text[i - 1] != ESCAPE:
                tokens.append(Token(TokenKind.QUOTE, i + 1, char))
                string_char = ""
            i += 1
            continue

        if char in QUOTES:
            tokens.append(Token(TokenKind.QUOTE, i + 1, char))
            string_char = char
        elif text.startswith(LINE_COMMENT, i):
            tokens.append(Token(TokenKind.COMMENT_START, i + 1, LINE_COMMENT))
            break
        elif char in OPENERS:
            tokens.append(Token(TokenKind.OPEN_DELIMITER, i + 1, char))
        elif char in CLOSERS:
            tokens.append(Token(TokenKind.CLOSE_DELIMITER, i + 1, char))
        elif char.isalpha() or char == "_":
            start = i
            while i + 1 < n and (text[i + 1].isalnum() or text[i + 1] == "_"):
                i += 1
            # Members (`ta.sma` -> `sma`) and hex colors (`#FF0000`) are not identifiers
            prev = text[start - 1] if start > 0 else ""
            if prev not in (".", "#") and not prev.isdigit():
                tokens.append(Token(TokenKind.IDENTIFIER, start + 1, text[start:i + 1]))
        i += 1

    return tokens


def code_mask(text: str) -> List[bool]:
    """
    Per-column flags: True where the character is code, False inside a string
    literal (quotes included) or a trailing comment.
    """
    mask = [True] * len(text)
    open_quote = None

    for token in tokenize_line(text):
        if token.kind is TokenKind.QUOTE:
            if open_quote is None:
                open_quote = token.column
            else:
                for col in range(open_quote - 1, token.column):
                    mask[col] = False
                open_quote = None
        elif token.kind is TokenKind.COMMENT_START:
            for col in range(token.column - 1, len(text)):
                mask[col] = False
            break

    if open_quote is not None:
        for col in range(open_quote - 1, len(text)):
            mask[col] = False

    return mask


def strip_comment(text: str) -> str:
    """Return the line without its trailing `//` comment (string contents kept)."""
    for token in tokenize_line(text):
        if token.kind is TokenKind.COMMENT_START:
            return text[:token.column - 1]
    return text


def code_only(text: str) -> str:
    """Return the line with string literals and comments blanked out (same length)."""
    mask = code_mask(text)
    return "".join(ch if keep else " " for ch, keep in zip(text, mask))
