"""
Lexical units produced by the scanner.

SourceLine and Token are internal to one analysis pass; they are never part of
the report contract and are discarded when validate() returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    OPEN_DELIMITER = "open_delimiter"
    CLOSE_DELIMITER = "close_delimiter"
    QUOTE = "quote"
    IDENTIFIER = "identifier"
    COMMENT_START = "comment_start"


@dataclass(frozen=True)
class SourceLine:
    number: int  # 1-based
    text: str


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    column: int  # 1-based
    text: str
