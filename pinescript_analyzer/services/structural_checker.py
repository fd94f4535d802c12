"""
Structural checker: delimiter balance and string termination.

Checks are per physical line. A bracket opened on one line and closed on the
next is reported on both lines (UNCLOSED_BRACKET, then UNMATCHED_BRACKET);
consumers depend on that diagnostic shape, so it is kept as is.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from ..models.diagnostics import Diagnostic, RuleCategory, Severity
from ..models.source import SourceLine, TokenKind
from .scanner import CLOSERS, OPENERS, tokenize_line


def check_structure(lines: Iterable[SourceLine]) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    for line in lines:
        diagnostics.extend(_check_line(line))
    return diagnostics


def _check_line(line: SourceLine) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    # Columns of still-open delimiters, per opener
    open_columns: Dict[str, List[int]] = {opener: [] for opener in OPENERS}
    open_quote = None

    for token in tokenize_line(line.text):
        if token.kind is TokenKind.QUOTE:
            open_quote = token if open_quote is None else None
        elif token.kind is TokenKind.OPEN_DELIMITER:
            open_columns[token.text].append(token.column)
        elif token.kind is TokenKind.CLOSE_DELIMITER:
            stack = open_columns[CLOSERS[token.text]]
            if stack:
                stack.pop()
            else:
                diagnostics.append(
                    Diagnostic(
                        line=line.number,
                        column=token.column,
                        message=f"Unmatched closing bracket '{token.text}'",
                        severity=Severity.ERROR,
                        code="UNMATCHED_BRACKET",
                        category=RuleCategory.SYNTAX,
                        suggestion=f"Remove the extra '{token.text}' or add the matching '{CLOSERS[token.text]}'",
                    )
                )

    for opener, stack in open_columns.items():
        if stack:
            diagnostics.append(
                Diagnostic(
                    line=line.number,
                    column=stack[-1],
                    message=f"Unclosed bracket '{opener}'",
                    severity=Severity.ERROR,
                    code="UNCLOSED_BRACKET",
                    category=RuleCategory.SYNTAX,
                    suggestion=f"Add the closing '{OPENERS[opener]}' on the same line",
                )
            )

    if open_quote is not None:
        diagnostics.append(
            Diagnostic(
                line=line.number,
                column=open_quote.column,
                message="Unclosed string literal",
                severity=Severity.ERROR,
                code="UNCLOSED_STRING",
                category=RuleCategory.SYNTAX,
                suggestion=f"Add the closing {open_quote.text} before the end of the line",
            )
        )

    return diagnostics
