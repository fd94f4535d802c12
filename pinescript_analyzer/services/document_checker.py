"""
Whole-script checks: version header, script declaration and input hygiene.
"""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from ..models.diagnostics import Diagnostic, FixRange, QuickFix, RuleCategory, Severity
from ..models.source import SourceLine
from .scanner import code_only, is_comment_line

VERSION_MARKER = "//@version="

_VERSION_RE = re.compile(r"//@version=(\d+)")
_DECLARATION_RE = re.compile(r"(?<![\w.])(?:strategy|indicator|library)\s*\(")
_STRATEGY_RE = re.compile(r"(?<![\w.])strategy\s*\(")
_NUMERIC_INPUT_RE = re.compile(r"\binput\.(?:int|float)\s*\(")


def detect_version(source: str) -> str:
    """`v6` for a `//@version=6` marker anywhere in the script, else `unknown`."""
    match = _VERSION_RE.search(source)
    return f"v{match.group(1)}" if match else "unknown"


def check_document(lines: Sequence[SourceLine], required_version: int) -> Tuple[List[Diagnostic], List[Diagnostic]]:
    """
    Returns:
        (errors, suggestions)
    """
    errors: List[Diagnostic] = []
    suggestions: List[Diagnostic] = []
    header = f"{VERSION_MARKER}{required_version}"

    first_line = lines[0].text.strip() if lines else ""
    if not first_line.startswith(VERSION_MARKER):
        errors.append(
            Diagnostic(
                line=1,
                column=1,
                message="Pine Script version declaration is required",
                severity=Severity.ERROR,
                code="MISSING_VERSION",
                category=RuleCategory.SYNTAX,
                suggestion=f'Add "{header}" as the first line',
                quick_fix=QuickFix(
                    title="Add version declaration",
                    description=f"Insert {header} at the beginning",
                    replacement_text=f"{header}\n",
                    range=FixRange(start_line=1, start_column=1, end_line=1, end_column=1),
                ),
            )
        )
    elif first_line != header:
        errors.append(
            Diagnostic(
                line=1,
                column=1,
                message=f"Pine Script v{required_version} is required",
                severity=Severity.ERROR,
                code="WRONG_VERSION",
                category=RuleCategory.SYNTAX,
                suggestion=f'Change to "{header}"',
                quick_fix=QuickFix(
                    title="Update version declaration",
                    description=f"Replace the header with {header}",
                    replacement_text=header,
                    range=FixRange(start_line=1, start_column=1, end_line=1, end_column=len(lines[0].text) + 1),
                ),
            )
        )

    code_lines = [(line, code_only(line.text)) for line in lines if not is_comment_line(line.text)]

    if not any(_DECLARATION_RE.search(code) for _, code in code_lines):
        errors.append(
            Diagnostic(
                line=1,
                column=1,
                message="Missing strategy() or indicator() declaration",
                severity=Severity.ERROR,
                code="MISSING_DECLARATION",
                category=RuleCategory.SYNTAX,
                suggestion="Add strategy() or indicator() declaration",
            )
        )

    for line, code in code_lines:
        m_strategy = _STRATEGY_RE.search(code)
        if m_strategy and "overlay" not in code:
            suggestions.append(
                Diagnostic(
                    line=line.number,
                    column=m_strategy.start() + 1,
                    message="Consider specifying overlay parameter",
                    severity=Severity.INFO,
                    code="MISSING_OVERLAY",
                    category=RuleCategory.STYLE,
                    suggestion="Add overlay=true or overlay=false to strategy() declaration",
                )
            )

        for m_input in _NUMERIC_INPUT_RE.finditer(code):
            if "minval" in code or "maxval" in code:
                continue
            suggestions.append(
                Diagnostic(
                    line=line.number,
                    column=m_input.start() + 1,
                    message="Consider adding input validation with minval/maxval",
                    severity=Severity.INFO,
                    code="INPUT_VALIDATION",
                    category=RuleCategory.STYLE,
                    suggestion="Add minval and maxval parameters to input functions",
                )
            )

    return errors, suggestions
