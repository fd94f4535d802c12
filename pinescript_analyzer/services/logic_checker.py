"""
Logic checker: line-local semantic heuristics.

- Literal division by zero (a textual match, no numeric evaluation)
- Code directly after an unconditional exit keyword
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Tuple

from ..models.diagnostics import Diagnostic, RuleCategory, Severity
from ..models.source import SourceLine
from .scanner import code_only, is_blank_line, is_comment_line

# `/0`, `/ 0`, `/0.0`, `/ 0.` but not `/0.5` or `/05`
_DIVISION_BY_ZERO_RE = re.compile(r"(?<!/)/(?!/)\s*0+(?:\.0*)?(?![\w.])")


def check_logic(lines: Sequence[SourceLine], exit_keywords: Iterable[str]) -> Tuple[List[Diagnostic], List[Diagnostic]]:
    """
    Returns:
        (errors, warnings)
    """
    errors: List[Diagnostic] = []
    warnings: List[Diagnostic] = []
    exit_re = _exit_keyword_pattern(exit_keywords)

    for index, line in enumerate(lines):
        if is_comment_line(line.text) or is_blank_line(line.text):
            continue

        for match in _DIVISION_BY_ZERO_RE.finditer(code_only(line.text)):
            errors.append(
                Diagnostic(
                    line=line.number,
                    column=match.start() + 1,
                    message="Division by zero",
                    severity=Severity.ERROR,
                    code="division_by_zero",
                    category=RuleCategory.LOGIC,
                    suggestion="Add zero check before division",
                )
            )

        m_exit = exit_re.match(line.text.strip()) if exit_re else None
        if not m_exit or index + 1 >= len(lines):
            continue
        following = lines[index + 1]
        if is_blank_line(following.text) or is_comment_line(following.text):
            continue
        warnings.append(
            Diagnostic(
                line=following.number,
                column=1,
                message=f"Unreachable code after {m_exit.group(1)}",
                severity=Severity.WARNING,
                code="unreachable_code",
                category=RuleCategory.LOGIC,
                suggestion="Remove unreachable code or restructure logic",
            )
        )

    return errors, warnings


def _exit_keyword_pattern(exit_keywords: Iterable[str]):
    keywords = [re.escape(k) for k in exit_keywords if k]
    if not keywords:
        return None
    return re.compile(r"^(" + "|".join(keywords) + r")\b")
